# console_api/repositories/user_repository.py

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from console_api.core.base_repository import BaseRepository
from console_api.infrastructure.database.models.user_model import UserModel


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, user_id: int) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def update_password(self, *, user_id: int, password_hash: str, now: datetime) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(password_hash=password_hash, updated_at=now)
        )
        return self._rowcount(self._session.execute(stmt)) > 0

    def update_email(self, *, user_id: int, email: str, now: datetime) -> bool:
        stmt = update(UserModel).where(UserModel.id == user_id).values(email=email, updated_at=now)
        return self._rowcount(self._session.execute(stmt)) > 0

    def update_name(self, *, user_id: int, name: str, now: datetime) -> bool:
        stmt = update(UserModel).where(UserModel.id == user_id).values(name=name, updated_at=now)
        return self._rowcount(self._session.execute(stmt)) > 0
