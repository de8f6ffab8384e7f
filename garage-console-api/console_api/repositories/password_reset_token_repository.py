# console_api/repositories/password_reset_token_repository.py

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from console_api.core.base_repository import BaseRepository
from console_api.infrastructure.database.models.password_reset_token_model import PasswordResetTokenModel


class PasswordResetTokenRepository(BaseRepository[PasswordResetTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_token(self, token: str) -> PasswordResetTokenModel | None:
        stmt = select(PasswordResetTokenModel).where(PasswordResetTokenModel.token == token)
        return self._session.execute(stmt).scalar_one_or_none()

    def mark_used(self, token_id: int) -> bool:
        stmt = (
            update(PasswordResetTokenModel)
            .where(PasswordResetTokenModel.id == token_id, PasswordResetTokenModel.used.is_(False))
            .values(used=True)
        )
        return self._rowcount(self._session.execute(stmt)) == 1
