# console_api/repositories/session_repository.py

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from console_api.core.base_repository import BaseRepository
from console_api.infrastructure.database.models.session_model import SessionModel


class SessionRepository(BaseRepository[SessionModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, session_id: str) -> SessionModel | None:
        stmt = select(SessionModel).where(SessionModel.id == session_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_for_user(self, *, session_id: str, user_id: int) -> SessionModel | None:
        stmt = select(SessionModel).where(
            SessionModel.id == session_id,
            SessionModel.user_id == user_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> list[SessionModel]:
        stmt = (
            select(SessionModel)
            .where(SessionModel.user_id == user_id)
            .order_by(SessionModel.last_activity_at.desc(), SessionModel.created_at.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def touch(self, *, session_id: str, now: datetime) -> bool:
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == session_id, SessionModel.is_active.is_(True))
            .values(last_activity_at=now, updated_at=now)
        )
        return self._rowcount(self._session.execute(stmt)) > 0

    def deactivate(self, *, session_id: str, now: datetime) -> int:
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == session_id, SessionModel.is_active.is_(True))
            .values(is_active=False, updated_at=now)
        )
        return self._rowcount(self._session.execute(stmt))

    def deactivate_all_for_user(self, *, user_id: int, now: datetime) -> int:
        stmt = (
            update(SessionModel)
            .where(SessionModel.user_id == user_id, SessionModel.is_active.is_(True))
            .values(is_active=False, updated_at=now)
        )
        return self._rowcount(self._session.execute(stmt))

    def deactivate_others_for_user(self, *, user_id: int, except_session_id: str, now: datetime) -> int:
        stmt = (
            update(SessionModel)
            .where(
                SessionModel.user_id == user_id,
                SessionModel.id != except_session_id,
                SessionModel.is_active.is_(True),
            )
            .values(is_active=False, updated_at=now)
        )
        return self._rowcount(self._session.execute(stmt))
