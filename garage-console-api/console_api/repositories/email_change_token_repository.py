# console_api/repositories/email_change_token_repository.py

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from console_api.core.base_repository import BaseRepository
from console_api.infrastructure.database.models.email_change_token_model import EmailChangeTokenModel


class EmailChangeTokenRepository(BaseRepository[EmailChangeTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_token(self, token: str) -> EmailChangeTokenModel | None:
        stmt = select(EmailChangeTokenModel).where(EmailChangeTokenModel.token == token)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_pending_for_user(self, *, user_id: int, now: datetime) -> EmailChangeTokenModel | None:
        stmt = (
            select(EmailChangeTokenModel)
            .where(
                EmailChangeTokenModel.user_id == user_id,
                EmailChangeTokenModel.used.is_(False),
                EmailChangeTokenModel.expires_at > now,
            )
            .order_by(EmailChangeTokenModel.id.desc())
        )
        return self._session.execute(stmt).scalars().first()

    def mark_used(self, token_id: int) -> bool:
        stmt = (
            update(EmailChangeTokenModel)
            .where(EmailChangeTokenModel.id == token_id, EmailChangeTokenModel.used.is_(False))
            .values(used=True)
        )
        return self._rowcount(self._session.execute(stmt)) == 1
