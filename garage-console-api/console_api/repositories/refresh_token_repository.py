# console_api/repositories/refresh_token_repository.py

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from console_api.core.base_repository import BaseRepository
from console_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel


class RefreshTokenRepository(BaseRepository[RefreshTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_hash(self, token_hash: str) -> RefreshTokenModel | None:
        # revoked rows included: reuse detection needs them
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token_hash == token_hash)
        return self._session.execute(stmt).scalar_one_or_none()

    def revoke_if_active(self, *, token_id: int, now: datetime, reason: str) -> bool:
        """
        Compare-and-set: mark the token revoked only if nobody did it first.

        Returns False when the row was already revoked, which is how the loser
        of a concurrent rotation finds out.
        """
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == token_id, RefreshTokenModel.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now, reason=reason)
        )
        return self._rowcount(self._session.execute(stmt)) == 1

    def revoke_for_session(self, *, session_id: str, now: datetime, reason: str) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.session_id == session_id, RefreshTokenModel.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now, reason=reason)
        )
        return self._rowcount(self._session.execute(stmt))

    def revoke_for_user(self, *, user_id: int, now: datetime, reason: str) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == user_id, RefreshTokenModel.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now, reason=reason)
        )
        return self._rowcount(self._session.execute(stmt))

    def revoke_for_user_except_session(
        self, *, user_id: int, except_session_id: str, now: datetime, reason: str
    ) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.session_id != except_session_id,
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=now, reason=reason)
        )
        return self._rowcount(self._session.execute(stmt))
