# console_api/infrastructure/database/models/refresh_token_model.py

from datetime import datetime

from sqlalchemy import CHAR, BigInteger, Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from console_api.core.clock import utcnow
from console_api.infrastructure.database.base_model import BaseModel, BigIntPK


class RefreshTokenModel(BaseModel):
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # sha256 hex of the raw token; the raw value is never stored
    token_hash: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)

    # previous link of the rotation chain
    parent_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("refresh_tokens.id"), nullable=True
    )

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    reason: Mapped[str] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_refresh_tokens_user_revoked", "user_id", "is_revoked"),
        Index("idx_refresh_tokens_session_revoked", "session_id", "is_revoked"),
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
