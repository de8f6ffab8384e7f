# console_api/infrastructure/database/models/email_change_token_model.py

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from console_api.core.clock import utcnow
from console_api.infrastructure.database.base_model import BaseModel, BigIntPK


class EmailChangeTokenModel(BaseModel):
    __tablename__ = "email_change_tokens"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_email: Mapped[str] = mapped_column(String(150), nullable=False)
    new_email: Mapped[str] = mapped_column(String(150), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
