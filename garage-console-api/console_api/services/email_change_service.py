# console_api/services/email_change_service.py

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from console_api.core.clock import Clock, utcnow
from console_api.core.exceptions import (
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from console_api.core.interfaces.mailer import EmailMessage
from console_api.entities.auth import RevocationResult
from console_api.infrastructure.database.models.email_change_token_model import EmailChangeTokenModel
from console_api.infrastructure.security.password_hasher import PasswordHasher
from console_api.repositories.email_change_token_repository import EmailChangeTokenRepository
from console_api.repositories.user_repository import UserRepository
from console_api.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailChangeRequest:
    token: str
    confirm_link: str
    expires_at: datetime
    message: EmailMessage


@dataclass(frozen=True)
class EmailChangeResult:
    old_email: str
    new_email: str
    revocation: RevocationResult
    notifications: tuple[EmailMessage, ...]


class EmailChangeService:
    def __init__(
        self,
        *,
        users: UserRepository,
        email_tokens: EmailChangeTokenRepository,
        session_manager: SessionManager,
        hasher: PasswordHasher,
        public_base_url: str,
        ttl_minutes: int = 60 * 24,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._email_tokens = email_tokens
        self._session_manager = session_manager
        self._hasher = hasher
        self._public_base_url = public_base_url.rstrip("/")
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock

    def request_change(self, *, user_id: int, new_email: str, password: str) -> EmailChangeRequest:
        new_email = new_email.strip().lower()

        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not self._hasher.verify_password(password, user.password_hash):
            raise UnauthorizedError("Incorrect password")

        if new_email == user.email.lower():
            raise ValidationError("New email cannot be the same as current email")

        if self._users.get_by_email(new_email) is not None:
            raise ConflictError("Email is already in use by another account")

        now = self._clock()
        if self._email_tokens.get_pending_for_user(user_id=user_id, now=now) is not None:
            raise ValidationError(
                "You already have a pending email change request. "
                "Wait for it to expire or use the confirmation link sent to your email."
            )

        token = secrets.token_urlsafe(32)
        expires_at = now + self._ttl
        self._email_tokens.add(
            EmailChangeTokenModel(
                user_id=user.id,
                old_email=user.email,
                new_email=new_email,
                token=token,
                expires_at=expires_at,
                used=False,
                created_at=now,
            )
        )

        confirm_link = f"{self._public_base_url}/confirm-email-change?token={token}"
        message = EmailMessage(
            to=new_email,
            subject="Confirm your email change",
            text=(
                f"Hello {user.name},\n\n"
                f"You asked to change your email from {user.email} to {new_email}.\n"
                f"Confirm the change here: {confirm_link}\n\n"
                "The link expires in 24 hours. If you did not request this, ignore this email."
            ),
        )

        logger.info(
            "Email change requested",
            extra={"extra_data": {"event": "email_change_requested", "user_id": user.id}},
        )
        return EmailChangeRequest(token=token, confirm_link=confirm_link, expires_at=expires_at, message=message)

    def confirm_change(self, token: str) -> EmailChangeResult:
        if not token or not token.strip():
            raise ValidationError("Token is required")

        stored = self._email_tokens.get_by_token(token.strip())
        if stored is None:
            raise InvalidTokenError("Invalid or expired token")
        if stored.used:
            raise InvalidTokenError("This token has already been used")

        now = self._clock()
        if stored.expires_at <= now:
            raise InvalidTokenError("Token has expired")

        user = self._users.get_by_id(stored.user_id)
        if user is None:
            raise NotFoundError("User not found")

        if stored.old_email != user.email:
            raise ValidationError("Email change request is no longer valid. Your email may have been changed already.")

        existing = self._users.get_by_email(stored.new_email)
        if existing is not None and existing.id != user.id:
            raise ConflictError("New email is already in use by another account")

        if not self._email_tokens.mark_used(stored.id):
            raise InvalidTokenError("This token has already been used")

        self._users.update_email(user_id=user.id, email=stored.new_email, now=now)
        revocation = self._session_manager.deactivate_all_sessions(user.id, reason="email_change")

        notice = "All your sessions have been signed out. Sign in again with your new email address."
        notifications = (
            EmailMessage(
                to=stored.old_email,
                subject="Your email has been changed",
                text=(
                    f"Hello {user.name},\n\n"
                    f"Your email address was changed from {stored.old_email} to {stored.new_email}.\n"
                    f"{notice}\n\nIf you did not make this change, contact support immediately."
                ),
            ),
            EmailMessage(
                to=stored.new_email,
                subject="Email change successful",
                text=f"Hello {user.name},\n\nYour email address is now {stored.new_email}.\n{notice}",
            ),
        )

        logger.info(
            "Email changed",
            extra={"extra_data": {"event": "email_changed", "user_id": user.id, **vars(revocation)}},
        )
        return EmailChangeResult(
            old_email=stored.old_email,
            new_email=stored.new_email,
            revocation=revocation,
            notifications=notifications,
        )
