# console_api/services/password_service.py

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from console_api.core.clock import Clock, utcnow
from console_api.core.exceptions import InvalidTokenError, NotFoundError, UnauthorizedError, ValidationError
from console_api.core.interfaces.mailer import EmailMessage
from console_api.entities.auth import RevocationResult
from console_api.infrastructure.database.models.password_reset_token_model import PasswordResetTokenModel
from console_api.infrastructure.security.password_hasher import PasswordHasher
from console_api.repositories.password_reset_token_repository import PasswordResetTokenRepository
from console_api.repositories.user_repository import UserRepository
from console_api.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PasswordResetRequest:
    token: str
    reset_link: str
    expires_at: datetime
    message: EmailMessage


class PasswordService:
    """
    Password change and the forgot/reset flow.

    Any successful password update signs the user out everywhere: all refresh
    tokens revoked, all sessions deactivated.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        reset_tokens: PasswordResetTokenRepository,
        session_manager: SessionManager,
        hasher: PasswordHasher,
        public_base_url: str,
        reset_ttl_minutes: int = 60,
        min_password_length: int = 6,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._reset_tokens = reset_tokens
        self._session_manager = session_manager
        self._hasher = hasher
        self._public_base_url = public_base_url.rstrip("/")
        self._reset_ttl = timedelta(minutes=reset_ttl_minutes)
        self._min_password_length = min_password_length
        self._clock = clock

    def _check_length(self, password: str, *, label: str = "Password") -> None:
        if len(password) < self._min_password_length:
            raise ValidationError(f"{label} must be at least {self._min_password_length} characters")

    # -------------------------
    # Change (authenticated)
    # -------------------------

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> RevocationResult:
        self._check_length(new_password, label="New password")
        if new_password == current_password:
            raise ValidationError("New password must be different from current password")

        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not self._hasher.verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        self._users.update_password(
            user_id=user_id, password_hash=self._hasher.hash_password(new_password), now=self._clock()
        )
        result = self._session_manager.deactivate_all_sessions(user_id, reason="password_change")

        logger.info("Password changed", extra={"extra_data": {"event": "password_changed", "user_id": user_id}})
        return result

    # -------------------------
    # Forgot / reset
    # -------------------------

    def request_reset(self, email: str) -> PasswordResetRequest | None:
        """Returns None for an unknown email; callers answer the same way in both cases."""
        user = self._users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email", extra={"extra_data": {"event": "reset_unknown"}})
            return None

        now = self._clock()
        token = secrets.token_urlsafe(32)
        expires_at = now + self._reset_ttl

        self._reset_tokens.add(
            PasswordResetTokenModel(user_id=user.id, token=token, expires_at=expires_at, used=False, created_at=now)
        )

        reset_link = f"{self._public_base_url}/reset-password/{token}"
        message = EmailMessage(
            to=user.email,
            subject="Reset your password",
            text=(
                f"A password reset was requested for {user.email}.\n\n"
                f"Open this link to choose a new password: {reset_link}\n\n"
                "If you did not request it you can ignore this email."
            ),
            html=(
                f"<p>A password reset was requested for {user.email}.</p>"
                f'<p><a href="{reset_link}">{reset_link}</a></p>'
                "<p>If you did not request it you can ignore this email.</p>"
            ),
        )

        logger.info("Password reset requested", extra={"extra_data": {"event": "reset_requested", "user_id": user.id}})
        return PasswordResetRequest(token=token, reset_link=reset_link, expires_at=expires_at, message=message)

    def _load_reset_token(self, token: str) -> PasswordResetTokenModel:
        if not token or not token.strip():
            raise ValidationError("Token is required")

        stored = self._reset_tokens.get_by_token(token.strip())
        if stored is None or stored.expires_at <= self._clock():
            raise InvalidTokenError("Invalid or expired reset token")
        if stored.used:
            raise InvalidTokenError("Reset token has already been used")
        return stored

    def validate_reset_token(self, token: str) -> str:
        """Returns the email the token belongs to."""
        stored = self._load_reset_token(token)

        user = self._users.get_by_id(stored.user_id)
        if user is None:
            raise InvalidTokenError("Invalid or expired reset token")
        return user.email

    def reset_password(self, *, token: str, new_password: str) -> RevocationResult:
        self._check_length(new_password)
        stored = self._load_reset_token(token)

        if not self._reset_tokens.mark_used(stored.id):
            raise InvalidTokenError("Reset token has already been used")

        if not self._users.update_password(
            user_id=stored.user_id, password_hash=self._hasher.hash_password(new_password), now=self._clock()
        ):
            raise InvalidTokenError("Invalid or expired reset token")

        result = self._session_manager.deactivate_all_sessions(stored.user_id, reason="password_reset")

        logger.info(
            "Password reset completed",
            extra={"extra_data": {"event": "password_reset", "user_id": stored.user_id}},
        )
        return result
