# console_api/api/dependencies.py
"""
Service wiring for route handlers.

Collaborators that live for the whole app (token codec, mailer, hasher,
clock) are stored in ``app.extensions`` by ``create_app``; repositories are
bound to the request's SQLAlchemy session.
"""

from flask import current_app
from sqlalchemy.orm import Session

from console_api.config.settings import settings
from console_api.core.clock import Clock
from console_api.core.interfaces.mailer import Mailer
from console_api.infrastructure.security.password_hasher import PasswordHasher
from console_api.infrastructure.security.token_codec import TokenCodec
from console_api.repositories.email_change_token_repository import EmailChangeTokenRepository
from console_api.repositories.password_reset_token_repository import PasswordResetTokenRepository
from console_api.repositories.refresh_token_repository import RefreshTokenRepository
from console_api.repositories.session_repository import SessionRepository
from console_api.repositories.user_repository import UserRepository
from console_api.services.email_change_service import EmailChangeService
from console_api.services.password_service import PasswordService
from console_api.services.session_manager import SessionManager
from console_api.services.user_service import UserService


def get_codec() -> TokenCodec:
    return current_app.extensions["token_codec"]


def get_clock() -> Clock:
    return current_app.extensions["clock"]


def get_mailer() -> Mailer:
    return current_app.extensions["mailer"]


def get_hasher() -> PasswordHasher:
    return current_app.extensions["password_hasher"]


def build_session_manager(session: Session) -> SessionManager:
    return SessionManager(
        sessions=SessionRepository(session),
        refresh_tokens=RefreshTokenRepository(session),
        codec=get_codec(),
        session_lifetime_minutes=settings.session_lifetime_minutes,
        clock=get_clock(),
    )


def build_user_service(session: Session) -> UserService:
    return UserService(
        users=UserRepository(session),
        hasher=get_hasher(),
        min_password_length=settings.password_min_length,
        clock=get_clock(),
    )


def build_password_service(session: Session) -> PasswordService:
    return PasswordService(
        users=UserRepository(session),
        reset_tokens=PasswordResetTokenRepository(session),
        session_manager=build_session_manager(session),
        hasher=get_hasher(),
        public_base_url=settings.public_base_url,
        reset_ttl_minutes=settings.password_reset_minutes,
        min_password_length=settings.password_min_length,
        clock=get_clock(),
    )


def build_email_change_service(session: Session) -> EmailChangeService:
    return EmailChangeService(
        users=UserRepository(session),
        email_tokens=EmailChangeTokenRepository(session),
        session_manager=build_session_manager(session),
        hasher=get_hasher(),
        public_base_url=settings.public_base_url,
        ttl_minutes=settings.email_change_minutes,
        clock=get_clock(),
    )
