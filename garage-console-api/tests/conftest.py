"""
Shared fixtures.

Settings are read once at import time, so the environment is prepared here
before anything from ``console_api`` is imported.
"""

import os

os.environ["DB_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["COOKIE_SECURE"] = "false"
os.environ["JWT_SECRET"] = "test-secret-for-the-console-api-suite-0123456789"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["SESSION_ACTIVITY_TRACKING"] = "true"
os.environ["REVOKE_SESSION_ON_REFRESH_REUSE"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("MAILER_SMTP_HOST", None)

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402

from console_api.config.settings import settings  # noqa: E402
from console_api.core.interfaces.mailer import EmailMessage  # noqa: E402
from console_api.infrastructure.database.base_model import BaseModel  # noqa: E402
from console_api.infrastructure.database.session import db_session, get_engine  # noqa: E402
from console_api.infrastructure.security.password_hasher import PasswordHasher  # noqa: E402
from console_api.infrastructure.security.token_codec import TokenCodec  # noqa: E402
from console_api.repositories.refresh_token_repository import RefreshTokenRepository  # noqa: E402
from console_api.repositories.session_repository import SessionRepository  # noqa: E402
from console_api.repositories.user_repository import UserRepository  # noqa: E402
from console_api.services.session_manager import SessionManager  # noqa: E402
from console_api.services.user_service import UserService  # noqa: E402

import console_api.infrastructure.database.models  # noqa: F401, E402

DEFAULT_PASSWORD = "correct-horse-battery"


class FrozenClock:
    """Deterministic clock; whole seconds so values survive the JWT round trip."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)

    def to(self, address: str) -> list[EmailMessage]:
        return [m for m in self.sent if m.to == address]


@pytest.fixture(autouse=True)
def _reset_database():
    engine = get_engine()
    BaseModel.metadata.drop_all(engine)
    BaseModel.metadata.create_all(engine)
    yield


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 3, 14, 9, 0, 0))


@pytest.fixture
def codec(clock) -> TokenCodec:
    return TokenCodec.from_settings(settings, clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(iterations=settings.password_hash_iterations)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def make_user(hasher, clock):
    def _make(email: str = "admin@example.com", *, name: str = "Admin System", password: str = DEFAULT_PASSWORD):
        with db_session() as session:
            service = UserService(users=UserRepository(session), hasher=hasher, clock=clock)
            return service.create_user(email=email, name=name, password=password)

    return _make


@pytest.fixture
def build_manager(codec, clock):
    def _build(session, **overrides) -> SessionManager:
        kwargs = {
            "sessions": SessionRepository(session),
            "refresh_tokens": RefreshTokenRepository(session),
            "codec": codec,
            "session_lifetime_minutes": settings.session_lifetime_minutes,
            "clock": clock,
        }
        kwargs.update(overrides)
        return SessionManager(**kwargs)

    return _build


@pytest.fixture
def app(clock, mailer):
    from console_api.main import create_app

    flask_app = create_app(clock=clock, mailer=mailer)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def api():
    return settings.api_prefix


@pytest.fixture
def login(client, api):
    def _login(email: str = "admin@example.com", password: str = DEFAULT_PASSWORD, *, user_agent: str | None = None):
        headers = {"User-Agent": user_agent} if user_agent else {}
        resp = client.post(f"{api}/auth/login", json={"email": email, "password": password}, headers=headers)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login
