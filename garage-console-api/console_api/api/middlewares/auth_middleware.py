import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from flask import current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from console_api.api.cookies import ACCESS_COOKIE
from console_api.config.logging_config import user_id_var
from console_api.core.clock import Clock, utcnow
from console_api.core.exceptions import UnauthorizedError
from console_api.entities.auth import AuthContext
from console_api.infrastructure.database.session import db_session
from console_api.infrastructure.security.token_codec import TokenCodec
from console_api.repositories.session_repository import SessionRepository

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class AuthGuard:
    """
    Verifies the access token of the current request.

    Authorization is decided by the token alone; the session store is only
    written to record activity, and a failure there never rejects a request.
    """

    def __init__(self, codec: TokenCodec, *, track_activity: bool = True, clock: Clock = utcnow) -> None:
        self._codec = codec
        self._track_activity = track_activity
        self._clock = clock

    @staticmethod
    def extract_token() -> str:
        auth = request.headers.get("Authorization", "")
        parts = auth.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

        cookie = request.cookies.get(ACCESS_COOKIE)
        if cookie:
            return cookie

        raise UnauthorizedError("Missing access token")

    def authenticate(self) -> AuthContext:
        claims = self._codec.verify_access_token(self.extract_token())
        ctx = AuthContext(user_id=claims.user_id, session_id=claims.sid)

        if self._track_activity:
            self._touch(ctx)
        return ctx

    def _touch(self, ctx: AuthContext) -> None:
        try:
            with db_session() as session:
                SessionRepository(session).touch(session_id=ctx.session_id, now=self._clock())
        except SQLAlchemyError:
            logger.warning("Session activity update failed", exc_info=True)


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        guard: AuthGuard = current_app.extensions["auth_guard"]
        g.auth = guard.authenticate()
        user_id_var.set(str(g.auth.user_id))
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_auth() -> AuthContext:
    auth = getattr(g, "auth", None)
    if auth is None:
        raise UnauthorizedError("Missing access token")
    return auth
