import logging

from flask import Blueprint, request
from sqlalchemy.exc import SQLAlchemyError

from console_api.api.cookies import REFRESH_COOKIE, clear_auth_cookies, set_auth_cookies
from console_api.api.dependencies import build_session_manager, build_user_service, get_clock
from console_api.api.middlewares.auth_middleware import current_auth, require_auth
from console_api.api.request_metadata import get_device_metadata
from console_api.api.responder import success
from console_api.api.schemas.auth_schema import LoginRequest, RefreshRequest, TokenPairResponse
from console_api.api.schemas.user_schema import UserResponse
from console_api.config.settings import settings
from console_api.core.exceptions import TokenRevokedError, ValidationError
from console_api.infrastructure.database.session import db_session

bp_auth = Blueprint("auth", __name__, url_prefix="/auth")

logger = logging.getLogger(__name__)


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))
    device = get_device_metadata()

    with db_session() as session:
        user = build_user_service(session).authenticate(email=payload.email, password=payload.password)
        result = build_session_manager(session).login(user.id, device)

    response, status = success("Signed in successfully", TokenPairResponse.from_pair(result.tokens))
    set_auth_cookies(response, result.tokens, clock=get_clock())
    return response, status


def _presented_refresh_token() -> str:
    # an explicit body wins over the cookie
    raw = RefreshRequest.model_validate(request.get_json(silent=True) or {}).refresh_token
    if not raw:
        raw = request.cookies.get(REFRESH_COOKIE)
    if not raw:
        raise ValidationError("Refresh token is required")
    return raw


def _revoke_compromised(session_id: str) -> None:
    try:
        with db_session() as session:
            build_session_manager(session).revoke_compromised_session(session_id)
    except SQLAlchemyError:
        logger.warning(
            "Session revocation after refresh token reuse failed",
            exc_info=True,
            extra={"extra_data": {"event": "session_compromised_failed", "session_id": session_id}},
        )


@bp_auth.post("/refresh")
def refresh():
    raw = _presented_refresh_token()

    try:
        with db_session() as session:
            pair = build_session_manager(session).refresh(raw)
    except TokenRevokedError as err:
        # the failed transaction is rolled back, the cascade needs its own
        if err.reuse_detected and err.session_id and settings.revoke_session_on_refresh_reuse:
            _revoke_compromised(err.session_id)
        raise

    response, status = success("Tokens refreshed successfully", TokenPairResponse.from_pair(pair))
    set_auth_cookies(response, pair, clock=get_clock())
    return response, status


@bp_auth.post("/logout")
@require_auth
def logout():
    auth = current_auth()

    with db_session() as session:
        deactivated = build_session_manager(session).logout(auth.session_id)

    response, status = success("Signed out successfully", {"deactivated_sessions": deactivated})
    clear_auth_cookies(response)
    return response, status


@bp_auth.get("/whoami")
@require_auth
def whoami():
    auth = current_auth()

    with db_session() as session:
        user = build_user_service(session).get_user(auth.user_id)

    return success("Current user", {"user": UserResponse.from_user(user), "session_id": auth.session_id})
