from flask import Blueprint, request

from console_api.api.cookies import clear_auth_cookies
from console_api.api.dependencies import build_session_manager
from console_api.api.middlewares.auth_middleware import current_auth, require_auth
from console_api.api.responder import success
from console_api.api.schemas.auth_schema import RevocationResponse, RevokeSessionRequest, SessionResponse
from console_api.infrastructure.database.session import db_session

bp_sessions = Blueprint("sessions", __name__, url_prefix="/auth/sessions")


@bp_sessions.get("")
@require_auth
def list_sessions():
    auth = current_auth()

    with db_session() as session:
        sessions = build_session_manager(session).list_sessions(auth.user_id)

    items = [SessionResponse.from_info(s, current_session_id=auth.session_id) for s in sessions]
    return success("Sessions retrieved", {"sessions": items, "current_session_id": auth.session_id})


@bp_sessions.delete("")
@require_auth
def revoke_session():
    auth = current_auth()
    payload = RevokeSessionRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        deactivated = build_session_manager(session).revoke_session(auth.user_id, payload.session_id)

    response, status = success("Session revoked", {"deactivated_sessions": deactivated})
    if payload.session_id == auth.session_id:
        clear_auth_cookies(response)
    return response, status


@bp_sessions.delete("/all")
@require_auth
def revoke_all_sessions():
    auth = current_auth()

    with db_session() as session:
        result = build_session_manager(session).deactivate_all_sessions(auth.user_id)

    response, status = success(
        "Signed out of all devices",
        RevocationResponse(
            deactivated_sessions=result.deactivated_sessions,
            revoked_tokens=result.revoked_tokens,
        ),
    )
    clear_auth_cookies(response)
    return response, status


@bp_sessions.delete("/others")
@require_auth
def revoke_other_sessions():
    auth = current_auth()

    with db_session() as session:
        result = build_session_manager(session).deactivate_other_sessions(auth.user_id, auth.session_id)

    return success(
        "Signed out of other devices",
        RevocationResponse(
            deactivated_sessions=result.deactivated_sessions,
            revoked_tokens=result.revoked_tokens,
        ),
    )
