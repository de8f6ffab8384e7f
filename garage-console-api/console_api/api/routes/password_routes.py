from flask import Blueprint, request

from console_api.api.cookies import clear_auth_cookies
from console_api.api.dependencies import build_password_service, get_mailer
from console_api.api.middlewares.auth_middleware import current_auth, require_auth
from console_api.api.responder import success
from console_api.api.schemas.auth_schema import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    RevocationResponse,
)
from console_api.config.settings import settings
from console_api.infrastructure.mail.delivery import deliver
from console_api.infrastructure.database.session import db_session

bp_password = Blueprint("password", __name__, url_prefix="/auth")

_FORGOT_MESSAGE = "If an account exists with this email, a password reset link has been sent."


@bp_password.get("/validate-token")
def validate_token():
    token = request.args.get("token", "")

    with db_session() as session:
        email = build_password_service(session).validate_reset_token(token)

    return success("Token is valid", {"valid": True, "email": email})


@bp_password.post("/password/forgot")
def forgot_password():
    payload = ForgotPasswordRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        issued = build_password_service(session).request_reset(payload.email)

    data = None
    if issued is not None:
        deliver(get_mailer(), [issued.message])
        if settings.is_development:
            data = {"token": issued.token, "reset_link": issued.reset_link}
    return success(_FORGOT_MESSAGE, data)


@bp_password.post("/password/reset")
def reset_password():
    payload = ResetPasswordRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = build_password_service(session).reset_password(token=payload.token, new_password=payload.password)

    response, status = success(
        "Password has been reset. Sign in with your new password.",
        RevocationResponse(deactivated_sessions=result.deactivated_sessions, revoked_tokens=result.revoked_tokens),
    )
    clear_auth_cookies(response)
    return response, status


@bp_password.post("/password/change")
@require_auth
def change_password():
    auth = current_auth()
    payload = ChangePasswordRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = build_password_service(session).change_password(
            user_id=auth.user_id,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )

    response, status = success(
        "Password changed. All sessions have been signed out.",
        RevocationResponse(deactivated_sessions=result.deactivated_sessions, revoked_tokens=result.revoked_tokens),
    )
    clear_auth_cookies(response)
    return response, status
