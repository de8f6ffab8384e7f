# console_api/api/routes/user_routes.py

from flask import Blueprint, request

from console_api.api.cookies import clear_auth_cookies
from console_api.api.dependencies import build_email_change_service, build_user_service, get_mailer
from console_api.api.middlewares.auth_middleware import current_auth, require_auth
from console_api.api.responder import success
from console_api.api.schemas._datetime_serializer import serialize_ts
from console_api.api.schemas.auth_schema import RevocationResponse
from console_api.api.schemas.user_schema import ChangeEmailRequest, UpdateProfileRequest, UserResponse
from console_api.config.settings import settings
from console_api.infrastructure.mail.delivery import deliver
from console_api.infrastructure.database.session import db_session

bp_users = Blueprint("users", __name__, url_prefix="/user")


@bp_users.put("/profile")
@require_auth
def update_profile():
    auth = current_auth()
    payload = UpdateProfileRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        user = build_user_service(session).update_profile(user_id=auth.user_id, name=payload.name)

    return success("Profile updated", {"user": UserResponse.from_user(user)})


@bp_users.post("/email/change")
@require_auth
def request_email_change():
    auth = current_auth()
    payload = ChangeEmailRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        issued = build_email_change_service(session).request_change(
            user_id=auth.user_id,
            new_email=payload.new_email,
            password=payload.password,
        )

    deliver(get_mailer(), [issued.message])

    data = None
    if settings.is_development:
        data = {
            "token": issued.token,
            "confirm_link": issued.confirm_link,
            "expires_at": serialize_ts(issued.expires_at),
        }
    return success("A confirmation email has been sent to your new email address.", data)


@bp_users.post("/email/confirm")
def confirm_email_change():
    token = request.args.get("token", "")

    with db_session() as session:
        result = build_email_change_service(session).confirm_change(token)

    deliver(get_mailer(), result.notifications)

    response, status = success(
        "Email changed. All sessions have been signed out; sign in again with your new email address.",
        {
            "new_email": result.new_email,
            **RevocationResponse(
                deactivated_sessions=result.revocation.deactivated_sessions,
                revoked_tokens=result.revocation.revoked_tokens,
            ).model_dump(),
        },
    )
    clear_auth_cookies(response)
    return response, status
