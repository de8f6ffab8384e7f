# console_api/api/cookies.py
from flask import Response

from console_api.config.settings import settings
from console_api.core.clock import Clock, utcnow
from console_api.entities.auth import TokenPair

ACCESS_COOKIE = "atoken"
REFRESH_COOKIE = "rtoken"
SESSION_COOKIE = "sessid"


def refresh_cookie_path() -> str:
    # only sent back to the auth endpoints
    return f"{settings.api_prefix}/auth"


def _max_age(expires_at, now) -> int:
    return max(int((expires_at - now).total_seconds()), 0)


def set_auth_cookies(response: Response, pair: TokenPair, *, clock: Clock = utcnow) -> None:
    now = clock()
    common = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "domain": settings.cookie_domain,
    }

    response.set_cookie(
        ACCESS_COOKIE, pair.access.token, max_age=_max_age(pair.access.expires_at, now), path="/", **common
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh.token,
        max_age=_max_age(pair.refresh.expires_at, now),
        path=refresh_cookie_path(),
        **common,
    )
    # readable by the dashboard script; carries no credential
    response.set_cookie(
        SESSION_COOKIE,
        pair.session_id,
        max_age=_max_age(pair.refresh.expires_at, now),
        path="/",
        **{**common, "httponly": False},
    )


def clear_auth_cookies(response: Response) -> None:
    common = {"secure": settings.cookie_secure, "samesite": settings.cookie_samesite, "domain": settings.cookie_domain}
    response.delete_cookie(ACCESS_COOKIE, path="/", **common)
    response.delete_cookie(REFRESH_COOKIE, path=refresh_cookie_path(), **common)
    response.delete_cookie(SESSION_COOKIE, path="/", **common)
