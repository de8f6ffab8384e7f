# console_api/core/exceptions.py

class AppError(Exception):
    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message, status_code=400)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


# -------------------------
# Token / session failures (all 401)
# -------------------------

class InvalidTokenError(UnauthorizedError):
    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class ExpiredTokenError(UnauthorizedError):
    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)


class TokenNotFoundError(UnauthorizedError):
    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message)


class TokenExpiredError(UnauthorizedError):
    def __init__(self, message: str = "Refresh token has expired") -> None:
        super().__init__(message)


class TokenRevokedError(UnauthorizedError):
    """
    A refresh token that is no longer usable was presented.

    ``reuse_detected`` is True when the token was already revoked before this
    request looked at it (a replayed token), and False when this request lost
    a rotation race against a concurrent refresh of the same token.
    """

    def __init__(
        self,
        message: str = "Refresh token has been revoked",
        *,
        session_id: str | None = None,
        reuse_detected: bool = False,
    ) -> None:
        super().__init__(message)
        self.session_id = session_id
        self.reuse_detected = reuse_detected


class SessionInactiveError(UnauthorizedError):
    def __init__(self, message: str = "Session is no longer active") -> None:
        super().__init__(message)
