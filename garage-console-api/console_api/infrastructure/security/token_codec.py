# console_api/infrastructure/security/token_codec.py

import hashlib
import secrets
from datetime import datetime, timedelta

import jwt

from console_api.core.clock import Clock, from_timestamp, to_timestamp, utcnow
from console_api.core.exceptions import ExpiredTokenError, InvalidTokenError
from console_api.entities.auth import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    IssuedRefreshToken,
    IssuedToken,
    TokenClaims,
)

_REQUIRED_CLAIMS = ("sub", "sid", "iat", "exp", "typ", "jti")


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class TokenCodec:
    """
    Signs and verifies the two credentials handed to clients.

    Access tokens are short lived and verified from the signature alone.
    Refresh tokens are signed the same way but only become usable after the
    sha256 of the raw value is found in the refresh token store.

    Expiry is checked against the injected clock rather than by PyJWT, so
    the whole codec runs on a single notion of "now".
    """

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        audience: str,
        access_minutes: int,
        refresh_minutes: int,
        algorithm: str = "HS256",
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret is not configured")

        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._access_ttl = timedelta(minutes=access_minutes)
        self._refresh_ttl = timedelta(minutes=refresh_minutes)
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(cls, settings, *, clock: Clock = utcnow) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            access_minutes=settings.jwt_access_minutes,
            refresh_minutes=settings.jwt_refresh_minutes,
            clock=clock,
        )

    # -------------------------
    # Issue
    # -------------------------

    def _encode(self, *, user_id: int | str, session_id: str, token_type: str, expires_at: datetime, jti: str) -> str:
        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": str(user_id),
            "sid": str(session_id),
            "iat": to_timestamp(self._clock()),
            "exp": to_timestamp(expires_at),
            "jti": jti,
            "typ": token_type,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def issue_access_token(self, user_id: int | str, session_id: str) -> IssuedToken:
        expires_at = self._clock() + self._access_ttl
        token = self._encode(
            user_id=user_id,
            session_id=session_id,
            token_type=ACCESS_TOKEN_TYPE,
            expires_at=expires_at,
            jti=secrets.token_hex(16),
        )
        return IssuedToken(token=token, expires_at=expires_at)

    def issue_refresh_token(
        self, user_id: int | str, session_id: str, *, not_after: datetime | None = None
    ) -> IssuedRefreshToken:
        expires_at = self._clock() + self._refresh_ttl
        if not_after is not None and not_after < expires_at:
            expires_at = not_after

        # jti carries the entropy; the signature only guards the format
        raw = self._encode(
            user_id=user_id,
            session_id=session_id,
            token_type=REFRESH_TOKEN_TYPE,
            expires_at=expires_at,
            jti=secrets.token_urlsafe(32),
        )
        return IssuedRefreshToken(token=raw, token_hash=hash_token(raw), expires_at=expires_at)

    # -------------------------
    # Verify
    # -------------------------

    def _decode(self, token: str, *, expected_type: str, verify_expiry: bool) -> TokenClaims:
        if not token:
            raise InvalidTokenError("Token is missing")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={
                    "require": list(_REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError() from e

        try:
            claims = TokenClaims(
                sub=str(payload["sub"]),
                sid=str(payload["sid"]),
                iat=int(payload["iat"]),
                exp=int(payload["exp"]),
                typ=str(payload["typ"]),
                jti=str(payload["jti"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError() from e

        if not claims.sub or not claims.sid or not claims.sub.isdigit():
            raise InvalidTokenError()

        if claims.typ != expected_type:
            raise InvalidTokenError(f"Invalid token type: expected {expected_type} token")

        if verify_expiry and from_timestamp(claims.exp) <= self._clock():
            raise ExpiredTokenError()

        return claims

    def verify_access_token(self, token: str) -> TokenClaims:
        return self._decode(token, expected_type=ACCESS_TOKEN_TYPE, verify_expiry=True)

    def verify_refresh_token(self, raw_token: str, *, verify_expiry: bool = True) -> TokenClaims:
        return self._decode(raw_token, expected_type=REFRESH_TOKEN_TYPE, verify_expiry=verify_expiry)
