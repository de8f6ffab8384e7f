# console_api/entities/auth.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    sid: str
    iat: int
    exp: int
    typ: str
    jti: str

    @property
    def user_id(self) -> int:
        return int(self.sub)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedRefreshToken:
    token: str
    token_hash: str
    expires_at: datetime


@dataclass(frozen=True)
class DeviceMetadata:
    ip_address: str
    user_agent: str
    device_info: str


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    session_id: str


@dataclass(frozen=True)
class SessionInfo:
    id: str
    user_id: int
    ip_address: str
    user_agent: str
    device_info: str
    is_active: bool
    last_activity_at: datetime
    expires_at: datetime
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, model) -> SessionInfo:
        return cls(
            id=model.id,
            user_id=int(model.user_id),
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            device_info=model.device_info,
            is_active=bool(model.is_active),
            last_activity_at=model.last_activity_at,
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class TokenPair:
    session_id: str
    access: IssuedToken
    refresh: IssuedRefreshToken


@dataclass(frozen=True)
class LoginResult:
    session: SessionInfo
    tokens: TokenPair


@dataclass(frozen=True)
class RevocationResult:
    deactivated_sessions: int
    revoked_tokens: int
