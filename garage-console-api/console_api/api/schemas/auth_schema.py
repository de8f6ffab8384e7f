# console_api/api/schemas/auth_schema.py
from pydantic import BaseModel, EmailStr, Field

from console_api.api.schemas._datetime_serializer import serialize_dt, serialize_ts
from console_api.entities.auth import SessionInfo, TokenPair


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class RevokeSessionRequest(BaseModel):
    session_id: str = Field(min_length=1, max_length=64)


class TokenPairResponse(BaseModel):
    session_id: str
    access_token: str
    refresh_token: str
    access_token_expiry: int
    refresh_token_expiry: int
    token_type: str = "Bearer"

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "TokenPairResponse":
        return cls(
            session_id=pair.session_id,
            access_token=pair.access.token,
            refresh_token=pair.refresh.token,
            access_token_expiry=serialize_ts(pair.access.expires_at),
            refresh_token_expiry=serialize_ts(pair.refresh.expires_at),
        )


class SessionResponse(BaseModel):
    id: str
    ip_address: str
    user_agent: str
    device_info: str
    is_active: bool
    is_current: bool
    last_activity_at: str
    expires_at: str
    created_at: str

    @classmethod
    def from_info(cls, info: SessionInfo, *, current_session_id: str) -> "SessionResponse":
        return cls(
            id=info.id,
            ip_address=info.ip_address,
            user_agent=info.user_agent,
            device_info=info.device_info,
            is_active=info.is_active,
            is_current=info.id == current_session_id,
            last_activity_at=serialize_dt(info.last_activity_at),
            expires_at=serialize_dt(info.expires_at),
            created_at=serialize_dt(info.created_at),
        )


class RevocationResponse(BaseModel):
    deactivated_sessions: int
    revoked_tokens: int


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=1, max_length=200)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=200)
    new_password: str = Field(min_length=1, max_length=200)
