# console_api/api/schemas/user_schema.py
from pydantic import BaseModel, EmailStr, Field

from console_api.api.schemas._datetime_serializer import serialize_dt
from console_api.entities.user import User


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=serialize_dt(user.created_at),
            updated_at=serialize_dt(user.updated_at),
        )


class UpdateProfileRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class ChangeEmailRequest(BaseModel):
    new_email: EmailStr
    password: str = Field(min_length=1, max_length=200)
