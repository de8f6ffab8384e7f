# console_api/entities/user.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    id: int
    email: str
    name: str
    created_at: datetime
    updated_at: Optional[datetime]

    @classmethod
    def from_model(cls, model) -> "User":
        return cls(
            id=int(model.id),
            email=model.email,
            name=model.name,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
