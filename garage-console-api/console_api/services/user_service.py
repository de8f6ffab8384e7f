# console_api/services/user_service.py

import logging

from console_api.core.clock import Clock, utcnow
from console_api.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from console_api.entities.user import User
from console_api.infrastructure.database.models.user_model import UserModel
from console_api.infrastructure.security.password_hasher import PasswordHasher
from console_api.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        *,
        users: UserRepository,
        hasher: PasswordHasher,
        min_password_length: int = 6,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._min_password_length = min_password_length
        self._clock = clock

    def create_user(self, *, email: str, name: str, password: str) -> User:
        email = email.strip().lower()
        if self._users.get_by_email(email) is not None:
            raise ConflictError("Email is already registered")

        if len(password) < self._min_password_length:
            raise ValidationError(f"Password must be at least {self._min_password_length} characters")

        now = self._clock()
        model = self._users.add(
            UserModel(
                email=email,
                name=name.strip(),
                password_hash=self._hasher.hash_password(password),
                created_at=now,
                updated_at=None,
            )
        )
        logger.info("User created", extra={"extra_data": {"event": "user_created", "user_id": model.id}})
        return User.from_model(model)

    def authenticate(self, *, email: str, password: str) -> User:
        user = self._users.get_by_email(email)

        # same message for unknown email and wrong password
        if user is None or not self._hasher.verify_password(password, user.password_hash):
            logger.warning("Login failed", extra={"extra_data": {"event": "login_failed"}})
            raise UnauthorizedError("Invalid email or password")

        return User.from_model(user)

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return User.from_model(user)

    def update_profile(self, *, user_id: int, name: str) -> User:
        name = name.strip()
        if len(name) < 2:
            raise ValidationError("Name must be at least 2 characters")
        if len(name) > 100:
            raise ValidationError("Name must not exceed 100 characters")

        if not self._users.update_name(user_id=user_id, name=name, now=self._clock()):
            raise NotFoundError("User not found")

        return self.get_user(user_id)
