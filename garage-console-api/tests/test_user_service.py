import pytest

from console_api.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from console_api.infrastructure.database.session import db_session
from console_api.repositories.user_repository import UserRepository
from console_api.services.user_service import UserService


@pytest.fixture
def service_in(hasher, clock):
    def _build(session) -> UserService:
        return UserService(users=UserRepository(session), hasher=hasher, min_password_length=6, clock=clock)

    return _build


class TestUserService:
    def test_create_normalizes_email(self, service_in):
        with db_session() as session:
            user = service_in(session).create_user(email="  Ops@Example.com ", name=" Ops ", password="secret1")

        assert user.email == "ops@example.com"
        assert user.name == "Ops"

    def test_duplicate_email(self, service_in, make_user):
        make_user("ops@example.com")

        with db_session() as session:
            with pytest.raises(ConflictError):
                service_in(session).create_user(email="OPS@example.com", name="Ops", password="secret1")

    def test_short_password(self, service_in):
        with db_session() as session:
            with pytest.raises(ValidationError):
                service_in(session).create_user(email="ops@example.com", name="Ops", password="abc")

    def test_authenticate(self, service_in, make_user):
        created = make_user("ops@example.com", password="secret1")

        with db_session() as session:
            assert service_in(session).authenticate(email="ops@example.com", password="secret1").id == created.id

            with pytest.raises(UnauthorizedError):
                service_in(session).authenticate(email="ops@example.com", password="secret2")

    def test_get_unknown_user(self, service_in):
        with db_session() as session:
            with pytest.raises(NotFoundError):
                service_in(session).get_user(999)
