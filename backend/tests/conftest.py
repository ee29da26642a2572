import pytest
from fastapi.testclient import TestClient

from usergate.core.config import Settings
from usergate.core.database import create_tables, make_engine, make_session_factory
from usergate.core.security import TokenClaims, TokenService, hash_password
from usergate.main import create_app
from usergate.models.user import Role
from usergate.services.user_store import UserStore

TEST_SECRET = "test-secret-that-is-comfortably-over-32-chars"


def build_settings(**overrides) -> Settings:
    values = dict(
        _env_file=None,
        app_env="test",
        jwt_secret=TEST_SECRET,
        database_url="sqlite://",
        create_tables=False,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings() -> Settings:
    return build_settings()


@pytest.fixture()
def engine():
    eng = make_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def store(engine) -> UserStore:
    return UserStore(make_session_factory(engine))


@pytest.fixture()
def tokens(settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture()
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_user(store):
    """Insert a user straight through the store (skips the HTTP layer)."""

    def _make(email="user@example.com", password="Passw0rd", name="Some User", role=Role.USER):
        return store.create(email=email, password_hash=hash_password(password), name=name, role=role)

    return _make


@pytest.fixture()
def auth_header(tokens):
    def _header(user) -> dict:
        token = tokens.issue(TokenClaims(user_id=user.id, email=user.email, role=user.role))
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture()
def admin(make_user):
    return make_user(email="admin@example.com", password="Admin1234", name="Admin User", role=Role.ADMIN)


@pytest.fixture()
def admin_headers(admin, auth_header) -> dict:
    return auth_header(admin)
