"""Test configuration and fixtures for the Restful Users API."""

import pytest
from fastapi.testclient import TestClient

from restful.api.deps import get_settings, get_user_repository
from restful.core.config import Settings
from restful.infrastructure.security.passwords import PasswordHasher
from restful.infrastructure.security.token_service import TokenService
from restful.main import create_app
from restful.services.user_service import UserService
from tests.fixtures.repositories import InMemoryUserRepository

TEST_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Settings isolated from any local .env, with cheap argon2 parameters."""
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        password_time_cost=1,
        password_memory_cost=1024,
        password_parallelism=1,
    )


@pytest.fixture(name="repo")
def repo_fixture() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture(name="tokens")
def tokens_fixture(settings: Settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture(name="service")
def service_fixture(repo, settings, tokens) -> UserService:
    return UserService(repo, PasswordHasher.from_settings(settings), tokens)


@pytest.fixture(name="app")
def app_fixture(settings, repo):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_user_repository] = lambda: repo
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(app) -> TestClient:
    """Test client; startup hooks (Mongo bootstrap) are not run."""
    return TestClient(app)


@pytest.fixture(name="auth_header")
def auth_header_fixture(tokens):
    def _make(user_id: str) -> dict:
        return {"Authorization": f"Bearer {tokens.create_access_token(user_id=user_id)}"}

    return _make
