"""
Test configuration and fixtures for the MediaBuzz API.

Every test gets its own data directory, so file-backed collections never leak
between tests.
"""

import random
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from mediabuzz.api.deps import ServiceContainer
from mediabuzz.api.main import create_app
from mediabuzz.settings import Settings
from mediabuzz.storage.models import new_record_id
from mediabuzz.storage.store import FileRecordStore
from mediabuzz.users.models import PlatformUser, UserStatus

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a temporary data directory, no document database."""
    return Settings(
        _env_file=None,
        env="test",
        data_dir=tmp_path / "data",
        mongodb_uri=None,
        admin_api_key=ADMIN_KEY,
        public_base_url="https://mediabuzz.test",
    )


@pytest.fixture
def store(test_settings) -> FileRecordStore:
    return FileRecordStore(test_settings.data_dir)


@pytest.fixture
def services(test_settings, store) -> ServiceContainer:
    """Service container with seeded coin randomness."""
    container = ServiceContainer(test_settings, store)
    container.shares.rng = random.Random(7)
    container.attribution.rng = random.Random(7)
    return container


@pytest.fixture
def repos(services):
    return services.repos


@pytest.fixture
def make_user(repos):
    """Factory persisting an active, verified user."""

    def _make(
        email: str,
        name: str = "Test User",
        referral_code: str | None = None,
        device_fingerprint: str | None = None,
        firebase_uid: str | None = None,
    ) -> PlatformUser:
        user = PlatformUser(
            id=new_record_id("USR"),
            email=email,
            name=name,
            status=UserStatus.ACTIVE,
            email_verified=True,
            referral_code=referral_code,
            device_fingerprint=device_fingerprint,
            firebase_uid=firebase_uid,
        )
        repos.users.add(user)
        return user

    return _make


@pytest.fixture
def client(test_settings, store) -> Generator[TestClient, None, None]:
    """
    Test client over an app sharing the test record store.

    Entering the client runs the lifespan, which builds the services.
    """
    app = create_app(settings=test_settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_services(client) -> ServiceContainer:
    """Services of the running test app, for seeding and inspection."""
    return client.app.state.services


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Key": ADMIN_KEY}
