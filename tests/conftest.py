import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.registry import build_components
from shared.config.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'delivery.db'}",
        messaging_backend="memory",
        jwt_secret="test-secret",
        internal_api_key="test-internal-key",
        metrics_enabled=False,
        consumer_wait_seconds=0,
    )


@pytest.fixture
async def components(settings):
    components = build_components(settings)
    await components.database.create_all()
    yield components
    await components.database.dispose()


@pytest.fixture
async def db(components):
    async with components.database.session() as session:
        yield session


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client

