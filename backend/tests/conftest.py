from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from jobsearch.api.deps import get_search_service
from jobsearch.config import Settings, get_settings
from jobsearch.main import app
from jobsearch.services.search import SearchService


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        france_travail_client_id="client-id",
        france_travail_client_secret="client-secret",
        france_travail_api_base_url="https://ft.test/partenaire",
        france_travail_token_url="https://ft.test/token",
        insee_api_key="",
        insee_api_base_url="https://insee.test/sirene",
        pappers_api_key="pk-secret",
        pappers_api_base_url="https://pappers.test/v2",
        api_token="",
    )


@pytest.fixture
def service(settings: Settings) -> SearchService:
    return SearchService(settings)


@pytest.fixture
async def client(
    settings: Settings, service: SearchService
) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_search_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
