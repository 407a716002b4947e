from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from jobsearch.errors import AuthenticationError, SearchBusyError
from jobsearch.models import Company, JobOffer


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    with patch(
        "jobsearch.main._check_external_api",
        new_callable=AsyncMock,
        side_effect=lambda name, url, configured: (name, {"status": "ok"}),
    ):
        response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert set(data["external_apis"]) == {"france_travail", "insee_sirene", "pappers"}


@pytest.mark.asyncio
async def test_list_regions(client: AsyncClient):
    response = await client.get("/api/geo/regions")
    assert response.status_code == 200
    data = response.json()
    assert len(data["metropolitan"]) == 13
    assert "Mayotte" in data["overseas"]


@pytest.mark.asyncio
async def test_get_region(client: AsyncClient):
    response = await client.get("/api/geo/regions/Bretagne")
    assert response.status_code == 200
    assert response.json()["departments"] == ["22", "29", "35", "56"]

    response = await client.get("/api/geo/regions/Atlantis")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_department(client: AsyncClient):
    response = await client.get("/api/geo/departments/2B")
    assert response.json() == {"department": "2B", "region": "Corse"}
    response = await client.get("/api/geo/departments/99")
    assert response.json()["region"] == "Inconnue"


@pytest.mark.asyncio
async def test_request_token(client: AsyncClient, service):
    with patch.object(
        service.tokens, "authenticate", new_callable=AsyncMock, return_value="tok"
    ):
        response = await client.post("/api/auth/token")
    assert response.status_code == 200
    assert response.json() == {"status": "authenticated"}
    assert "tok" not in response.text


@pytest.mark.asyncio
async def test_request_token_rejected(client: AsyncClient, service):
    with patch.object(
        service.tokens,
        "authenticate",
        new_callable=AsyncMock,
        side_effect=AuthenticationError(401, "invalid_client"),
    ):
        response = await client.post("/api/auth/token")
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_job_search_without_token_is_bad_request(client: AsyncClient):
    response = await client.post(
        "/api/search/jobs", json={"keywords": "java", "department": "35"}
    )
    assert response.status_code == 400
    assert "missing credentials" in response.json()["detail"]


@pytest.mark.asyncio
async def test_search_with_unknown_region(client: AsyncClient):
    response = await client.post(
        "/api/search/companies", json={"scope": "region", "region": "Atlantis"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_company_search_is_queued(client: AsyncClient, service):
    with patch.object(service, "run_company_search") as run:
        response = await client.post(
            "/api/search/companies",
            json={"scope": "region", "region": "Corse", "naf_codes": ["62.01Z"]},
        )
    assert response.status_code == 202
    assert response.json() == {"status": "queued"}
    run.assert_called_once_with(["2A", "2B"], ["62.01Z"], keep_previous=False)


@pytest.mark.asyncio
async def test_search_while_busy_conflicts(client: AsyncClient, service):
    with patch.object(service, "run_company_search", side_effect=SearchBusyError()):
        response = await client.post(
            "/api/search/companies", json={"department": "75"}
        )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_enrichment_rejects_conflicting_location(client: AsyncClient):
    response = await client.post(
        "/api/search/enrichment", json={"department": "35", "region": "Bretagne"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_status(client: AsyncClient, service):
    service.collection.add_offers([JobOffer(id="1")])
    response = await client.get("/api/search/status")
    assert response.status_code == 200
    data = response.json()
    assert data["running"] is False
    assert data["offers"] == 1
    assert data["companies"] == 0
    assert data["events"] == []


@pytest.mark.asyncio
async def test_cancel_when_idle(client: AsyncClient):
    response = await client.post("/api/search/cancel")
    assert response.json() == {"cancelled": False}


@pytest.mark.asyncio
async def test_results_and_clear(client: AsyncClient, service):
    service.collection.add_companies(
        [Company(siren="2", name="beta"), Company(siren="1", name="Alpha")]
    )
    response = await client.get("/api/results")
    names = [company["name"] for company in response.json()["companies"]]
    assert names == ["Alpha", "beta"]

    response = await client.delete("/api/results")
    assert response.status_code == 204
    assert service.collection.is_empty


@pytest.mark.asyncio
async def test_export_empty_is_not_found(client: AsyncClient):
    response = await client.get("/api/export/offers.csv")
    assert response.status_code == 404
    assert response.json()["detail"] == "nothing to export"


@pytest.mark.asyncio
async def test_export_companies_csv(client: AsyncClient, service):
    service.collection.add_companies([Company(siren="1", name="Acme; SAS")])
    response = await client.get("/api/export/companies.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    assert '"Acme; SAS"' in response.text


@pytest.mark.asyncio
async def test_export_offers_json(client: AsyncClient, service):
    service.collection.add_offers([JobOffer(id="1")])
    response = await client.get("/api/export/offers.json")
    assert response.status_code == 200
    assert response.json()[0]["id"] == "1"


@pytest.mark.asyncio
async def test_export_unknown_format(client: AsyncClient):
    response = await client.get("/api/export/offers.xml")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_api_token_required_when_configured(client: AsyncClient, settings):
    settings.api_token = "s3cret"
    response = await client.get("/api/results")
    assert response.status_code == 401

    response = await client.get(
        "/api/results", headers={"Authorization": "Bearer s3cret"}
    )
    assert response.status_code == 200

    # Geography stays public
    response = await client.get("/api/geo/regions")
    assert response.status_code == 200
