import logging

import httpx
import pytest

from jobsearch.errors import ApiError, ConfigurationError
from jobsearch.integrations.pappers import (
    CompanyEnrichmentClient,
    build_params,
    map_company,
)
from jobsearch.models.criteria import SearchCriteria
from jobsearch.services.aggregator import ResultCollection
from jobsearch.services.progress import SearchReport

MOCK_COMPANY = {
    "siren": "443061841",
    "nom_entreprise": "GOOGLE FRANCE",
    "nom_commercial": "Google",
    "site_internet": "https://google.fr",
    "date_creation": "2002-05-16",
    "code_naf": "73.11Z",
    "libelle_code_naf": "Activités des agences de publicité",
    "forme_juridique": "SARL, société à responsabilité limitée",
    "tranche_effectif_salarie": "41",
    "nombre_etablissements": 3,
    "siege": {
        "siret": "44306184100047",
        "adresse_ligne_1": "8 RUE DE LONDRES",
        "code_postal": "75009",
        "ville": "PARIS",
    },
    "finances": [
        {"annee": 2022, "chiffre_affaires": 1_500_000, "resultat": 250_000},
        {"annee": 2021, "chiffre_affaires": 1_200_000, "resultat": -10_000},
    ],
}


def _client(settings, handler) -> CompanyEnrichmentClient:
    return CompanyEnrichmentClient(settings, transport=httpx.MockTransport(handler))


def test_build_params_only_set_criteria():
    criteria = SearchCriteria(
        exclude_closed=False, exclude_sole_proprietors=False, page_size=50
    )
    params = build_params(criteria, "key", ["5499"])
    assert params == {"api_token": "key", "par_page": "50", "page": "1"}


def test_build_params_full():
    criteria = SearchCriteria(
        query="logiciel",
        region="Bretagne",
        naf_code="62.01Z",
        revenue_min=1_000_000,
        revenue_max=5_000_000,
        net_income_min=0,
        created_after_year=2010,
        created_before_year=2020,
        headcount_min=10,
        headcount_max=250,
        page=2,
        sort_by="chiffre_affaires",
    )
    params = build_params(criteria, "key", ["5499", "5710"])
    assert params["q"] == "logiciel"
    assert params["region"] == "Bretagne"
    assert "departement" not in params
    assert params["code_naf"] == "62.01Z"
    assert params["chiffre_affaires_min"] == "1000000"
    assert params["chiffre_affaires_max"] == "5000000"
    assert params["resultat_min"] == "0"
    assert params["date_creation_min"] == "2010"
    assert params["date_creation_max"] == "2020"
    assert params["effectif_min"] == "10"
    assert params["effectif_max"] == "250"
    assert params["entreprise_cessee"] == "false"
    assert params["categorie_juridique"] == "5499,5710"
    assert params["page"] == "2"
    assert params["tri"] == "chiffre_affaires"


def test_map_company():
    company = map_company(MOCK_COMPANY)
    assert company.siren == "443061841"
    assert company.siret == "44306184100047"
    assert company.name == "GOOGLE FRANCE"
    assert company.trade_name == "Google"
    assert company.postal_code == "75009"
    assert company.department == "75"
    assert company.region == "Île-de-France"
    assert company.revenue == "1.5 M€ (bénéfice: 250 k€)"
    assert company.sector == "Activités des agences de publicité (3 établissements)"
    assert company.category == "SARL, société à responsabilité limitée"
    assert company.headcount_min == 500
    assert company.source == "API Pappers"


def test_map_company_loss_is_not_annotated():
    raw = {
        "siren": "1",
        "finances": [{"chiffre_affaires": 800, "resultat": -5}],
        "nombre_etablissements": 1,
        "libelle_code_naf": "Conseil",
    }
    company = map_company(raw)
    assert company.revenue == "800 €"
    assert company.sector == "Conseil"


def test_map_company_profit_without_revenue():
    company = map_company({"siren": "1", "finances": [{"resultat": 1000}]})
    assert company.revenue is None


def test_map_company_null_finances():
    company = map_company({"siren": "1", "nom_entreprise": "A", "finances": None})
    assert company.name == "A"
    assert company.revenue is None


def test_map_company_site_count_without_naf_label():
    company = map_company({"siren": "1", "nombre_etablissements": 3})
    assert company.sector == "3 établissements"


@pytest.mark.asyncio
async def test_search_companies(settings):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"resultats": [MOCK_COMPANY], "total": 1})

    client = _client(settings, handler)
    companies = await client.search_companies(SearchCriteria(department="75"))

    assert len(companies) == 1
    request = captured[0]
    assert request.url.path == "/v2/recherche"
    assert request.url.params["api_token"] == "pk-secret"
    assert request.url.params["departement"] == "75"


@pytest.mark.asyncio
async def test_search_companies_masks_key_in_logs(settings, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"resultats": []})

    client = _client(settings, handler)
    with caplog.at_level(logging.INFO, logger="jobsearch.integrations.pappers"):
        await client.search_companies(SearchCriteria())

    assert "***" in caplog.text
    assert "pk-secret" not in caplog.text


@pytest.mark.asyncio
async def test_search_companies_error_status(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="invalid api_token")

    client = _client(settings, handler)
    with pytest.raises(ApiError) as excinfo:
        await client.search_companies(SearchCriteria())
    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_missing_key_makes_no_call(settings):
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    no_key = settings.model_copy(update={"pappers_api_key": ""})
    client = CompanyEnrichmentClient(no_key, transport=httpx.MockTransport(handler))
    with pytest.raises(ConfigurationError):
        await client.search_companies(SearchCriteria())
    with pytest.raises(ConfigurationError):
        await client.get_by_siren("443061841")
    assert calls == []


@pytest.mark.asyncio
async def test_get_by_siren(settings):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=MOCK_COMPANY)

    client = _client(settings, handler)
    company = await client.get_by_siren("443061841")

    assert company.name == "GOOGLE FRANCE"
    assert captured[0].url.path == "/v2/entreprise"
    assert captured[0].url.params["siren"] == "443061841"


@pytest.mark.asyncio
async def test_same_siren_twice_is_stored_once(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        renamed = {**MOCK_COMPANY, "nom_entreprise": "GOOGLE FRANCE SARL"}
        return httpx.Response(200, json={"resultats": [MOCK_COMPANY, renamed]})

    client = _client(settings, handler)
    collection = ResultCollection()
    collection.add_companies(await client.search_companies(SearchCriteria()))

    companies = collection.companies()
    assert len(companies) == 1
    assert companies[0].name == "GOOGLE FRANCE SARL"


@pytest.mark.asyncio
async def test_search_pages_stops_on_short_page(settings):
    pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        pages.append(request.url.params["page"])
        results = [{**MOCK_COMPANY, "siren": f"{len(pages)}{n}"} for n in range(2)]
        if len(pages) == 2:
            results = results[:1]
        return httpx.Response(200, json={"resultats": results})

    client = _client(settings, handler)
    report = SearchReport()
    companies = await client.search_pages(
        SearchCriteria(page_size=2), max_pages=5, report=report
    )

    assert pages == ["1", "2"]
    assert len(companies) == 3
    assert report.total == 3


@pytest.mark.asyncio
async def test_search_companies_tolerates_null_lists(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "resultats": [
                    {"siren": "1", "nom_entreprise": "A", "finances": None},
                    {"siren": "2", "nom_entreprise": "B"},
                ],
                "total": 2,
            },
        )

    companies = await _client(settings, handler).search_companies(SearchCriteria())
    assert [company.siren for company in companies] == ["1", "2"]


@pytest.mark.asyncio
async def test_search_companies_null_results(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"resultats": None, "total": 0})

    companies = await _client(settings, handler).search_companies(SearchCriteria())
    assert companies == []
