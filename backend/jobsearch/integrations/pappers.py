import dataclasses
import logging

import httpx
from pydantic import ValidationError

from jobsearch.config import Settings
from jobsearch.errors import ApiError, ConfigurationError, MappingError
from jobsearch.geo import region_of
from jobsearch.models.company import Company
from jobsearch.models.criteria import SearchCriteria
from jobsearch.schemas.pappers import PappersCompanyPayload, PappersSearchResponse
from jobsearch.services.progress import CancelFlag, GroupOutcome, SearchReport
from jobsearch.utils.ranges import format_revenue

logger = logging.getLogger(__name__)

PROVIDER = "Pappers"
MASK = "***"


def build_params(
    criteria: SearchCriteria,
    api_key: str,
    legal_form_codes: list[str],
) -> dict[str, str]:
    """Translate search criteria into ``/recherche`` query parameters.

    Unset criteria are left out entirely.
    """
    params: dict[str, str] = {"api_token": api_key}

    if criteria.query:
        params["q"] = criteria.query
    if criteria.department:
        params["departement"] = criteria.department
    if criteria.region:
        params["region"] = criteria.region
    if criteria.naf_code:
        params["code_naf"] = criteria.naf_code

    optional = {
        "chiffre_affaires_min": criteria.revenue_min,
        "chiffre_affaires_max": criteria.revenue_max,
        "resultat_min": criteria.net_income_min,
        "date_creation_min": criteria.created_after_year,
        "date_creation_max": criteria.created_before_year,
        "effectif_min": criteria.headcount_min,
        "effectif_max": criteria.headcount_max,
    }
    for name, value in optional.items():
        if value is not None:
            params[name] = str(value)

    if criteria.exclude_closed:
        params["entreprise_cessee"] = "false"
    if criteria.exclude_sole_proprietors and legal_form_codes:
        params["categorie_juridique"] = ",".join(legal_form_codes)

    params["par_page"] = str(criteria.page_size)
    params["page"] = str(criteria.page)
    if criteria.sort_by:
        params["tri"] = criteria.sort_by
    return params


def mask_params(params: dict[str, str]) -> dict[str, str]:
    """Copy of ``params`` safe to log."""
    if "api_token" not in params:
        return dict(params)
    return {**params, "api_token": MASK}


def map_company(raw: dict) -> Company:
    """Flatten one Pappers company payload into a Company."""
    try:
        payload = PappersCompanyPayload.model_validate(raw)
    except ValidationError as exc:
        raise MappingError(f"Invalid Pappers payload: {exc}") from exc

    office = payload.head_office
    postal_code = office.postal_code if office else None
    department = None
    if postal_code and len(postal_code) >= 2:
        department = postal_code[:2]

    revenue = None
    if payload.finances:
        latest = payload.finances[0]
        if latest.revenue is not None:
            revenue = format_revenue(latest.revenue)
        # Profit is only shown next to a known revenue
        if revenue and latest.net_income is not None and latest.net_income > 0:
            revenue = f"{revenue} (bénéfice: {format_revenue(latest.net_income)})"

    sector = payload.naf_label
    count = payload.establishment_count
    if count is not None and count > 1:
        sites = f"{count} établissements"
        sector = f"{sector} ({sites})" if sector else sites

    return Company(
        siret=office.siret if office else None,
        siren=payload.siren,
        name=payload.name,
        trade_name=payload.trade_name,
        email=payload.email,
        phone=payload.phone,
        website=payload.website,
        address=office.address if office else None,
        postal_code=postal_code,
        city=office.city if office else None,
        department=department,
        region=region_of(department) if department else None,
        naf_code=payload.naf_code,
        naf_label=payload.naf_label,
        sector=sector,
        headcount_range=payload.headcount_range,
        category=payload.legal_form,
        revenue=revenue,
        creation_date=payload.creation_date,
        source="API Pappers",
    )


class CompanyEnrichmentClient:
    """Client for the Pappers company search and lookup API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(None, connect=self.settings.http_timeout)
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def _require_key(self) -> str:
        if not self.settings.has_pappers_api_key():
            raise ConfigurationError("Pappers API key is missing")
        return self.settings.pappers_api_key

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        url = f"{self.settings.pappers_api_base_url.rstrip('/')}/{path}"
        logger.info("Pappers GET %s params=%s", url, mask_params(params))
        async with self._client() as client:
            response = await client.get(
                url, params=params, headers={"Accept": "application/json"}
            )
        logger.info("Pappers response: HTTP %d", response.status_code)
        if response.status_code != 200:
            raise ApiError(PROVIDER, response.status_code, response.text)
        return response

    async def search_companies(self, criteria: SearchCriteria) -> list[Company]:
        api_key = self._require_key()
        params = build_params(
            criteria, api_key, self.settings.pappers_legal_form_codes
        )
        response = await self._get("recherche", params)

        try:
            body = PappersSearchResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise MappingError(f"Invalid Pappers response: {exc}") from exc

        companies: list[Company] = []
        for raw in body.results:
            try:
                companies.append(map_company(raw))
            except MappingError:
                logger.exception("Skipping unreadable Pappers company")
        logger.info("%d compan(ies) found on Pappers", len(companies))
        return companies

    async def get_by_siren(self, siren: str) -> Company:
        api_key = self._require_key()
        response = await self._get("entreprise", {"api_token": api_key, "siren": siren})
        try:
            raw = response.json()
        except ValueError as exc:
            raise MappingError(f"Invalid Pappers response for {siren}") from exc
        return map_company(raw)

    async def search_pages(
        self,
        criteria: SearchCriteria,
        *,
        max_pages: int = 1,
        cancel: CancelFlag | None = None,
        report: SearchReport | None = None,
    ) -> list[Company]:
        """Fetch ``max_pages`` consecutive result pages starting at ``criteria.page``.

        Stops early on a short page. A failing page is recorded and the next
        page is still requested.
        """
        self._require_key()
        report = report or SearchReport()
        companies: list[Company] = []

        for offset in range(max_pages):
            if cancel is not None and cancel.is_set():
                report.mark_cancelled()
                break
            page = criteria.page + offset
            label = f"Pappers page {page}"
            try:
                found = await self.search_companies(
                    dataclasses.replace(criteria, page=page)
                )
            except (ApiError, MappingError, httpx.HTTPError) as exc:
                logger.exception("Pappers search page %d failed", page)
                report.record(label, GroupOutcome.FAILED, detail=str(exc))
                continue

            outcome = GroupOutcome.OK if found else GroupOutcome.EMPTY
            report.record(label, outcome, count=len(found))
            companies.extend(found)
            if len(found) < criteria.page_size:
                break

        return companies
