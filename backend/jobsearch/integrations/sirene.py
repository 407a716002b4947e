import logging

import httpx
from pydantic import ValidationError

from jobsearch.config import Settings
from jobsearch.errors import ApiError, MappingError
from jobsearch.geo import region_of
from jobsearch.models.company import Company
from jobsearch.schemas.sirene import EstablishmentPayload, EstablishmentSearchResponse
from jobsearch.services.progress import CancelFlag, GroupOutcome, SearchReport
from jobsearch.utils.ranges import naf_label

logger = logging.getLogger(__name__)

PROVIDER = "INSEE SIRENE"
MAX_DEPARTMENTS_PER_QUERY = 10


def build_query(
    naf_code: str,
    departments: list[str],
    max_departments: int = MAX_DEPARTMENTS_PER_QUERY,
) -> str:
    """Build the SIRENE ``q`` filter for an activity code and departments.

    Establishments are matched on the commune code prefix. Only the first
    ``max_departments`` codes are used; the rest are dropped.
    """
    query = f"activitePrincipaleUniteLegale:{naf_code}"
    if not departments:
        return query
    if len(departments) == 1:
        return f"{query} AND codeCommuneEtablissement:{departments[0]}*"

    kept = departments[:max_departments]
    if len(departments) > max_departments:
        logger.debug(
            "SIRENE query limited to %d departments, dropped %s",
            max_departments,
            departments[max_departments:],
        )
    group = " OR ".join(f"codeCommuneEtablissement:{code}*" for code in kept)
    return f"{query} AND ({group})"


def map_establishment(raw: dict, naf_code: str | None = None) -> Company:
    """Flatten one ``etablissements`` item into a Company."""
    try:
        payload = EstablishmentPayload.model_validate(raw)
    except ValidationError as exc:
        raise MappingError(f"Invalid establishment payload: {exc}") from exc

    unit = payload.legal_unit
    address = payload.address

    department = None
    if address is not None and address.commune_code and len(address.commune_code) >= 2:
        department = address.commune_code[:2]

    trade_name = None
    if payload.periods:
        period = payload.periods[0]
        trade_name = period.usual_name or period.sign

    code = naf_code or (unit.naf_code if unit else None)
    return Company(
        siret=payload.siret,
        siren=payload.siren,
        name=unit.display_name if unit else None,
        trade_name=trade_name,
        address=address.street if address else None,
        postal_code=address.postal_code if address else None,
        city=address.city if address else None,
        department=department,
        region=region_of(department) if department else None,
        naf_code=code,
        naf_label=naf_label(code) if code else None,
        sector=naf_label(code) if code else None,
        headcount_range=unit.headcount_range if unit else None,
        category=unit.category if unit else None,
        creation_date=(unit.creation_date if unit else None) or payload.creation_date,
        last_update=payload.last_update,
        source="API SIRENE",
    )


class CompanyDirectoryClient:
    """Client for the INSEE SIRENE establishment search."""

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

    async def search_by_activity_code(
        self,
        naf_code: str,
        departments: list[str],
        *,
        report: SearchReport | None = None,
    ) -> list[Company]:
        """Search establishments of one NAF code in the given departments.

        HTTP 401 means the registry wants an API key: it is reported as a
        warning and yields no companies.
        """
        base = self.settings.insee_api_base_url.rstrip("/")
        params = {
            "q": build_query(
                naf_code,
                departments,
                self.settings.max_departments_per_company_request,
            ),
            "nombre": str(self.settings.max_results_companies),
        }
        headers = {"Accept": "application/json"}
        if self.settings.has_insee_api_key():
            headers["Authorization"] = f"Bearer {self.settings.insee_api_key}"

        async with self._client() as client:
            response = await client.get(f"{base}/siret", params=params, headers=headers)

        if response.status_code == 401:
            logger.warning("SIRENE returned 401 for NAF %s: API key required", naf_code)
            if report is not None:
                report.warn("API SIRENE: authentication required (INSEE API key)")
            return []
        if response.status_code != 200:
            logger.error(
                "SIRENE search failed: HTTP %d - %s",
                response.status_code,
                response.text[:500],
            )
            raise ApiError(PROVIDER, response.status_code, response.text)

        try:
            body = EstablishmentSearchResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise MappingError(f"Invalid SIRENE response: {exc}") from exc

        companies: list[Company] = []
        for raw in body.establishments:
            try:
                companies.append(map_establishment(raw, naf_code))
            except MappingError:
                logger.exception("Skipping unreadable establishment")
        logger.info("%d establishment(s) for NAF %s", len(companies), naf_code)
        return companies

    async def search_sectors(
        self,
        naf_codes: list[str],
        departments: list[str],
        *,
        cancel: CancelFlag | None = None,
        report: SearchReport | None = None,
    ) -> list[Company]:
        """Search every NAF code in turn; a failing code does not stop the rest."""
        report = report or SearchReport()
        companies: list[Company] = []

        for naf_code in naf_codes:
            if cancel is not None and cancel.is_set():
                report.mark_cancelled()
                break
            label = f"NAF {naf_code}"
            report.status(f"Searching companies {label}...")
            try:
                found = await self.search_by_activity_code(
                    naf_code, departments, report=report
                )
            except (ApiError, MappingError, httpx.HTTPError) as exc:
                logger.exception("SIRENE search for %s failed", naf_code)
                report.record(label, GroupOutcome.FAILED, detail=str(exc))
                continue

            outcome = GroupOutcome.OK if found else GroupOutcome.EMPTY
            report.record(label, outcome, count=len(found))
            companies.extend(found)

        return companies
