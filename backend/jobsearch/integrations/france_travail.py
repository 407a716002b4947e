import logging
from dataclasses import dataclass, field

import httpx
from pydantic import ValidationError

from jobsearch.config import Settings
from jobsearch.errors import ApiError, ConfigurationError, MappingError
from jobsearch.geo import region_of
from jobsearch.integrations.oauth import TokenProvider
from jobsearch.models.job_offer import JobOffer, parse_location_label
from jobsearch.schemas.france_travail import OfferPayload, OfferSearchResponse
from jobsearch.services.progress import CancelFlag, GroupOutcome, SearchReport

logger = logging.getLogger(__name__)

PROVIDER = "France Travail"


def chunk_departments(codes: list[str], size: int = 5) -> list[list[str]]:
    """Split department codes into consecutive groups of at most ``size``."""
    if size < 1:
        raise ValueError("size must be positive")
    return [list(codes[i : i + size]) for i in range(0, len(codes), size)]


def map_offer(raw: dict) -> JobOffer:
    """Flatten one ``resultats`` item into a JobOffer."""
    try:
        payload = OfferPayload.model_validate(raw)
    except ValidationError as exc:
        raise MappingError(f"Invalid offer payload: {exc}") from exc

    employer = payload.employer
    contact = payload.contact
    workplace = payload.workplace
    origin = payload.origin

    city = department = region = None
    if workplace is not None:
        city, department = parse_location_label(workplace.label)
        if department:
            region = region_of(department)
        if workplace.commune:
            city = workplace.commune

    skills = None
    if payload.skills:
        skills = ", ".join(skill.label for skill in payload.skills if skill.label)

    application_url = None
    if origin is not None and origin.partners:
        application_url = origin.partners[0].url

    return JobOffer(
        id=payload.id,
        title=payload.title,
        description=payload.description,
        created_at=payload.created_at,
        updated_at=payload.updated_at,
        company_name=employer.name if employer else None,
        company_description=employer.description if employer else None,
        company_url=employer.url if employer else None,
        company_logo_url=employer.logo if employer else None,
        contact_email=contact.email if contact else None,
        contact_name=contact.name if contact else None,
        contact_phone=contact.phone if contact else None,
        contact_url=contact.application_url if contact else None,
        location_label=workplace.label if workplace else None,
        city=city,
        postal_code=workplace.postal_code if workplace else None,
        department=department,
        region=region,
        latitude=workplace.latitude if workplace else None,
        longitude=workplace.longitude if workplace else None,
        contract_type=payload.contract_type,
        contract_type_label=payload.contract_type_label,
        contract_nature=payload.contract_nature,
        experience_code=payload.experience_code,
        experience_label=payload.experience_label,
        salary=payload.salary.label if payload.salary else None,
        working_hours_label=payload.working_hours_label,
        skills=skills,
        origin_url=origin.origin_url if origin else None,
        application_url=application_url,
    )


@dataclass
class GroupResult:
    departments: list[str]
    outcome: GroupOutcome
    offers: list[JobOffer] = field(default_factory=list)
    skipped: int = 0


class JobOfferSearchClient:
    """Client for the France Travail ``offresdemploi/v2`` search endpoint."""

    def __init__(
        self,
        settings: Settings,
        tokens: TokenProvider,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.tokens = tokens
        self._transport = transport

    @property
    def search_url(self) -> str:
        base = self.settings.france_travail_api_base_url.rstrip("/")
        return f"{base}/offresdemploi/v2/offres/search"

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(None, connect=self.settings.http_timeout)
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def _map_results(self, body: str) -> tuple[list[JobOffer], int]:
        try:
            response = OfferSearchResponse.model_validate_json(body)
        except ValidationError as exc:
            raise MappingError(f"Invalid search response: {exc}") from exc

        offers: list[JobOffer] = []
        skipped = 0
        for raw in response.results:
            try:
                offers.append(map_offer(raw))
            except MappingError:
                logger.exception("Skipping unreadable job offer")
                skipped += 1
        return offers, skipped

    async def search_group(
        self, keywords: str | None, departments: list[str]
    ) -> GroupResult:
        """Run one search request for a group of departments.

        HTTP 204 and 206 are outcomes, not errors. Any other non-200 status
        raises ApiError.
        """
        token = self.tokens.token
        if not token:
            raise ConfigurationError("missing credentials: authenticate first")

        params: dict[str, str] = {}
        if keywords and keywords.strip():
            params["motsCles"] = keywords.strip()
        params["departement"] = ",".join(departments)
        params["range"] = f"0-{self.settings.max_results_jobs - 1}"
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

        logger.info(
            "France Travail search: keywords=%r departments=%s", keywords, departments
        )
        async with self._client() as client:
            response = await client.get(
                self.search_url, params=params, headers=headers
            )

        status = response.status_code
        if status == 204:
            logger.info("No offers for departments %s (HTTP 204)", departments)
            return GroupResult(departments=departments, outcome=GroupOutcome.EMPTY)
        if status not in (200, 206):
            logger.error(
                "France Travail search failed: HTTP %d - %s",
                status,
                response.text[:500],
            )
            raise ApiError(PROVIDER, status, response.text)

        offers, skipped = self._map_results(response.text)
        if status == 206:
            outcome = GroupOutcome.PARTIAL
        elif offers:
            outcome = GroupOutcome.OK
        else:
            outcome = GroupOutcome.EMPTY
        logger.info("%d offer(s) for departments %s", len(offers), departments)
        return GroupResult(
            departments=departments, outcome=outcome, offers=offers, skipped=skipped
        )

    async def search_jobs(
        self,
        keywords: str | None,
        departments: list[str],
        *,
        cancel: CancelFlag | None = None,
        report: SearchReport | None = None,
    ) -> list[JobOffer]:
        """Search every department, one group of departments at a time.

        A failing group is logged and recorded; the remaining groups still run.
        """
        if not self.tokens.token:
            raise ConfigurationError("missing credentials: authenticate first")

        report = report or SearchReport()
        groups = chunk_departments(
            departments, self.settings.max_departments_per_job_request
        )
        offers: list[JobOffer] = []

        for index, group in enumerate(groups, start=1):
            if cancel is not None and cancel.is_set():
                report.mark_cancelled()
                break
            label = f"Departments {','.join(group)}"
            report.status(f"Group {index}/{len(groups)}: {label}")
            try:
                result = await self.search_group(keywords, group)
            except (ApiError, MappingError, httpx.HTTPError) as exc:
                logger.exception("France Travail group %s failed", group)
                report.record(label, GroupOutcome.FAILED, detail=str(exc))
                continue

            if result.skipped:
                report.warn(f"{label}: {result.skipped} offer(s) could not be read")
            report.record(label, result.outcome, count=len(result.offers))
            offers.extend(result.offers)

        return offers
