from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from jobsearch.api.deps import SearchServiceDep
from jobsearch.errors import ConfigurationError, SearchBusyError
from jobsearch.geo import LocationScope, departments_for_scope
from jobsearch.models.criteria import SearchCriteria

router = APIRouter(prefix="/api/search", tags=["search"])


class LocationRequest(BaseModel):
    scope: LocationScope = LocationScope.DEPARTMENT
    department: str | None = None
    region: str | None = None

    def departments(self) -> list[str]:
        try:
            return departments_for_scope(
                self.scope, region=self.region, department=self.department
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc


class JobSearchRequest(LocationRequest):
    keywords: str | None = None
    # Also search the registry for IT companies in the same area
    include_companies: bool = False
    keep_previous: bool = False


class CompanySearchRequest(LocationRequest):
    naf_codes: list[str] = Field(default_factory=list)
    keep_previous: bool = False


class EnrichmentSearchRequest(BaseModel):
    query: str | None = None
    department: str | None = None
    region: str | None = None
    naf_code: str | None = None
    revenue_min: int | None = None
    revenue_max: int | None = None
    net_income_min: int | None = None
    created_after_year: int | None = None
    created_before_year: int | None = None
    headcount_min: int | None = None
    headcount_max: int | None = None
    exclude_closed: bool = True
    exclude_sole_proprietors: bool = True
    page: int = 1
    page_size: int = 20
    sort_by: str | None = None
    max_pages: int = Field(default=1, ge=1, le=20)
    keep_previous: bool = True

    def criteria(self) -> SearchCriteria:
        fields = self.model_dump(exclude={"max_pages", "keep_previous"})
        try:
            return SearchCriteria(**fields)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc


def _queued(start) -> dict:
    try:
        start()
    except SearchBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"status": "queued"}


@router.post("/jobs", status_code=202)
async def search_jobs(payload: JobSearchRequest, service: SearchServiceDep) -> dict:
    """Queue a job offer search, optionally combined with a company search."""
    departments = payload.departments()
    if payload.include_companies:
        return _queued(
            lambda: service.run_combined_search(
                payload.keywords, departments, keep_previous=payload.keep_previous
            )
        )
    return _queued(
        lambda: service.run_job_search(
            payload.keywords, departments, keep_previous=payload.keep_previous
        )
    )


@router.post("/companies", status_code=202)
async def search_companies(
    payload: CompanySearchRequest, service: SearchServiceDep
) -> dict:
    departments = payload.departments()
    return _queued(
        lambda: service.run_company_search(
            departments,
            payload.naf_codes or None,
            keep_previous=payload.keep_previous,
        )
    )


@router.post("/enrichment", status_code=202)
async def search_enrichment(
    payload: EnrichmentSearchRequest, service: SearchServiceDep
) -> dict:
    criteria = payload.criteria()
    return _queued(
        lambda: service.run_enrichment_search(
            criteria,
            max_pages=payload.max_pages,
            keep_previous=payload.keep_previous,
        )
    )


@router.post("/cancel")
async def cancel_search(service: SearchServiceDep) -> dict:
    return {"cancelled": service.cancel()}


@router.get("/status")
async def search_status(service: SearchServiceDep) -> dict:
    """Running flag, events posted since the last call and result counts."""
    report = service.last_report
    return {
        "running": service.running,
        "events": [event.to_dict() for event in service.drain_events()],
        "offers": len(service.collection.job_offers()),
        "companies": len(service.collection.companies()),
        "warnings": list(report.warnings) if report else [],
        "errors": list(report.errors) if report else [],
    }
