import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import httpx

from jobsearch.config import Settings
from jobsearch.errors import ConfigurationError, JobSearchError, SearchBusyError
from jobsearch.integrations.france_travail import JobOfferSearchClient
from jobsearch.integrations.oauth import TokenProvider
from jobsearch.integrations.pappers import CompanyEnrichmentClient
from jobsearch.integrations.sirene import CompanyDirectoryClient
from jobsearch.models.criteria import SearchCriteria
from jobsearch.services.aggregator import ResultCollection
from jobsearch.services.progress import (
    CancelFlag,
    EventKind,
    SearchEvent,
    SearchReport,
)

logger = logging.getLogger(__name__)


class SearchService:
    """Runs one search at a time in a background task.

    The worker is the only writer of ``collection``. Progress is posted to
    ``events`` and a ``done`` event closes every run, whatever its outcome.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        collection: ResultCollection | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.collection = collection if collection is not None else ResultCollection()
        self.cancel_flag = CancelFlag()
        self.events: asyncio.Queue[SearchEvent] = asyncio.Queue()
        self.last_report: SearchReport | None = None

        self.tokens = TokenProvider(settings, transport=transport)
        self.jobs = JobOfferSearchClient(settings, self.tokens, transport=transport)
        self.directory = CompanyDirectoryClient(settings, transport=transport)
        self.enrichment = CompanyEnrichmentClient(settings, transport=transport)

        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _post(self, event: SearchEvent) -> None:
        self.events.put_nowait(event)

    def _new_report(self) -> SearchReport:
        report = SearchReport(on_event=self._post)
        self.last_report = report
        return report

    def start(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        """Launch ``coro`` as the worker task; only one may run at a time."""
        if self.running:
            coro.close()
            raise SearchBusyError()
        self.cancel_flag.clear()
        self._task = asyncio.create_task(coro)
        return self._task

    async def _run(self, name: str, body, keep_previous: bool) -> None:
        report = self._new_report()
        if not keep_previous:
            self.collection.clear()
        report.status(f"{name} started")
        try:
            await body(report)
        except JobSearchError as exc:
            logger.exception("%s aborted", name)
            report.error(str(exc))
        except Exception as exc:
            logger.exception("%s failed unexpectedly", name)
            report.error(f"Unexpected error: {exc}")
        finally:
            total = len(self.collection)
            if total:
                message = f"Search finished: {total} result(s)"
            else:
                message = "Search finished: no results, try broader keywords"
            self._post(SearchEvent(kind=EventKind.DONE, message=message, count=total))

    def _store_offers(self, offers, report: SearchReport) -> None:
        added = self.collection.add_offers(offers)
        report.results(f"{added} job offer(s) added", added)

    def _store_companies(self, companies, report: SearchReport) -> None:
        added = self.collection.add_companies(companies)
        report.results(f"{added} new compan(ies) added", added)

    def run_job_search(
        self, keywords: str | None, departments: list[str], *, keep_previous=False
    ) -> asyncio.Task:
        if not self.tokens.token:
            raise ConfigurationError("missing credentials: authenticate first")

        async def body(report: SearchReport) -> None:
            offers = await self.jobs.search_jobs(
                keywords, departments, cancel=self.cancel_flag, report=report
            )
            self._store_offers(offers, report)

        return self.start(self._run("Job offer search", body, keep_previous))

    def run_company_search(
        self,
        departments: list[str],
        naf_codes: list[str] | None = None,
        *,
        keep_previous=False,
    ) -> asyncio.Task:
        codes = list(naf_codes or self.settings.naf_codes_it)

        async def body(report: SearchReport) -> None:
            companies = await self.directory.search_sectors(
                codes, departments, cancel=self.cancel_flag, report=report
            )
            self._store_companies(companies, report)

        return self.start(self._run("Company search", body, keep_previous))

    def run_combined_search(
        self,
        keywords: str | None,
        departments: list[str],
        naf_codes: list[str] | None = None,
        *,
        keep_previous=False,
    ) -> asyncio.Task:
        """Job offers first, then registry companies, in one worker run.

        Without a France Travail token the offer part is skipped with a
        warning and the company part still runs.
        """
        codes = list(naf_codes or self.settings.naf_codes_it)

        async def body(report: SearchReport) -> None:
            if self.tokens.token:
                offers = await self.jobs.search_jobs(
                    keywords, departments, cancel=self.cancel_flag, report=report
                )
                self._store_offers(offers, report)
            else:
                report.warn("Missing token: job offers skipped, authenticate first")

            if self.cancel_flag.is_set():
                report.mark_cancelled()
                return
            companies = await self.directory.search_sectors(
                codes, departments, cancel=self.cancel_flag, report=report
            )
            self._store_companies(companies, report)

        return self.start(self._run("Combined search", body, keep_previous))

    def run_enrichment_search(
        self,
        criteria: SearchCriteria,
        *,
        max_pages: int = 1,
        keep_previous=True,
    ) -> asyncio.Task:
        if not self.settings.has_pappers_api_key():
            raise ConfigurationError("Pappers API key is missing")

        async def body(report: SearchReport) -> None:
            report.status(criteria.summary())
            companies = await self.enrichment.search_pages(
                criteria, max_pages=max_pages, cancel=self.cancel_flag, report=report
            )
            self._store_companies(companies, report)

        return self.start(self._run("Pappers search", body, keep_previous))

    async def authenticate(self, **overrides) -> str:
        token = await self.tokens.authenticate(**overrides)
        self._post(SearchEvent(kind=EventKind.STATUS, message="Authenticated"))
        return token

    def cancel(self) -> bool:
        """Ask the running worker to stop after its current call."""
        if not self.running:
            return False
        self.cancel_flag.set()
        self._post(SearchEvent(kind=EventKind.STATUS, message="Cancelling search..."))
        return True

    async def wait(self) -> SearchReport | None:
        if self._task is not None:
            await self._task
        return self.last_report

    def drain_events(self) -> list[SearchEvent]:
        drained: list[SearchEvent] = []
        while True:
            try:
                drained.append(self.events.get_nowait())
            except asyncio.QueueEmpty:
                return drained
