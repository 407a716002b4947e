"""
Job Search — French job offers and IT companies
================================================

Searches France Travail job offers, the INSEE SIRENE registry and Pappers,
then exports what was found to CSV or JSON.

Usage:
    jobsearch jobs --keywords "développeur java" --region "Bretagne" --csv offres.csv
    jobsearch companies --department 69 --naf 62.01Z
    jobsearch combined --metropole --json resultats.json
    jobsearch enrich --region "Occitanie" --ca-min 1000000 --pages 3
    jobsearch regions
    jobsearch config
    jobsearch serve --port 8000

Ctrl-C stops the running search after the request in flight.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

import uvicorn

from jobsearch import geo
from jobsearch.config import Settings
from jobsearch.errors import JobSearchError
from jobsearch.models.criteria import SORT_OPTIONS, SearchCriteria
from jobsearch.models.job_offer import NOT_AVAILABLE
from jobsearch.services.export import ExportFormat, ExportKind, write_export
from jobsearch.services.progress import EventKind
from jobsearch.services.search import SearchService

logger = logging.getLogger(__name__)

_EVENT_PREFIX = {
    EventKind.STATUS: "  ",
    EventKind.RESULTS: "✓ ",
    EventKind.WARNING: "⚠ ",
    EventKind.ERROR: "✗ ",
    EventKind.DONE: "» ",
}


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("jobsearch.log", encoding="utf-8"),
        ],
    )
    # httpx logs full request URLs, which carry the Pappers api_token
    logging.getLogger("httpx").setLevel(logging.WARNING)


def resolve_departments(args: argparse.Namespace, settings: Settings) -> list[str]:
    if args.france:
        scope, region, department = geo.LocationScope.FRANCE, None, None
    elif args.metropole:
        scope, region, department = geo.LocationScope.METROPOLITAN, None, None
    elif args.region:
        scope, region, department = geo.LocationScope.REGION, args.region, None
    elif args.department:
        scope, region = geo.LocationScope.DEPARTMENT, None
        department = args.department
    else:
        return list(settings.default_departments or settings.idf_departments)
    return geo.departments_for_scope(scope, region=region, department=department)


def _na(value: object) -> str:
    return NOT_AVAILABLE if value in (None, "") else str(value)


async def _render_events(service: SearchService) -> None:
    while True:
        event = await service.events.get()
        print(f"{_EVENT_PREFIX[event.kind]}{event.message}", flush=True)
        if event.kind == EventKind.DONE:
            return


async def _run_worker(service: SearchService, start) -> None:
    """Start the worker, render its events and map Ctrl-C to cancellation."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, service.cancel)
    except (NotImplementedError, RuntimeError):
        logger.debug("SIGINT handler unavailable; Ctrl-C aborts immediately")
    try:
        start()
        await _render_events(service)
        await service.wait()
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def _print_offers(service: SearchService, limit: int = 20) -> None:
    offers = service.collection.job_offers()
    for offer in offers[:limit]:
        print(
            f"{_na(offer.company_name)} | {_na(offer.title)} | "
            f"{_na(offer.contact_email)} | {_na(offer.department)} | "
            f"{_na(offer.city)} | {_na(offer.contract_type_label)}"
        )
    if len(offers) > limit:
        print(f"... {len(offers) - limit} more job offer(s)")


def _print_companies(service: SearchService, limit: int = 20) -> None:
    companies = service.collection.sorted_companies()
    for company in companies[:limit]:
        print(
            f"{_na(company.name)} | {_na(company.siret or company.siren)} | "
            f"{_na(company.sector)} | {_na(company.department)} | "
            f"{_na(company.city)} | {company.size_label} | {_na(company.revenue)}"
        )
    if len(companies) > limit:
        print(f"... {len(companies) - limit} more compan(ies)")


def _export(
    service: SearchService, args: argparse.Namespace, kinds: list[ExportKind]
) -> None:
    settings = service.settings
    targets = [(args.csv, ExportFormat.CSV), (args.json, ExportFormat.JSON)]
    for path, fmt in targets:
        if not path:
            continue
        for index, kind in enumerate(kinds):
            target = Path(path)
            if index > 0:
                target = target.with_stem(f"{target.stem}_{kind.value}")
            try:
                write_export(
                    target,
                    service.collection,
                    kind,
                    fmt,
                    separator=settings.export_csv_separator,
                    encoding=settings.export_csv_encoding,
                )
            except JobSearchError as exc:
                print(f"⚠ {exc}")
            else:
                print(f"Exported {kind.value} to {target}")


async def cmd_jobs(args: argparse.Namespace, settings: Settings) -> None:
    service = SearchService(settings)
    departments = resolve_departments(args, settings)
    await service.authenticate()
    await _run_worker(
        service, lambda: service.run_job_search(args.keywords, departments)
    )
    _print_offers(service)
    _export(service, args, [ExportKind.OFFERS])


async def cmd_companies(args: argparse.Namespace, settings: Settings) -> None:
    service = SearchService(settings)
    departments = resolve_departments(args, settings)
    await _run_worker(
        service, lambda: service.run_company_search(departments, args.naf or None)
    )
    _print_companies(service)
    _export(service, args, [ExportKind.COMPANIES])


async def cmd_combined(args: argparse.Namespace, settings: Settings) -> None:
    service = SearchService(settings)
    departments = resolve_departments(args, settings)
    if settings.has_france_travail_credentials():
        await service.authenticate()
    await _run_worker(
        service,
        lambda: service.run_combined_search(
            args.keywords, departments, args.naf or None
        ),
    )
    _print_offers(service)
    _print_companies(service)
    _export(service, args, [ExportKind.OFFERS, ExportKind.COMPANIES])


async def cmd_enrich(args: argparse.Namespace, settings: Settings) -> None:
    criteria = SearchCriteria(
        query=args.query,
        department=args.department,
        region=args.region,
        naf_code=args.naf,
        revenue_min=args.ca_min,
        revenue_max=args.ca_max,
        net_income_min=args.resultat_min,
        created_after_year=args.created_after,
        created_before_year=args.created_before,
        headcount_min=args.effectif_min,
        headcount_max=args.effectif_max,
        exclude_closed=not args.include_closed,
        exclude_sole_proprietors=not args.include_sole_proprietors,
        page=args.page,
        page_size=args.page_size,
        sort_by=args.sort,
    )
    print(criteria.summary())
    service = SearchService(settings)
    await _run_worker(
        service,
        lambda: service.run_enrichment_search(criteria, max_pages=args.pages),
    )
    _print_companies(service)
    _export(service, args, [ExportKind.COMPANIES])


def cmd_regions(args: argparse.Namespace, settings: Settings) -> None:
    for title, regions in (
        ("France métropolitaine", geo.metropolitan_regions()),
        ("Outre-mer", geo.overseas_regions()),
    ):
        print(title)
        for region in regions:
            print(f"  {region}: {', '.join(geo.departments_of(region))}")


def cmd_config(args: argparse.Namespace, settings: Settings) -> None:
    print(json.dumps(settings.masked(), indent=2, ensure_ascii=False))


def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    uvicorn.run("jobsearch.main:app", host=args.host, port=args.port)


def _add_location_options(parser: argparse.ArgumentParser) -> None:
    location = parser.add_mutually_exclusive_group()
    location.add_argument("--department", help="Single department code (e.g. 75, 2A)")
    location.add_argument("--region", help="Region name (see `jobsearch regions`)")
    location.add_argument(
        "--metropole", action="store_true", help="All metropolitan departments"
    )
    location.add_argument(
        "--france", action="store_true", help="All departments, overseas included"
    )


def _add_export_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--csv", type=str, default=None, help="Write results as CSV")
    parser.add_argument("--json", type=str, default=None, help="Write results as JSON")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search French job offers and companies"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    jobs = sub.add_parser("jobs", help="France Travail job offers")
    jobs.add_argument("--keywords", default=settings.default_keywords)
    _add_location_options(jobs)
    _add_export_options(jobs)

    companies = sub.add_parser("companies", help="IT companies from INSEE SIRENE")
    companies.add_argument(
        "--naf", action="append", help="NAF code, repeatable (default: IT codes)"
    )
    _add_location_options(companies)
    _add_export_options(companies)

    combined = sub.add_parser("combined", help="Job offers then IT companies")
    combined.add_argument("--keywords", default=settings.default_keywords)
    combined.add_argument("--naf", action="append", help="NAF code, repeatable")
    _add_location_options(combined)
    _add_export_options(combined)

    enrich = sub.add_parser("enrich", help="Company search on Pappers")
    enrich.add_argument("--query", help="Keywords (name, activity...)")
    location = enrich.add_mutually_exclusive_group()
    location.add_argument("--department")
    location.add_argument("--region")
    enrich.add_argument("--naf", help="NAF code")
    enrich.add_argument("--ca-min", type=int, help="Minimum revenue in euros")
    enrich.add_argument("--ca-max", type=int, help="Maximum revenue in euros")
    enrich.add_argument("--resultat-min", type=int, help="Minimum net income")
    enrich.add_argument("--created-after", type=int, help="Created since year")
    enrich.add_argument("--created-before", type=int, help="Created until year")
    enrich.add_argument("--effectif-min", type=int, help="Minimum headcount")
    enrich.add_argument("--effectif-max", type=int, help="Maximum headcount")
    enrich.add_argument("--include-closed", action="store_true")
    enrich.add_argument("--include-sole-proprietors", action="store_true")
    enrich.add_argument("--page", type=int, default=1)
    enrich.add_argument("--page-size", type=int, default=20)
    enrich.add_argument("--pages", type=int, default=1, help="Pages to fetch")
    enrich.add_argument("--sort", choices=sorted(SORT_OPTIONS))
    _add_export_options(enrich)

    sub.add_parser("regions", help="List regions and their departments")
    sub.add_parser("config", help="Show configuration, secrets masked")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


_ASYNC_COMMANDS = {
    "jobs": cmd_jobs,
    "companies": cmd_companies,
    "combined": cmd_combined,
    "enrich": cmd_enrich,
}
_SYNC_COMMANDS = {
    "regions": cmd_regions,
    "config": cmd_config,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    settings = Settings()
    args = build_parser(settings).parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command in _ASYNC_COMMANDS:
            asyncio.run(_ASYNC_COMMANDS[args.command](args, settings))
        else:
            _SYNC_COMMANDS[args.command](args, settings)
    except (JobSearchError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
