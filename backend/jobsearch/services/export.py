import dataclasses
import json
import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

from jobsearch.errors import NothingToExportError
from jobsearch.models.company import Company
from jobsearch.models.job_offer import JobOffer
from jobsearch.services.aggregator import ResultCollection

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ExportKind(str, Enum):
    COMPANIES = "companies"
    OFFERS = "offers"


def csv_escape(value: object, separator: str = ";") -> str:
    """Quote a field when it holds the separator, a quote or a line break."""
    if value is None:
        return ""
    text = str(value)
    if separator in text or any(char in text for char in '"\r\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def export_delimited(
    rows: Iterable[Sequence[object]],
    headers: Sequence[str],
    separator: str = ";",
    encoding: str = "utf-8",
) -> bytes:
    lines = [separator.join(csv_escape(header, separator) for header in headers)]
    for row in rows:
        lines.append(separator.join(csv_escape(value, separator) for value in row))
    return ("\n".join(lines) + "\n").encode(encoding)


def export_structured(records: Iterable[JobOffer | Company]) -> bytes:
    """Pretty-printed JSON array, one object per record."""
    data = [dataclasses.asdict(record) for record in records]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def export_companies_csv(
    companies: Iterable[Company], separator: str = ";", encoding: str = "utf-8"
) -> bytes:
    ordered = sorted(companies, key=lambda company: (company.name or "").lower())
    return export_delimited(
        (company.to_csv_row() for company in ordered),
        Company.csv_headers(),
        separator,
        encoding,
    )


def export_job_offers_csv(
    offers: Iterable[JobOffer], separator: str = ";", encoding: str = "utf-8"
) -> bytes:
    return export_delimited(
        (offer.to_csv_row() for offer in offers),
        JobOffer.csv_headers(),
        separator,
        encoding,
    )


def render_export(
    collection: ResultCollection,
    kind: ExportKind,
    fmt: ExportFormat,
    separator: str = ";",
    encoding: str = "utf-8",
) -> bytes:
    """Serialize one part of the collection.

    Raises NothingToExportError when that part is empty.
    """
    if kind == ExportKind.COMPANIES:
        records: list = collection.sorted_companies()
    else:
        records = collection.job_offers()
    if not records:
        raise NothingToExportError(f"No {kind.value} to export")

    if fmt == ExportFormat.JSON:
        return export_structured(records)
    if kind == ExportKind.COMPANIES:
        return export_companies_csv(records, separator, encoding)
    return export_job_offers_csv(records, separator, encoding)


def write_export(
    path: str | Path,
    collection: ResultCollection,
    kind: ExportKind,
    fmt: ExportFormat,
    separator: str = ";",
    encoding: str = "utf-8",
) -> Path:
    """Write an export file; nothing is written when there is nothing to export."""
    content = render_export(collection, kind, fmt, separator, encoding)
    target = Path(path)
    target.write_bytes(content)
    logger.info("Exported %s as %s to %s", kind.value, fmt.value, target)
    return target
