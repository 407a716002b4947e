import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    STATUS = "status"
    WARNING = "warning"
    ERROR = "error"
    RESULTS = "results"
    DONE = "done"


class GroupOutcome(str, Enum):
    """How one batch (department group, sector code or page) ended."""

    OK = "ok"
    PARTIAL = "partial"
    EMPTY = "empty"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SearchEvent:
    kind: EventKind
    message: str
    count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "count": self.count,
            "created_at": self.created_at.isoformat(),
        }


class CancelFlag:
    """Cooperative cancellation, polled by the worker between batches."""

    def __init__(self) -> None:
        self._cancelled = False

    def set(self) -> None:
        self._cancelled = True

    def clear(self) -> None:
        self._cancelled = False

    def is_set(self) -> bool:
        return self._cancelled


@dataclass
class BatchResult:
    label: str
    outcome: GroupOutcome
    count: int = 0
    detail: str | None = None


@dataclass
class SearchReport:
    """Per-batch outcomes, warnings and errors of one search.

    Every entry is also forwarded to ``on_event`` when given, so a front end
    can render progress while the search runs.
    """

    on_event: Callable[[SearchEvent], None] | None = None
    batches: list[BatchResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    def _emit(self, kind: EventKind, message: str, count: int = 0) -> None:
        if self.on_event is not None:
            self.on_event(SearchEvent(kind=kind, message=message, count=count))

    def status(self, message: str) -> None:
        self._emit(EventKind.STATUS, message)

    def results(self, message: str, count: int) -> None:
        self._emit(EventKind.RESULTS, message, count)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self._emit(EventKind.WARNING, message)

    def error(self, message: str) -> None:
        self.errors.append(message)
        self._emit(EventKind.ERROR, message)

    def record(
        self,
        label: str,
        outcome: GroupOutcome,
        count: int = 0,
        detail: str | None = None,
    ) -> None:
        self.batches.append(
            BatchResult(label=label, outcome=outcome, count=count, detail=detail)
        )
        if outcome == GroupOutcome.FAILED:
            self.error(f"{label}: {detail or 'failed'}")
        elif outcome == GroupOutcome.EMPTY:
            self.status(f"{label}: no results for this group")
        elif outcome == GroupOutcome.PARTIAL:
            self.status(f"{label}: {count} result(s), partial content")
        elif outcome == GroupOutcome.OK:
            self.status(f"{label}: {count} result(s)")

    def mark_cancelled(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            logger.info("Search cancelled by user")
            self.warn("Search cancelled")

    @property
    def total(self) -> int:
        return sum(batch.count for batch in self.batches)
