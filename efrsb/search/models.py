import math
from dataclasses import asdict, dataclass, field
from enum import Enum

DEFAULT_REGION = "Донецкая Народная Республика"


class SearchKind(str, Enum):
    """What the search string represents on the registry form."""

    DEBTOR = "debtor"
    CASE_NUMBER = "case_number"
    INN = "inn"


class ErrorKind(str, Enum):
    """Where an error originated, for callers that dispatch on it."""

    VALIDATION = "validation"
    FETCH = "fetch"
    FATAL = "fatal"
    CANCELLED = "cancelled"


class ItemStatus(str, Enum):
    CONFIRMED = "confirmed"
    CLEAN = "clean"
    ERROR = "error"


@dataclass(frozen=True)
class SearchQuery:
    kind: SearchKind
    text: str
    region: str = DEFAULT_REGION


@dataclass(frozen=True)
class CaseRecord:
    """A single bankruptcy case as scraped from the registry."""

    case_number: str
    debtor_name: str
    status: str
    court: str
    inn: str | None = None
    ogrn: str | None = None
    judge: str | None = None
    manager: str | None = None
    open_date: str | None = None
    debt_amount: str | None = None
    region: str | None = None
    address: str | None = None
    category: str | None = None
    last_update: str | None = None
    publication_date: str | None = None

    def to_dict(self) -> dict[str, str]:
        """camelCase payload with empty optional fields omitted."""
        return {
            _camel(key): value
            for key, value in asdict(self).items()
            if value is not None
        }


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one registry query."""

    success: bool
    records: tuple[CaseRecord, ...] = ()
    error: str | None = None

    @property
    def total_found(self) -> int:
        return len(self.records)

    @classmethod
    def failed(cls, error: str) -> "FetchResult":
        return cls(success=False, records=(), error=error)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "success": self.success,
            "data": [r.to_dict() for r in self.records],
            "totalFound": self.total_found,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class ItemOutcome:
    """Per-identifier result of a batch. Created once, never mutated."""

    identifier: str
    is_confirmed: bool
    records: tuple[CaseRecord, ...] = ()
    error: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def status(self) -> ItemStatus:
        if self.error is not None:
            return ItemStatus.ERROR
        if self.is_confirmed:
            return ItemStatus.CONFIRMED
        return ItemStatus.CLEAN

    @classmethod
    def invalid(cls, identifier: str, message: str) -> "ItemOutcome":
        return cls(
            identifier=identifier,
            is_confirmed=False,
            error=message,
            error_kind=ErrorKind.VALIDATION,
        )

    @classmethod
    def from_fetch(cls, identifier: str, result: FetchResult) -> "ItemOutcome":
        if not result.success:
            return cls(
                identifier=identifier,
                is_confirmed=False,
                error=result.error or "Неизвестная ошибка",
                error_kind=ErrorKind.FETCH,
            )
        return cls(
            identifier=identifier,
            is_confirmed=len(result.records) > 0,
            records=tuple(result.records),
        )

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "inn": self.identifier,
            "isBankrupt": self.is_confirmed,
            "status": self.status.value,
            "cases": [r.to_dict() for r in self.records],
        }
        if self.error is not None:
            payload["error"] = self.error
            payload["errorKind"] = self.error_kind.value if self.error_kind else None
        return payload


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ProgressEvent:
    position: int
    total: int
    current_identifier: str
    percentage: int

    @classmethod
    def at(cls, position: int, total: int, identifier: str) -> "ProgressEvent":
        percentage = _round_half_up(position / total * 100) if total else 0
        return cls(
            position=position,
            total=total,
            current_identifier=identifier,
            percentage=percentage,
        )

    @classmethod
    def placeholder(cls) -> "ProgressEvent":
        return cls(position=0, total=0, current_identifier="", percentage=0)

    def to_dict(self) -> dict[str, object]:
        return {
            "current": self.position,
            "total": self.total,
            "currentInn": self.current_identifier,
            "percentage": self.percentage,
        }


@dataclass
class BatchResult:
    """Accumulates outcomes while a batch runs; finalized at the end."""

    succeeded_overall: bool = False
    outcomes: list[ItemOutcome] = field(default_factory=list)
    total_processed: int = 0
    fatal_error: str | None = None
    fatal_error_kind: ErrorKind | None = None

    def record(self, outcome: ItemOutcome) -> None:
        self.outcomes.append(outcome)
        self.total_processed += 1

    def finish(self) -> "BatchResult":
        self.succeeded_overall = True
        self.fatal_error = None
        self.fatal_error_kind = None
        return self

    def abort(self, message: str, kind: ErrorKind = ErrorKind.FATAL) -> "BatchResult":
        self.succeeded_overall = False
        self.fatal_error = message
        self.fatal_error_kind = kind
        return self

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "success": self.succeeded_overall,
            "results": [o.to_dict() for o in self.outcomes],
            "totalProcessed": self.total_processed,
        }
        if self.fatal_error is not None:
            payload["error"] = self.fatal_error
            payload["errorKind"] = (
                self.fatal_error_kind.value if self.fatal_error_kind else None
            )
        return payload


@dataclass(frozen=True)
class BatchSummary:
    total_unique: int
    confirmed_count: int
    clean_count: int
    error_count: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalUnique": self.total_unique,
            "confirmedCount": self.confirmed_count,
            "cleanCount": self.clean_count,
            "errorCount": self.error_count,
        }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
