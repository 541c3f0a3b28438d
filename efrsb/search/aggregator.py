from collections.abc import Iterable, Sequence

from efrsb.search.models import BatchSummary, ItemOutcome, ItemStatus


def summarize(outcomes: Sequence[ItemOutcome]) -> BatchSummary:
    """Count confirmed, clean and errored outcomes.

    The three counts partition ``outcomes``: an errored item is never
    confirmed, so every outcome lands in exactly one bucket.
    """
    statuses = [o.status for o in outcomes]
    return BatchSummary(
        total_unique=len(outcomes),
        confirmed_count=statuses.count(ItemStatus.CONFIRMED),
        clean_count=statuses.count(ItemStatus.CLEAN),
        error_count=statuses.count(ItemStatus.ERROR),
    )


def parse_identifier_list(text: str) -> list[str]:
    """Split newline-separated input into trimmed, non-empty identifiers."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def deduplicate(identifiers: Iterable[str]) -> list[str]:
    """Trim, drop blanks and keep the first occurrence of each identifier."""
    seen: set[str] = set()
    unique: list[str] = []
    for raw in identifiers:
        identifier = raw.strip()
        if identifier and identifier not in seen:
            seen.add(identifier)
            unique.append(identifier)
    return unique
