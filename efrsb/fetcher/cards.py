import re
from dataclasses import dataclass
from datetime import date

from efrsb.search.models import CaseRecord

CASE_NUMBER_PATTERN = re.compile(r"А\d+-\d+/\d{4}")
INN_PATTERN = re.compile(r"\b\d{10,12}\b")

STATUS_KEYWORDS = (
    "наблюдение",
    "конкурсное производство",
    "мировое соглашение",
    "завершено",
    "прекращено",
)
DEFAULT_STATUS = "Активное"
DEFAULT_COURT = "Арбитражный суд"
MISSING_CASE_NUMBER = "Не указан"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class RawCard:
    """Text pulled out of one result card before interpretation."""

    text: str
    name: str = ""
    address: str = ""
    ogrn: str = ""
    status: str = ""
    status_date: str = ""
    manager: str = ""


def clean_text(text: str | None) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def infer_status(text: str) -> str:
    lowered = text.lower()
    for keyword in STATUS_KEYWORDS:
        if keyword in lowered:
            return keyword[0].upper() + keyword[1:]
    return DEFAULT_STATUS


def parse_card(card: RawCard, query: str, region: str, today: date | None = None) -> CaseRecord:
    """Interpret one scraped result card as a CaseRecord."""
    text = clean_text(card.text)
    case_match = CASE_NUMBER_PATTERN.search(text)
    inn_match = INN_PATTERN.search(text)
    last_update = clean_text(card.status_date)
    if not last_update:
        last_update = (today or date.today()).strftime("%d.%m.%Y")
    return CaseRecord(
        case_number=case_match.group(0) if case_match else MISSING_CASE_NUMBER,
        debtor_name=clean_text(card.name) or query,
        status=clean_text(card.status) or infer_status(text),
        court=DEFAULT_COURT,
        inn=inn_match.group(0) if inn_match else None,
        ogrn=clean_text(card.ogrn) or None,
        manager=clean_text(card.manager) or None,
        region=region,
        address=clean_text(card.address) or None,
        last_update=last_update,
    )


def parse_cards(
    cards: list[RawCard], query: str, region: str, today: date | None = None
) -> list[CaseRecord]:
    return [parse_card(card, query, region, today) for card in cards]
