import csv
import io
import json
from collections.abc import Iterable, Sequence

from efrsb.search.models import CaseRecord, ItemOutcome

BOM = "\ufeff"

RECORD_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Номер дела", "case_number"),
    ("Должник", "debtor_name"),
    ("ИНН", "inn"),
    ("ОГРН", "ogrn"),
    ("Статус", "status"),
    ("Суд", "court"),
    ("Судья", "judge"),
    ("Управляющий", "manager"),
    ("Дата открытия", "open_date"),
    ("Сумма долга", "debt_amount"),
    ("Регион", "region"),
    ("Адрес", "address"),
    ("Категория", "category"),
    ("Последнее обновление", "last_update"),
)

OUTCOME_HEADERS = ("ИНН", "Статус банкротства", "Количество дел", "Ошибка")


def to_json(items: Sequence[CaseRecord | ItemOutcome]) -> str:
    """Pretty-printed JSON array of records or batch outcomes."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2)


def _write_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=";", quoting=csv.QUOTE_ALL, lineterminator="\n")
    # Header row is written unquoted.
    buf.write(";".join(headers) + "\n")
    writer.writerows(rows)
    return BOM + buf.getvalue().rstrip("\n")


def records_to_csv(records: Iterable[CaseRecord]) -> str:
    """Semicolon-separated case list with a UTF-8 BOM for spreadsheet apps."""
    rows = (
        [getattr(record, attr) or "" for _, attr in RECORD_COLUMNS]
        for record in records
    )
    return _write_csv([header for header, _ in RECORD_COLUMNS], rows)


def outcomes_to_csv(outcomes: Iterable[ItemOutcome]) -> str:
    """One row per checked INN: verdict, case count and error text."""
    rows = (
        [
            outcome.identifier,
            "БАНКРОТ" if outcome.is_confirmed else "Чистый",
            str(len(outcome.records)),
            outcome.error or "",
        ]
        for outcome in outcomes
    )
    return _write_csv(OUTCOME_HEADERS, rows)
