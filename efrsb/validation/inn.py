import re
from dataclasses import dataclass

LEGAL_ENTITY_WEIGHTS = (2, 4, 10, 3, 5, 9, 4, 6, 8)
INDIVIDUAL_WEIGHTS_FIRST = (7, 2, 4, 10, 3, 5, 9, 4, 6, 8)
INDIVIDUAL_WEIGHTS_SECOND = (3, 7, 2, 4, 10, 3, 5, 9, 4, 6, 8)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking a raw INN string."""

    is_valid: bool
    message: str


def _check_digit(digits: str, weights: tuple[int, ...]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    return (total % 11) % 10


def inn_check_digits(prefix: str) -> str:
    """Compute the trailing check digit(s) for a 9- or 10-digit INN prefix.

    A 9-digit prefix yields one digit (legal entity INN), a 10-digit prefix
    yields two (individual INN).
    """
    if not prefix.isdigit() or len(prefix) not in (9, 10):
        raise ValueError(f"INN prefix must be 9 or 10 digits, got '{prefix}'")
    if len(prefix) == 9:
        return str(_check_digit(prefix, LEGAL_ENTITY_WEIGHTS))
    first = str(_check_digit(prefix, INDIVIDUAL_WEIGHTS_FIRST))
    second = str(_check_digit(prefix + first, INDIVIDUAL_WEIGHTS_SECOND))
    return first + second


def validate_inn(raw: str) -> ValidationOutcome:
    """Validate the structure and checksum of a Russian tax identifier.

    Never raises: any input, including ``None``-like empties, produces an
    outcome with a human-readable message.
    """
    inn = _WHITESPACE.sub("", raw or "")
    if not inn:
        return ValidationOutcome(False, "ИНН не может быть пустым")
    if len(inn) not in (10, 12):
        return ValidationOutcome(False, "ИНН должен содержать 10 или 12 цифр")
    if not (inn.isascii() and inn.isdigit()):
        return ValidationOutcome(False, "ИНН должен содержать только цифры")

    if len(inn) == 10:
        if _check_digit(inn[:9], LEGAL_ENTITY_WEIGHTS) == int(inn[9]):
            return ValidationOutcome(True, "ИНН корректен (юридическое лицо)")
        return ValidationOutcome(False, "Некорректная контрольная сумма ИНН")

    first_ok = _check_digit(inn[:10], INDIVIDUAL_WEIGHTS_FIRST) == int(inn[10])
    second_ok = _check_digit(inn[:11], INDIVIDUAL_WEIGHTS_SECOND) == int(inn[11])
    if first_ok and second_ok:
        return ValidationOutcome(True, "ИНН корректен (физическое лицо)")
    return ValidationOutcome(False, "Некорректная контрольная сумма ИНН")
