from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Iterable, Optional, Tuple

from cardscan.security.record import SecureRecord
from cardscan.validator import extract_digits, is_valid_card_number

LOGGER = logging.getLogger(__name__)

TEST_CARD_NUMBERS = frozenset(
    {
        "4111111111111111",  # Visa
        "4012888888881881",  # Visa
        "5555555555554444",  # Mastercard
        "5105105105105100",  # Mastercard
        "378282246310005",  # American Express
        "371449635398431",  # American Express
        "6011111111111117",  # Discover
        "6011000990139424",  # Discover
    }
)


class Severity(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class SecurityIssue(str, Enum):
    INVALID_CARD_NUMBER = "INVALID_CARD_NUMBER"
    INVALID_EXPIRY_DATE = "INVALID_EXPIRY_DATE"
    TEST_CARD_DETECTED = "TEST_CARD_DETECTED"
    CARD_NUMBER_NOT_READABLE = "CARD_NUMBER_NOT_READABLE"
    EXPIRY_DATE_NOT_READABLE = "EXPIRY_DATE_NOT_READABLE"
    SUSPICIOUS_PATTERN = "SUSPICIOUS_PATTERN"

    @property
    def severity(self) -> Severity:
        return ISSUE_SEVERITY[self]

    @property
    def description(self) -> str:
        return ISSUE_DESCRIPTIONS[self]


ISSUE_SEVERITY = {
    SecurityIssue.INVALID_CARD_NUMBER: Severity.HIGH,
    SecurityIssue.INVALID_EXPIRY_DATE: Severity.HIGH,
    SecurityIssue.TEST_CARD_DETECTED: Severity.MEDIUM,
    SecurityIssue.CARD_NUMBER_NOT_READABLE: Severity.LOW,
    SecurityIssue.EXPIRY_DATE_NOT_READABLE: Severity.LOW,
    SecurityIssue.SUSPICIOUS_PATTERN: Severity.HIGH,
}

ISSUE_DESCRIPTIONS = {
    SecurityIssue.INVALID_CARD_NUMBER: "The card number is not valid.",
    SecurityIssue.INVALID_EXPIRY_DATE: "The expiry date is not valid.",
    SecurityIssue.TEST_CARD_DETECTED: "A test card number was detected.",
    SecurityIssue.CARD_NUMBER_NOT_READABLE: "The card number could not be read.",
    SecurityIssue.EXPIRY_DATE_NOT_READABLE: "The expiry date could not be read.",
    SecurityIssue.SUSPICIOUS_PATTERN: "A suspicious pattern was detected.",
}


@dataclass(frozen=True)
class ValidationResult:
    issues: Tuple[SecurityIssue, ...] = field(default_factory=tuple)

    @classmethod
    def from_issues(cls, issues: Iterable[SecurityIssue]) -> "ValidationResult":
        return cls(issues=tuple(dict.fromkeys(issues)))

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def warning_message(self) -> Optional[str]:
        if not self.issues:
            return None
        return "\n".join(issue.description for issue in self.issues)

    @property
    def highest_severity(self) -> Optional[Severity]:
        if not self.issues:
            return None
        return max(issue.severity for issue in self.issues)

    def has_severity(self, level: Severity) -> bool:
        return any(issue.severity == level for issue in self.issues)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "issues": [
                {"code": issue.value, "severity": issue.severity.name, "description": issue.description}
                for issue in self.issues
            ],
        }


def is_test_card_number(card_number: str) -> bool:
    return extract_digits(card_number) in TEST_CARD_NUMBERS


def is_suspicious_pattern(card_number: str) -> bool:
    digits = extract_digits(card_number)
    return bool(digits) and len(set(digits)) == 1


def parse_expiry(text: str) -> Optional[Tuple[int, int]]:
    parts = (text or "").split("/")
    if len(parts) != 2:
        return None
    month_raw, year_raw = (part.strip() for part in parts)
    if not (month_raw.isdigit() and year_raw.isdigit()):
        return None
    month, year = int(month_raw), int(year_raw)
    if year < 100:
        year += 2000
    return month, year


def is_valid_expiry_date(text: str, today: date | None = None) -> bool:
    parsed = parse_expiry(text)
    if parsed is None:
        return False
    month, year = parsed
    if not 1 <= month <= 12:
        return False
    today = today or date.today()
    return (year, month) >= (today.year, today.month)


def evaluate(
    record: SecureRecord,
    today: date | None = None,
    *,
    flag_repeated_digits: bool = False,
) -> ValidationResult:
    """Run the card-data security rules over a sealed record.

    ``SUSPICIOUS_PATTERN`` is only reported when ``flag_repeated_digits`` is set.
    """
    issues = []

    card_number = record.decrypted_card_number()
    if card_number is not None:
        if not is_valid_card_number(card_number):
            issues.append(SecurityIssue.INVALID_CARD_NUMBER)
        if is_test_card_number(card_number):
            issues.append(SecurityIssue.TEST_CARD_DETECTED)
        if flag_repeated_digits and is_suspicious_pattern(card_number):
            issues.append(SecurityIssue.SUSPICIOUS_PATTERN)
    else:
        issues.append(SecurityIssue.CARD_NUMBER_NOT_READABLE)

    expiry_date = record.decrypted_expiry_date()
    if expiry_date is not None:
        if not is_valid_expiry_date(expiry_date, today):
            issues.append(SecurityIssue.INVALID_EXPIRY_DATE)
    else:
        issues.append(SecurityIssue.EXPIRY_DATE_NOT_READABLE)

    result = ValidationResult.from_issues(issues)
    LOGGER.debug("Security evaluation: %s", [issue.value for issue in result.issues])
    return result


__all__ = [
    "TEST_CARD_NUMBERS",
    "Severity",
    "SecurityIssue",
    "ValidationResult",
    "evaluate",
    "is_suspicious_pattern",
    "is_test_card_number",
    "is_valid_expiry_date",
]
