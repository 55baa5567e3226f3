"""Validation and sanitization of driver onboarding input.

Every string field is sanitized before it is validated or stored:
angle brackets and quotes are removed, control characters are stripped,
whitespace is trimmed and the value is truncated to 255 characters.
Validation never raises for bad input; all problems are collected and
returned together.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

MAX_FIELD_LENGTH = 255

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
PHONE_PATTERN = re.compile(r"^[\+]?[\d\s\-\(\)]{10,15}$")
COMPANY_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_STRIPPED_CHARS_RE = re.compile(r"[<>\"'\x00-\x1f\x7f-\x9f]")

DEFAULT_DISPOSABLE_DOMAINS = ("10minutemail", "tempmail", "guerrillamail", "mailinator")

RATE_LABELS = {
    "hourly_rate": "Hourly rate",
    "parcel_rate": "Parcel rate",
    "cover_rate": "Cover rate",
}


def sanitize_input(value: Any) -> str:
    """Sanitize one free-text value.

    Non-string values are treated as empty.

    Args:
        value: Raw value from the request.

    Returns:
        The sanitized string, possibly empty.
    """
    if not isinstance(value, str):
        return ""
    return _STRIPPED_CHARS_RE.sub("", value).strip()[:MAX_FIELD_LENGTH]


@dataclass(frozen=True)
class ValidationIssue:
    """One field-level validation problem.

    Attributes:
        field: Name of the offending input field.
        message: Human-readable message.
        code: Machine-readable code.
    """

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass
class RawDriverInput:
    """Unvalidated driver details as received from an admin."""

    email: Any = None
    first_name: Any = None
    last_name: Any = None
    phone: Any = None
    organization_id: Any = None
    rates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedDriverInput:
    """Driver details that passed validation.

    Attributes:
        email: Lowercased email address.
        first_name: Sanitized first name.
        last_name: Sanitized last name.
        phone: Sanitized phone number, None when not supplied.
        organization_id: Lowercased company UUID.
        rates: Parsed rates keyed by rate name; absent rates are omitted.
    """

    email: str
    first_name: str
    last_name: str
    phone: str | None
    organization_id: str
    rates: dict[str, Decimal] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class DriverInputValidationResult:
    """Outcome of validating a RawDriverInput."""

    normalized: NormalizedDriverInput | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.normalized is not None and not self.issues

    def issue_dicts(self) -> list[dict[str, str]]:
        return [issue.to_dict() for issue in self.issues]


def _format_ceiling(ceiling: Decimal) -> str:
    return format(ceiling.normalize(), "f")


class DriverInputValidator:
    """Validates and normalizes driver details for both onboarding entry points."""

    def __init__(self, disposable_domains: Iterable[str] | None = None) -> None:
        """Initialize the validator.

        Args:
            disposable_domains: Substrings that mark a disposable email domain.
        """
        domains = DEFAULT_DISPOSABLE_DOMAINS if disposable_domains is None else disposable_domains
        self.disposable_domains = tuple(d.lower() for d in domains if d)

    def validate(self, raw: RawDriverInput, rate_ceiling: Decimal) -> DriverInputValidationResult:
        """Validate driver input.

        Args:
            raw: Unvalidated input.
            rate_ceiling: Inclusive upper bound applied to every supplied rate.

        Returns:
            Result holding either the normalized input or every issue found.

        Raises:
            ValueError: If ``rate_ceiling`` is negative.
        """
        rate_ceiling = Decimal(rate_ceiling)
        if rate_ceiling < 0:
            raise ValueError("rate_ceiling must not be negative")

        issues: list[ValidationIssue] = []

        email = sanitize_input(raw.email)
        issues.extend(self._check_email(email))

        first_name = sanitize_input(raw.first_name)
        issues.extend(self._check_name("first_name", first_name))
        last_name = sanitize_input(raw.last_name)
        issues.extend(self._check_name("last_name", last_name))

        phone = sanitize_input(raw.phone) or None
        if phone is not None and not PHONE_PATTERN.match(phone):
            issues.append(
                ValidationIssue("phone", "Invalid phone number format", "invalid_phone")
            )

        organization_id = sanitize_input(raw.organization_id)
        if not COMPANY_ID_PATTERN.match(organization_id):
            issues.append(
                ValidationIssue("company_id", "Invalid company ID format", "invalid_company_id")
            )

        rates: dict[str, Decimal] = {}
        for name, value in (raw.rates or {}).items():
            parsed, issue = self._check_rate(name, value, rate_ceiling)
            if issue is not None:
                issues.append(issue)
            elif parsed is not None:
                rates[name] = parsed

        if issues:
            return DriverInputValidationResult(issues=issues)

        return DriverInputValidationResult(
            normalized=NormalizedDriverInput(
                email=email.lower(),
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                organization_id=organization_id.lower(),
                rates=rates,
            )
        )

    def _check_email(self, email: str) -> list[ValidationIssue]:
        if not EMAIL_PATTERN.match(email):
            return [ValidationIssue("email", "Invalid email format", "invalid_email")]
        domain = email.rsplit("@", 1)[1].lower()
        if any(marker in domain for marker in self.disposable_domains):
            return [
                ValidationIssue(
                    "email",
                    "Disposable email addresses are not allowed",
                    "disposable_email",
                )
            ]
        return []

    @staticmethod
    def _check_name(field_name: str, value: str) -> list[ValidationIssue]:
        if not 2 <= len(value) <= 50:
            return [
                ValidationIssue(field_name, "Name must be between 2-50 characters", "name_length")
            ]
        if not NAME_PATTERN.match(value):
            return [
                ValidationIssue(field_name, "Name contains invalid characters", "name_characters")
            ]
        return []

    @staticmethod
    def _check_rate(
        name: str,
        value: Any,
        ceiling: Decimal,
    ) -> tuple[Decimal | None, ValidationIssue | None]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None, None

        label = RATE_LABELS.get(name, name.replace("_", " ").capitalize())
        issue = ValidationIssue(
            name,
            f"{label} must be between 0-{_format_ceiling(ceiling)}",
            "rate_out_of_range",
        )
        if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
            return None, issue
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return None, issue
        if not parsed.is_finite() or parsed < 0 or parsed > ceiling:
            return None, issue
        return parsed, None
