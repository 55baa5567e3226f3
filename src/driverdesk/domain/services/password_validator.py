"""Password policy for drivers completing onboarding.

A driver chooses a password when accepting an invitation. It must be at
least ``min_length`` characters and mix upper case, lower case and digits.
Problems are reported as ValidationIssue entries on the ``password`` field,
in the same shape the driver input validator uses.
"""

import re

from driverdesk.domain.services.driver_input_validator import ValidationIssue

# (pattern, code, message) for each required character class
CHARACTER_RULES: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r"[A-Z]"), "password_no_uppercase", "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "password_no_lowercase", "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "password_no_digit", "Password must contain at least one digit"),
)


class PasswordValidator:
    """Checks a chosen password against the onboarding policy."""

    def __init__(self, min_length: int = 8) -> None:
        self.min_length = min_length

    def validate(self, password: str | None) -> list[ValidationIssue]:
        """Return every policy violation; an empty list means acceptable.

        Non-string input is treated as an empty password.
        """
        password = password if isinstance(password, str) else ""
        issues: list[ValidationIssue] = []
        if len(password) < self.min_length:
            issues.append(
                ValidationIssue(
                    "password",
                    f"Password must be at least {self.min_length} characters",
                    "password_too_short",
                )
            )
        issues.extend(
            ValidationIssue("password", message, code)
            for pattern, code, message in CHARACTER_RULES
            if not pattern.search(password)
        )
        return issues

    def is_valid(self, password: str | None) -> bool:
        return not self.validate(password)


default_password_validator = PasswordValidator()
