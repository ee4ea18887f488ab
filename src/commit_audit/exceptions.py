"""Exceptions raised by commit-audit."""

from __future__ import annotations


class AuditError(Exception):
    """Base exception for all commit-audit errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(AuditError):
    """A window or config file is structurally invalid, e.g. mixes day names and dates."""


class InvalidInputError(AuditError):
    """A single value could not be parsed (day name, time of day, date)."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Invalid {field}: {value!r}",
            details={"field": field, "reason": reason},
        )
        self.field = field
        self.value = value
        self.reason = reason
