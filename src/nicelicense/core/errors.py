# errors.py
# SPDX-License-Identifier: MIT
"""Exception taxonomy shared by the catalog, fetch, fill, and CLI layers."""

from __future__ import annotations

__all__ = [
    "NiceLicenseError",
    "CatalogError",
    "FetchError",
    "IntegrityError",
    "TemplateError",
    "FieldValidationError",
    "UsageError",
]


class NiceLicenseError(Exception):
    """Base class for every error raised by nicelicense."""


class CatalogError(NiceLicenseError):
    """Raised when a license catalog document is malformed."""


class FetchError(NiceLicenseError):
    """Raised when canonical license text cannot be retrieved."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class IntegrityError(NiceLicenseError):
    """Raised when fetched license text does not match its pinned digest."""

    def __init__(self, spdx: str, *, expected: str, actual: str):
        super().__init__(
            f"Fingerprint mismatch for {spdx}. Update the license catalog before continuing."
        )
        self.spdx = spdx
        self.expected = expected
        self.actual = actual


class TemplateError(NiceLicenseError):
    """Raised when a license template cannot be filled."""


class FieldValidationError(NiceLicenseError):
    """Raised when a holder field value fails validation."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class UsageError(NiceLicenseError):
    """Raised when the CLI cannot proceed without more input from the user."""
