# fields.py
# SPDX-License-Identifier: MIT
"""Holder field validation, defaults, and collection."""

from __future__ import annotations

import datetime as _dt
import re
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path

from .catalog import LicenseDescriptor
from .errors import FieldValidationError, TemplateError
from .log import get_logger

__all__ = [
    "KNOWN_FIELDS",
    "validate_field",
    "read_git_config",
    "guess_defaults",
    "collect_field_values",
]

log = get_logger(__name__)

KNOWN_FIELDS = ("name", "email", "years", "software", "description", "organization")

YEARS_RE = re.compile(r"^\d{4}(-\d{4})?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Ask = Callable[[str, str], str]


def validate_field(field: str, value: str | None) -> str:
    """Return the stripped ``value`` or raise :class:`FieldValidationError`."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise FieldValidationError(field, f"{field} is required.")
    if field == "years" and not YEARS_RE.match(cleaned):
        raise FieldValidationError(field, "Years must be YYYY or YYYY-YYYY.")
    if field == "email" and not EMAIL_RE.match(cleaned):
        raise FieldValidationError(field, "Email must be valid.")
    return cleaned


def read_git_config(key: str) -> str | None:
    """Return ``git config --get key`` or None when git is missing or unset."""
    try:
        completed = subprocess.run(
            ["git", "config", "--get", key],
            check=True,
            capture_output=True,
            text=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    value = completed.stdout.strip()
    return value or None


def guess_defaults(
    cwd: str | Path,
    *,
    git: Callable[[str], str | None] = read_git_config,
    today: _dt.date | None = None,
) -> dict[str, str]:
    """Best-effort defaults from git identity, the current year, and the directory name."""
    defaults: dict[str, str] = {}
    name = git("user.name")
    if name:
        defaults["name"] = name
        defaults["organization"] = name
    email = git("user.email")
    if email:
        defaults["email"] = email
    defaults["years"] = str((today or _dt.date.today()).year)
    software = Path(cwd).resolve().name
    if software:
        defaults["software"] = software
    return defaults


def collect_field_values(
    descriptor: LicenseDescriptor,
    provided: Mapping[str, str | None],
    defaults: Mapping[str, str],
    *,
    assume_yes: bool = False,
    ask: Ask | None = None,
) -> dict[str, str]:
    """Gather a validated value for every field ``descriptor`` requires.

    Explicit values win. With ``assume_yes`` remaining fields come from
    ``defaults``; otherwise ``ask(field, default)`` is called for each.

    Raises:
        FieldValidationError: If any chosen value is invalid.
        TemplateError: If required fields remain without a value.
    """
    fields = descriptor.required_fields
    answers: dict[str, str] = {}

    for field in fields:
        value = provided.get(field)
        if value and value.strip():
            answers[field] = validate_field(field, value)

    for field in fields:
        if field in answers:
            continue
        default = defaults.get(field) or ""
        if assume_yes or ask is None:
            if default:
                answers[field] = validate_field(field, default)
            continue
        answers[field] = validate_field(field, ask(field, default))

    missing = [f for f in fields if f not in answers]
    if missing:
        raise TemplateError(
            f"Missing required fields for {descriptor.spdx}: {', '.join(missing)}. "
            "Provide them via CLI flags."
        )
    log.debug("Collected fields for %s: %s", descriptor.spdx, ", ".join(sorted(answers)))
    return answers
