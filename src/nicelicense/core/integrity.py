# integrity.py
# SPDX-License-Identifier: MIT
"""SHA-256 pinning for downloaded canonical license bodies."""

from __future__ import annotations

import hashlib

from .errors import IntegrityError
from .log import get_logger

__all__ = ["sha256_hex", "verify"]

log = get_logger(__name__)


def sha256_hex(text: str) -> str:
    """Return the lowercase SHA-256 hex digest of the UTF-8 encoding of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def verify(text: str, expected_digest: str | None, *, spdx: str = "license") -> str:
    """Return ``text`` unchanged if it matches ``expected_digest``.

    When no digest is pinned the text passes through unchecked; pinning is an
    explicit opt-in made by whoever curates the catalog.

    Args:
        text (str): Canonical license text exactly as fetched.
        expected_digest (str | None): Pinned lowercase hex SHA-256, or None.
        spdx (str): SPDX identifier used in the error message.

    Returns:
        str: The same ``text``.

    Raises:
        IntegrityError: If the computed digest differs from the pinned one.
    """
    if not expected_digest:
        log.debug("No digest pinned for %s; accepting fetched text as-is", spdx)
        return text
    actual = sha256_hex(text)
    if actual != expected_digest.strip().lower():
        raise IntegrityError(spdx, expected=expected_digest, actual=actual)
    log.debug("Digest verified for %s (%s)", spdx, actual)
    return text
