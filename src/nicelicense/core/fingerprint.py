# fingerprint.py
# SPDX-License-Identifier: MIT
"""Identify license text by counting characteristic phrases per catalog entry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .catalog import LicenseDescriptor
from .log import get_logger
from .normalize import normalize_for_search

__all__ = ["IdentificationResult", "count_fingerprints", "identify"]

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class IdentificationResult:
    """Best fingerprint match for a candidate text.

    Attributes:
        license (LicenseDescriptor): Matched catalog entry.
        confidence (float): ``matched / total``, in ``(0, 1]``.
        matched_fingerprints (int): Fingerprints found in the candidate.
        total_fingerprints (int): Fingerprints configured for the entry.
    """

    license: LicenseDescriptor
    confidence: float
    matched_fingerprints: int
    total_fingerprints: int

    @property
    def confidence_percent(self) -> int:
        return int(self.confidence * 100 + 0.5)

    def outranks(self, other: IdentificationResult | None) -> bool:
        """Higher confidence wins; equal confidence falls back to more matched phrases."""
        if other is None:
            return True
        if self.confidence != other.confidence:
            return self.confidence > other.confidence
        return self.matched_fingerprints > other.matched_fingerprints


def count_fingerprints(normalized_text: str, fingerprints: Iterable[str]) -> int:
    """Count fingerprints occurring in ``normalized_text`` (already lower-cased)."""
    return sum(1 for fp in fingerprints if fp.lower() in normalized_text)


def identify(text: str, catalog: Iterable[LicenseDescriptor]) -> IdentificationResult | None:
    """Return the catalog entry whose fingerprints best cover ``text``.

    Entries without fingerprints are never identified, and entries with no
    matching fingerprint contribute nothing. Among the rest the first entry
    with the highest confidence wins; ties on confidence go to the entry
    that matched more phrases, and remaining ties keep catalog order.

    Returns:
        IdentificationResult | None: The best match, or None when no
        fingerprint of any entry appears in ``text``.
    """
    haystack = normalize_for_search(text)
    best: IdentificationResult | None = None

    for descriptor in catalog:
        fingerprints = descriptor.fingerprints
        if not fingerprints:
            continue
        matched = count_fingerprints(haystack, fingerprints)
        if matched == 0:
            continue
        candidate = IdentificationResult(
            license=descriptor,
            confidence=matched / len(fingerprints),
            matched_fingerprints=matched,
            total_fingerprints=len(fingerprints),
        )
        log.debug("%s matched %d/%d fingerprints", descriptor.spdx, matched, len(fingerprints))
        if candidate.outranks(best):
            best = candidate

    return best
