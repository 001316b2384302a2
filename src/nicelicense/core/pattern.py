# pattern.py
# SPDX-License-Identifier: MIT
"""
Structural matching of license text against placeholder templates.

A template such as ``Copyright (c) <year> <owner>`` becomes a regex that
requires the literal skeleton verbatim (modulo whitespace) and accepts any
non-empty filler where ``<...>`` or ``[...]`` placeholders were.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .catalog import LicenseDescriptor
from .errors import FetchError, IntegrityError, NiceLicenseError
from .log import get_logger
from .normalize import normalize

__all__ = ["TemplateMatcher", "PatternScanResult", "build_matcher", "build_pattern", "scan_catalog"]

log = get_logger(__name__)

PLACEHOLDER_RE = re.compile(r"<[^>]+>|\[[^\]]+\]")
WILDCARD = ".+?"
FLEXIBLE_SPACE = r"\s+"


def build_pattern(template_text: str) -> str:
    """Return the anchored-at-use regex source for ``template_text``."""
    literal_parts = PLACEHOLDER_RE.split(normalize(template_text))
    escaped = (
        FLEXIBLE_SPACE.join(re.escape(word) for word in part.split(" "))
        for part in literal_parts
    )
    return WILDCARD.join(escaped)


@dataclass(frozen=True)
class TemplateMatcher:
    """Compiled whole-text matcher for one license template."""

    regex: re.Pattern[str]

    def test(self, candidate: str) -> bool:
        """True if the whole (normalized) ``candidate`` fits the template."""
        return self.regex.fullmatch(candidate) is not None


def build_matcher(template_text: str) -> TemplateMatcher:
    """Compile ``template_text`` into a :class:`TemplateMatcher`."""
    return TemplateMatcher(re.compile(build_pattern(template_text), re.DOTALL))


@dataclass(frozen=True, slots=True)
class PatternScanResult:
    """Outcome of scanning a catalog with template matchers.

    ``match`` is the first accepting license. ``error`` is the first fetch or
    integrity failure seen while no license had matched yet; when both are
    None every entry was fetched and none matched.
    """

    match: LicenseDescriptor | None = None
    error: NiceLicenseError | None = None


def scan_catalog(
    text: str,
    catalog: Iterable[LicenseDescriptor],
    fetch: Callable[[LicenseDescriptor], str],
) -> PatternScanResult:
    """Return the first catalog entry whose canonical text matches ``text``.

    Entries that fail to fetch or verify are skipped so one unreachable
    license does not block the rest; only the first such error is kept.
    """
    candidate = normalize(text)
    first_error: NiceLicenseError | None = None
    for descriptor in catalog:
        try:
            canonical = fetch(descriptor)
        except (FetchError, IntegrityError) as exc:
            log.warning("Skipping %s during template scan: %s", descriptor.spdx, exc)
            if first_error is None:
                first_error = exc
            continue
        if build_matcher(canonical).test(candidate):
            log.debug("Template for %s accepted the candidate text", descriptor.spdx)
            return PatternScanResult(match=descriptor)
    return PatternScanResult(error=first_error)
