# identify.py
# SPDX-License-Identifier: MIT
"""Pluggable strategies for recognizing an existing LICENSE file."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .catalog import LicenseDescriptor
from .errors import NiceLicenseError
from .fingerprint import IdentificationResult, identify
from .pattern import scan_catalog

__all__ = [
    "Verdict",
    "IdentificationStrategy",
    "FingerprintStrategy",
    "PatternStrategy",
    "ChainedStrategy",
    "STRATEGY_NAMES",
    "build_strategy",
]

Fetch = Callable[[LicenseDescriptor], str]


@dataclass(frozen=True, slots=True)
class Verdict:
    """Common result shape for every identification strategy.

    Attributes:
        strategy (str): Name of the strategy that produced the verdict.
        license (LicenseDescriptor | None): Identified license, if any.
        confidence (float): Score in ``[0, 1]``; template matches score 1.0.
        fingerprints (IdentificationResult | None): Fingerprint detail.
        error (NiceLicenseError | None): First fetch or integrity error that
            left a scan incomplete.
    """

    strategy: str
    license: LicenseDescriptor | None = None
    confidence: float = 0.0
    fingerprints: IdentificationResult | None = None
    error: NiceLicenseError | None = None

    @property
    def identified(self) -> bool:
        return self.license is not None


@runtime_checkable
class IdentificationStrategy(Protocol):
    """Anything that can name the license of a piece of text."""

    name: str

    def identify(self, text: str, catalog: Iterable[LicenseDescriptor]) -> Verdict:
        ...


class FingerprintStrategy:
    """Offline identification by fingerprint phrase coverage."""

    name = "fingerprint"

    def identify(self, text: str, catalog: Iterable[LicenseDescriptor]) -> Verdict:
        result = identify(text, catalog)
        if result is None:
            return Verdict(self.name)
        return Verdict(
            self.name,
            license=result.license,
            confidence=result.confidence,
            fingerprints=result,
        )


class PatternStrategy:
    """Identification by matching against each entry's fetched canonical template."""

    name = "pattern"

    def __init__(self, fetch: Fetch):
        self.fetch = fetch

    def identify(self, text: str, catalog: Iterable[LicenseDescriptor]) -> Verdict:
        result = scan_catalog(text, catalog, self.fetch)
        if result.match is None:
            return Verdict(self.name, error=result.error)
        return Verdict(self.name, license=result.match, confidence=1.0)


class ChainedStrategy:
    """Try strategies in order and keep the first verdict that identifies a license."""

    name = "auto"

    def __init__(self, strategies: Sequence[IdentificationStrategy]):
        if not strategies:
            raise ValueError("ChainedStrategy needs at least one strategy.")
        self.strategies = tuple(strategies)

    def identify(self, text: str, catalog: Iterable[LicenseDescriptor]) -> Verdict:
        entries = tuple(catalog)
        error: NiceLicenseError | None = None
        for strategy in self.strategies:
            verdict = strategy.identify(text, entries)
            if verdict.identified:
                return verdict
            error = error or verdict.error
        return Verdict(self.name, error=error)


STRATEGY_NAMES = ("fingerprint", "pattern", "auto")


def build_strategy(name: str, fetch: Fetch | None = None) -> IdentificationStrategy:
    """Construct a strategy by name; ``pattern`` and ``auto`` need ``fetch``."""
    key = (name or "fingerprint").strip().lower()
    if key == "fingerprint":
        return FingerprintStrategy()
    if key not in STRATEGY_NAMES:
        raise ValueError(f"Unknown identification strategy {name!r}; expected one of {STRATEGY_NAMES}.")
    if fetch is None:
        raise ValueError(f"The {key} strategy needs a fetch callable.")
    if key == "pattern":
        return PatternStrategy(fetch)
    return ChainedStrategy([FingerprintStrategy(), PatternStrategy(fetch)])
