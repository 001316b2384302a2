# normalize.py
# SPDX-License-Identifier: MIT
"""Layout-insensitive canonical form for license text comparisons."""

from __future__ import annotations

import re

__all__ = ["normalize", "normalize_for_search"]

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Return ``text`` with CRLF folded, whitespace runs collapsed, and ends trimmed.

    Reflowed or re-indented copies of the same license normalize to the same
    string, and ``normalize(normalize(t)) == normalize(t)`` for every ``t``.
    """
    text = text.replace("\r\n", "\n")
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_for_search(text: str) -> str:
    """Normalized, lower-cased text used for case-insensitive substring search."""
    return normalize(text).lower()
