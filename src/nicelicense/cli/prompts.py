# prompts.py
# SPDX-License-Identifier: MIT
"""Minimal interactive prompts built on ``input()``."""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["ask_text", "confirm", "select"]

_YES = {"y", "yes"}
_NO = {"n", "no"}


def ask_text(message: str, default: str = "") -> str:
    """Ask for a line of text; an empty answer returns ``default``."""
    suffix = f" [{default}]" if default else ""
    answer = input(f"{message}{suffix}: ").strip()
    return answer or default


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question until the answer is recognizable."""
    hint = "Y/n" if default else "y/N"
    while True:
        answer = input(f"{message} [{hint}] ").strip().lower()
        if not answer:
            return default
        if answer in _YES:
            return True
        if answer in _NO:
            return False
        print("Please answer 'y' or 'n'.")


def select(message: str, choices: Sequence[tuple[str, str]]) -> str | None:
    """Pick one key from ``(key, label)`` choices by number or by key.

    Returns None when the user enters nothing.
    """
    for idx, (_key, label) in enumerate(choices, start=1):
        print(f"  {idx:>2}. {label}")
    keys = [key for key, _ in choices]
    lowered = {key.lower(): key for key in keys}
    while True:
        answer = input(f"{message}: ").strip()
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(keys):
            return keys[int(answer) - 1]
        if answer.lower() in lowered:
            return lowered[answer.lower()]
        print(f"Unknown choice {answer!r}; enter a number or an SPDX id.")
