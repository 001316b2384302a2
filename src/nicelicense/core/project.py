# project.py
# SPDX-License-Identifier: MIT
"""Project-directory file operations: LICENSE discovery, writing, package.json."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import UsageError
from .log import get_logger

__all__ = [
    "LICENSE_FILES",
    "ExistingLicenseFile",
    "PackageJsonUpdate",
    "find_existing_license",
    "resolve_output_path",
    "write_license_file",
    "update_package_json_license",
]

log = get_logger(__name__)

LICENSE_FILES = ("LICENSE", "LICENSE.txt", "LICENSE.md")


@dataclass(frozen=True, slots=True)
class ExistingLicenseFile:
    """A LICENSE file found on disk; read once, never mutated by identification."""

    path: Path
    filename: str
    text: str


@dataclass(frozen=True, slots=True)
class PackageJsonUpdate:
    updated: bool
    path: Path | None


def find_existing_license(cwd: str | Path) -> ExistingLicenseFile | None:
    """Return the first of ``LICENSE_FILES`` present in ``cwd``.

    Bytes that are not valid UTF-8 are replaced with U+FFFD so legacy-encoded
    files can still be identified.
    """
    root = Path(cwd)
    for filename in LICENSE_FILES:
        path = root / filename
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            continue
        return ExistingLicenseFile(path=path, filename=filename, text=text)
    return None


def resolve_output_path(
    cwd: str | Path,
    existing: ExistingLicenseFile | None,
    *,
    path: str | None = None,
    assume_yes: bool = False,
    non_interactive: bool = False,
    ask: Callable[[str, str], str] | None = None,
) -> Path:
    """Decide where the license file is written.

    Order: explicit ``path``, the existing license file, ``cwd/LICENSE`` when
    ``assume_yes``, otherwise ask the user.

    Raises:
        UsageError: If no path can be determined without prompting, or the
            user enters an empty path.
    """
    root = Path(cwd)
    if path:
        return (root / path).resolve()
    if existing is not None:
        return existing.path
    if assume_yes:
        return root / "LICENSE"
    if non_interactive or ask is None:
        raise UsageError("Output path is required in non-interactive mode. Provide --path or --yes.")
    answer = ask("Where do you want to save the file", "LICENSE").strip()
    if not answer:
        raise UsageError("Output path is required.")
    return (root / answer).resolve()


def write_license_file(path: str | Path, text: str) -> Path:
    """Write ``text`` with trailing whitespace trimmed and a final newline."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text.rstrip() + "\n", encoding="utf-8")
    log.info("Wrote %s", target)
    return target


def update_package_json_license(
    cwd: str | Path,
    spdx: str,
    *,
    confirm: Callable[[str, str], bool],
) -> PackageJsonUpdate:
    """Set the ``license`` field of ``cwd/package.json`` to ``spdx``.

    A different existing value is only replaced when ``confirm(current, spdx)``
    returns True. A missing package.json is not an error.
    """
    pkg_path = Path(cwd) / "package.json"
    try:
        raw = pkg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return PackageJsonUpdate(updated=False, path=None)
    data = json.loads(raw)
    current = data.get("license") if isinstance(data.get("license"), str) else None
    if current == spdx:
        return PackageJsonUpdate(updated=False, path=pkg_path)
    if current and not confirm(current, spdx):
        return PackageJsonUpdate(updated=False, path=pkg_path)
    data["license"] = spdx
    pkg_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    log.info("Set package.json license to %s", spdx)
    return PackageJsonUpdate(updated=True, path=pkg_path)
