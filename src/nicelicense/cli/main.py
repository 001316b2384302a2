# main.py
# SPDX-License-Identifier: MIT
"""Command-line entry point: list, validate, and write LICENSE files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from ..core.catalog import LicenseCatalog, load_catalog, resolve_catalog_path
from ..core.config import NiceLicenseConfig, load_config_from_path
from ..core.errors import UsageError
from ..core.fields import KNOWN_FIELDS, collect_field_values, guess_defaults
from ..core.identify import STRATEGY_NAMES, build_strategy
from ..core.log import get_logger
from ..core.project import (
    find_existing_license,
    resolve_output_path,
    update_package_json_license,
    write_license_file,
)
from ..core.template import fill_license
from . import prompts

log = get_logger(__name__)

PREVIEW_MAX_LINES = 40


def _build_parser() -> argparse.ArgumentParser:
    """Build the nicelicense argument parser."""
    parser = argparse.ArgumentParser(
        prog="nicelicense",
        description="Pick an SPDX license, fill in holder details, and write a LICENSE file.",
    )
    parser.add_argument("--license", metavar="SPDX", help="Select a license without prompting.")
    parser.add_argument("--data", metavar="PATH", help="Load licenses from a custom catalog (JSON, TOML, YAML).")
    parser.add_argument("--config", metavar="PATH", help="Load settings from a TOML or JSON config file.")
    parser.add_argument("--path", help="Write the license to a specific path.")
    parser.add_argument("--name", help="License holder name.")
    parser.add_argument("--email", help="License holder email.")
    parser.add_argument("--years", help="Copyright years (e.g. 2024 or 2020-2024).")
    parser.add_argument("--software", help="Software/project name.")
    parser.add_argument("--description", help="Project description.")
    parser.add_argument("--organization", help="Organization name.")
    parser.add_argument("-l", "--list", action="store_true", help="Print supported SPDX IDs.")
    parser.add_argument("--validate", action="store_true", help="Identify the existing LICENSE file.")
    parser.add_argument(
        "--strategy",
        choices=STRATEGY_NAMES,
        help="Identification strategy for --validate (default: fingerprint).",
    )
    parser.add_argument("--dry-run", action="store_true", help="Do not write files or update package.json.")
    parser.add_argument("--stdout", action="store_true", help="Emit license text to stdout (no files written).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Include URLs and metadata with --list.")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON output.")
    parser.add_argument("-y", "--yes", action="store_true", help="Accept prompts (overwrite/license field updates).")
    parser.add_argument("--log-level", help="Logging level (e.g., DEBUG, INFO, WARNING).")
    return parser


def _emit_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload) + "\n")


def _load_settings(args: argparse.Namespace) -> NiceLicenseConfig:
    """Load config (if any) and apply CLI overrides."""
    cfg = load_config_from_path(args.config) if args.config else NiceLicenseConfig()
    if args.strategy:
        cfg.strategy = args.strategy
    if args.log_level:
        cfg.logging.level = args.log_level
    cfg.validate()
    return cfg


def _cmd_list(catalog: LicenseCatalog, args: argparse.Namespace) -> int:
    if args.json:
        _emit_json(
            {
                "licenses": [
                    {
                        "spdx": d.spdx,
                        "name": d.name,
                        "url": d.url,
                        "sha256": d.sha256,
                        "templateFields": list(d.required_fields),
                        "warnings": list(d.warnings),
                    }
                    for d in catalog
                ]
            }
        )
        return 0
    for d in catalog:
        print(f"{d.spdx} - {d.name}")
        if not args.verbose:
            continue
        print(f"  url: {d.url}")
        if d.sha256:
            print(f"  sha256: {d.sha256}")
        if d.required_fields:
            print(f"  template: {', '.join(d.required_fields)}")
        if d.warnings:
            print(f"  warnings: {'; '.join(d.warnings)}")
    return 0


def _cmd_validate(catalog: LicenseCatalog, cfg: NiceLicenseConfig, args: argparse.Namespace, cwd: Path) -> int:
    """Identify an existing LICENSE file with the configured strategy."""
    existing = find_existing_license(cwd)
    if existing is None:
        if args.json:
            _emit_json({"status": "missing", "message": "No LICENSE file found."})
        else:
            print("No LICENSE file found.")
        return 0

    fetch = cfg.http.build_fetcher() if cfg.strategy != "fingerprint" else None
    verdict = build_strategy(cfg.strategy, fetch).identify(existing.text, catalog)

    if verdict.license is not None:
        payload: dict[str, Any] = {
            "status": "identified",
            "spdx": verdict.license.spdx,
            "name": verdict.license.name,
            "path": str(existing.path),
            "strategy": verdict.strategy,
        }
        detail = verdict.fingerprints
        if detail is not None:
            payload.update(
                confidence=detail.confidence,
                confidencePercent=f"{detail.confidence_percent}%",
                matchedFingerprints=detail.matched_fingerprints,
                totalFingerprints=detail.total_fingerprints,
            )
            summary = (
                f"({detail.confidence_percent}% confidence, "
                f"{detail.matched_fingerprints}/{detail.total_fingerprints} fingerprints matched)"
            )
        else:
            summary = "(template match)"
        if args.json:
            _emit_json(payload)
        else:
            print(f"Identified {existing.filename} as {verdict.license.spdx} {summary}.")
        return 0

    if cfg.strategy == "fingerprint":
        message = "Could not identify LICENSE - no matching fingerprints found."
    else:
        message = "Could not identify LICENSE - no known license matched."
    if args.json:
        payload = {"status": "unknown", "message": message, "path": str(existing.path)}
        if verdict.error is not None:
            payload["error"] = str(verdict.error)
        _emit_json(payload)
    else:
        print(message)
        if verdict.error is not None:
            print(f"Scan incomplete: {verdict.error}", file=sys.stderr)
    return 0


def _cmd_write(catalog: LicenseCatalog, cfg: NiceLicenseConfig, args: argparse.Namespace, cwd: Path) -> int:
    """Select, download, fill, and write a license."""
    non_interactive = args.json and not sys.stdin.isatty()
    quiet = args.json or args.stdout
    ask = None if non_interactive else prompts.ask_text

    defaults = guess_defaults(cwd)
    defaults.update(cfg.defaults.as_mapping())
    existing = find_existing_license(cwd)

    requested = None
    if args.license:
        requested = catalog.get(args.license)
        if requested is None:
            raise UsageError(f"Unknown license: {args.license}")

    if existing is not None:
        if not quiet:
            print(f"Found {existing.filename}.")
        if requested is None:
            if args.json:
                _emit_json({"status": "existing", "path": str(existing.path)})
            return 0
        if non_interactive and not args.yes:
            raise UsageError("Overwrite confirmation required in non-interactive mode. Provide --yes to proceed.")
        if not (args.yes or prompts.confirm(f"Replace existing {existing.filename}?")):
            if args.json:
                _emit_json({"status": "skipped", "reason": "overwrite_declined"})
            else:
                print("Leaving existing license unchanged.")
            return 0
        if not args.json:
            print(f"--license {requested.spdx} requested, will replace.")

    if requested is None and non_interactive:
        raise UsageError("License selection required in non-interactive mode. Provide --license.")
    selected = requested
    if selected is None:
        choice = prompts.select("Pick a license", [(d.spdx, f"{d.spdx} - {d.name}") for d in catalog])
        selected = catalog.get(choice) if choice else None
    if selected is None:
        if args.json:
            _emit_json({"status": "skipped", "reason": "no_selection"})
        else:
            print("No license selected.")
        return 0

    if not quiet:
        print(f"Downloading {selected.spdx}...")
    canonical = cfg.http.build_fetcher().fetch(selected)

    provided = {field: getattr(args, field, None) for field in KNOWN_FIELDS}
    if non_interactive and not args.yes:
        missing = [f for f in selected.required_fields if not (provided.get(f) or "").strip()]
        if missing:
            raise UsageError(f"Missing required fields in non-interactive mode: {', '.join(missing)}.")
    values = collect_field_values(selected, provided, defaults, assume_yes=args.yes, ask=ask)
    filled = fill_license(selected, canonical, values)
    warnings = list(selected.warnings)

    if args.stdout:
        if args.json:
            _emit_json(
                {
                    "status": "stdout",
                    "spdx": selected.spdx,
                    "name": selected.name,
                    "licenseText": filled,
                    "warnings": warnings,
                }
            )
        else:
            sys.stdout.write(filled.rstrip() + "\n")
        return 0

    target = resolve_output_path(
        cwd,
        existing,
        path=args.path,
        assume_yes=args.yes,
        non_interactive=non_interactive,
        ask=ask,
    )
    if args.dry_run:
        if args.json:
            _emit_json(
                {
                    "status": "dry_run",
                    "spdx": selected.spdx,
                    "name": selected.name,
                    "path": str(target),
                    "warnings": warnings,
                }
            )
        else:
            print(f"Dry run: would write {target.name}.")
        return 0

    write_license_file(target, filled)

    def _confirm_package_json(current: str, new: str) -> bool:
        if args.yes:
            return True
        if non_interactive:
            raise UsageError(
                "package.json license update requires confirmation in non-interactive mode. Provide --yes."
            )
        return prompts.confirm(f"Update package.json license from {current} to {new}?")

    update = update_package_json_license(cwd, selected.spdx, confirm=_confirm_package_json)

    if args.json:
        _emit_json(
            {
                "status": "written",
                "spdx": selected.spdx,
                "name": selected.name,
                "path": str(target),
                "packageJsonUpdated": update.updated,
                "warnings": warnings,
            }
        )
        return 0

    print(f"Saved {target.name}.")
    if len(filled.splitlines()) <= PREVIEW_MAX_LINES:
        print("\n--------\n")
        print(filled.rstrip())
        print("\n--------\n")
    for warning in warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if update.path is not None and update.updated:
        print("Updated package.json license field.")
    elif update.path is None:
        print("No package.json found; skipping license field update.")
    return 0


def _dispatch(args: argparse.Namespace, cwd: Path) -> int:
    """Run the action selected by the parsed arguments and return an exit code."""
    cfg = _load_settings(args)
    cfg.logging.apply()
    catalog = load_catalog(resolve_catalog_path(args.data, cfg.catalog.path))
    log.debug("Using catalog %s (%d licenses)", catalog.source, len(catalog))

    if args.list:
        return _cmd_list(catalog, args)
    if args.validate:
        return _cmd_validate(catalog, cfg, args, cwd)
    return _cmd_write(catalog, cfg, args, cwd)


def main(argv: Optional[Sequence[str]] = None, *, cwd: str | Path | None = None) -> int:
    """Entry point for the nicelicense command-line interface.

    Args:
        argv (Sequence[str] | None): Arguments to parse instead of
            ``sys.argv[1:]``.
        cwd (str | Path | None): Project directory; defaults to the process
            working directory.

    Returns:
        int: Process exit code, 0 on success and 1 on any error.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    workdir = Path(cwd) if cwd is not None else Path.cwd()
    try:
        return _dispatch(args, workdir)
    except Exception as exc:  # noqa: BLE001
        message = str(exc) or exc.__class__.__name__
        log.debug("nicelicense failed", exc_info=True)
        if args.json:
            _emit_json({"status": "error", "message": message})
        else:
            print(message, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
