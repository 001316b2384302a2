import builtins
import io
import json
import sys
from pathlib import Path

import pytest
from conftest import HOLDER_TEMPLATE

from nicelicense.cli.main import main

HOLDER_ENTRY = {
    "spdx": "HOLDER",
    "name": "Holder License",
    "text": HOLDER_TEMPLATE,
    "fingerprints": ["Permission is granted to do anything"],
    "template": {
        "fields": ["years", "name"],
        "replacements": [
            {"field": "years", "start": 14, "end": 20},
            {"field": "name", "start": 21, "end": 28},
        ],
    },
    "warnings": ["Keep the notice."],
}
FILLED_HOLDER = "Copyright (c) 2024 Jane Doe\n\nPermission is granted to do anything.\n"
MIT_ARGS = ["--license", "MIT", "--name", "Jane Doe", "--years", "2024"]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    root.mkdir()
    return root


@pytest.fixture
def non_interactive(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


def _feed_input(monkeypatch, answers):
    pending = list(answers)
    monkeypatch.setattr(builtins, "input", lambda _prompt="": pending.pop(0))
    return pending


def test_cli_writes_bundled_mit(project: Path, capsys):
    rc = main(MIT_ARGS + ["--yes"], cwd=project)

    assert rc == 0
    text = (project / "LICENSE").read_text(encoding="utf-8")
    assert text.startswith("MIT License\n\nCopyright (c) 2024 Jane Doe\n")
    assert text.endswith("SOFTWARE.\n")
    out = capsys.readouterr().out
    assert "Downloading MIT..." in out
    assert "Saved LICENSE." in out
    assert "Copyright (c) 2024 Jane Doe" in out
    assert "No package.json found; skipping license field update." in out


def test_cli_json_write_updates_package_json(project: Path, capsys, non_interactive):
    (project / "package.json").write_text(json.dumps({"name": "demo", "license": "ISC"}), encoding="utf-8")

    rc = main(MIT_ARGS + ["--json", "--yes"], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload == {
        "status": "written",
        "spdx": "MIT",
        "name": "MIT License",
        "path": str(project / "LICENSE"),
        "packageJsonUpdated": True,
        "warnings": [],
    }
    assert json.loads((project / "package.json").read_text(encoding="utf-8"))["license"] == "MIT"


def test_cli_json_requires_license_when_non_interactive(project: Path, capsys, non_interactive):
    rc = main(["--json"], cwd=project)

    assert rc == 1
    payload = _json_out(capsys)
    assert payload["status"] == "error"
    assert "Provide --license" in payload["message"]


def test_cli_json_requires_fields_without_yes(project: Path, capsys, non_interactive):
    rc = main(["--json", "--license", "MIT", "--path", "LICENSE"], cwd=project)

    assert rc == 1
    assert _json_out(capsys)["message"] == "Missing required fields in non-interactive mode: years, name."
    assert not (project / "LICENSE").exists()


def test_cli_json_requires_path_without_yes(project: Path, capsys, non_interactive):
    rc = main(MIT_ARGS + ["--json"], cwd=project)

    assert rc == 1
    assert "Provide --path or --yes" in _json_out(capsys)["message"]


def test_cli_stdout_json(project: Path, capsys, non_interactive):
    rc = main(MIT_ARGS + ["--json", "--stdout"], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload["status"] == "stdout"
    assert "Copyright (c) 2024 Jane Doe" in payload["licenseText"]
    assert not (project / "LICENSE").exists()


def test_cli_stdout_plain(project: Path, capsys):
    rc = main(MIT_ARGS + ["--stdout", "--yes"], cwd=project)

    assert rc == 0
    out = capsys.readouterr().out
    assert out.startswith("MIT License\n")
    assert "Downloading" not in out


def test_cli_dry_run_writes_nothing(project: Path, capsys, non_interactive):
    rc = main(MIT_ARGS + ["--json", "--yes", "--dry-run"], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload["status"] == "dry_run"
    assert payload["path"] == str(project / "LICENSE")
    assert not (project / "LICENSE").exists()


def test_cli_unknown_license(project: Path, capsys):
    rc = main(["--license", "NOPE", "--yes"], cwd=project)

    assert rc == 1
    assert "Unknown license: NOPE" in capsys.readouterr().err


def test_cli_existing_license_without_selection(project: Path, capsys, non_interactive):
    (project / "LICENSE.md").write_text("Existing", encoding="utf-8")

    rc = main(["--json"], cwd=project)

    assert rc == 0
    assert _json_out(capsys) == {"status": "existing", "path": str(project / "LICENSE.md")}


def test_cli_existing_license_needs_yes_to_replace(project: Path, capsys, non_interactive):
    (project / "LICENSE").write_text("Existing", encoding="utf-8")

    rc = main(MIT_ARGS + ["--json"], cwd=project)

    assert rc == 1
    assert "Provide --yes" in _json_out(capsys)["message"]
    assert (project / "LICENSE").read_text(encoding="utf-8") == "Existing"


def test_cli_replaces_existing_license_in_place(project: Path, capsys):
    (project / "LICENSE.txt").write_text("Existing", encoding="utf-8")

    rc = main(MIT_ARGS + ["--yes"], cwd=project)

    assert rc == 0
    out = capsys.readouterr().out
    assert "Found LICENSE.txt." in out
    assert "--license MIT requested, will replace." in out
    assert "Copyright (c) 2024 Jane Doe" in (project / "LICENSE.txt").read_text(encoding="utf-8")


def test_cli_declined_overwrite_keeps_file(project: Path, capsys, monkeypatch):
    (project / "LICENSE").write_text("Existing", encoding="utf-8")
    _feed_input(monkeypatch, ["n"])

    rc = main(MIT_ARGS, cwd=project)

    assert rc == 0
    assert "Leaving existing license unchanged." in capsys.readouterr().out
    assert (project / "LICENSE").read_text(encoding="utf-8") == "Existing"


def test_cli_interactive_flow(project: Path, write_catalog, capsys, monkeypatch):
    catalog = write_catalog([HOLDER_ENTRY])
    pending = _feed_input(monkeypatch, ["HOLDER", "2024", "Jane Doe", ""])

    rc = main(["--data", str(catalog)], cwd=project)

    assert rc == 0
    assert pending == []
    assert (project / "LICENSE").read_text(encoding="utf-8") == FILLED_HOLDER
    captured = capsys.readouterr()
    assert "HOLDER - Holder License" in captured.out
    assert "Warning: Keep the notice." in captured.err


def test_cli_interactive_empty_selection(project: Path, write_catalog, capsys, monkeypatch):
    catalog = write_catalog([HOLDER_ENTRY])
    _feed_input(monkeypatch, [""])

    rc = main(["--data", str(catalog)], cwd=project)

    assert rc == 0
    assert "No license selected." in capsys.readouterr().out


def test_cli_integrity_mismatch_is_fatal(project: Path, write_catalog, capsys):
    catalog = write_catalog([dict(HOLDER_ENTRY, sha256="0" * 64)])

    rc = main(["--data", str(catalog), "--license", "HOLDER", "--yes", "--name", "Jane"], cwd=project)

    assert rc == 1
    err = capsys.readouterr().err
    assert "Fingerprint mismatch for HOLDER. Update the license catalog before continuing." in err
    assert not (project / "LICENSE").exists()


def test_cli_catalog_from_env(project: Path, write_catalog, capsys, monkeypatch):
    monkeypatch.setenv("NICELICENSE_DATA", str(write_catalog([HOLDER_ENTRY])))

    rc = main(["--list"], cwd=project)

    assert rc == 0
    assert capsys.readouterr().out == "HOLDER - Holder License\n"


def test_cli_config_supplies_defaults(project: Path, write_catalog, tmp_path: Path, capsys):
    catalog = write_catalog([HOLDER_ENTRY])
    config = tmp_path / "nicelicense.toml"
    config.write_text(
        f'[catalog]\npath = "{catalog.as_posix()}"\n\n[defaults]\nname = "Config Holder"\nyears = "2020"\n',
        encoding="utf-8",
    )

    rc = main(["--config", str(config), "--license", "HOLDER", "--yes"], cwd=project)

    assert rc == 0
    assert (project / "LICENSE").read_text(encoding="utf-8").startswith("Copyright (c) 2020 Config Holder\n")


def test_cli_bad_config_reports_error(project: Path, tmp_path: Path, capsys):
    config = tmp_path / "nicelicense.json"
    config.write_text(json.dumps({"strategy": "coinflip"}), encoding="utf-8")

    rc = main(["--config", str(config), "--list"], cwd=project)

    assert rc == 1
    assert "strategy must be one of" in capsys.readouterr().err


def test_cli_list_bundled(project: Path, capsys):
    rc = main(["--list"], cwd=project)

    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "MIT - MIT License"
    assert "Apache-2.0 - Apache License 2.0" in lines


def test_cli_list_verbose(project: Path, capsys):
    main(["--list", "--verbose"], cwd=project)

    out = capsys.readouterr().out
    assert "  url: https://www.apache.org/licenses/LICENSE-2.0.txt" in out
    assert "  template: years, name" in out
    assert "  warnings: " in out


def test_cli_list_json(project: Path, capsys):
    main(["--list", "--json"], cwd=project)

    licenses = _json_out(capsys)["licenses"]
    mit = licenses[0]
    assert mit["spdx"] == "MIT"
    assert mit["templateFields"] == ["years", "name"]
    assert len(mit["sha256"]) == 64
    apache = next(item for item in licenses if item["spdx"] == "Apache-2.0")
    assert apache["sha256"] is None
    assert apache["warnings"]


def test_cli_validate_identifies_written_license(project: Path, capsys):
    main(MIT_ARGS + ["--yes"], cwd=project)
    capsys.readouterr()

    rc = main(["--validate"], cwd=project)

    assert rc == 0
    assert capsys.readouterr().out == (
        "Identified LICENSE as MIT (100% confidence, 3/3 fingerprints matched).\n"
    )


def test_cli_validate_json(project: Path, capsys):
    (project / "LICENSE").write_text(FILLED_HOLDER, encoding="utf-8")

    rc = main(["--validate", "--json", "--data", str(_holder_catalog(project))], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload["status"] == "identified"
    assert payload["spdx"] == "HOLDER"
    assert payload["strategy"] == "fingerprint"
    assert payload["confidence"] == 1.0
    assert payload["confidencePercent"] == "100%"
    assert payload["matchedFingerprints"] == payload["totalFingerprints"] == 1


def _holder_catalog(root: Path) -> Path:
    path = root / "catalog.json"
    path.write_text(
        json.dumps([{k: v for k, v in HOLDER_ENTRY.items() if k != "text"} | {"url": "data:,unused"}]),
        encoding="utf-8",
    )
    return path


def test_cli_validate_missing(project: Path, capsys):
    rc = main(["--validate"], cwd=project)

    assert rc == 0
    assert capsys.readouterr().out == "No LICENSE file found.\n"


def test_cli_validate_unknown(project: Path, capsys):
    (project / "LICENSE").write_text("All rights reserved.", encoding="utf-8")

    rc = main(["--validate", "--json"], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload["status"] == "unknown"
    assert payload["message"] == "Could not identify LICENSE - no matching fingerprints found."
    assert "error" not in payload


def test_cli_validate_pattern_strategy(project: Path, write_catalog, capsys):
    entry = {k: v for k, v in HOLDER_ENTRY.items() if k != "fingerprints"}
    catalog = write_catalog([entry])
    (project / "LICENSE").write_text("Copyright (c) 1999  ACME Widgets\n\nPermission is granted to do anything.", encoding="utf-8")

    rc = main(["--validate", "--data", str(catalog), "--strategy", "pattern"], cwd=project)

    assert rc == 0
    assert capsys.readouterr().out == "Identified LICENSE as HOLDER (template match).\n"


def test_cli_validate_pattern_reports_incomplete_scan(project: Path, write_catalog, capsys):
    catalog = write_catalog([dict(HOLDER_ENTRY, sha256="0" * 64)])
    (project / "LICENSE").write_text(FILLED_HOLDER, encoding="utf-8")

    rc = main(["--validate", "--data", str(catalog), "--strategy", "pattern", "--json"], cwd=project)

    assert rc == 0
    payload = _json_out(capsys)
    assert payload["status"] == "unknown"
    assert payload["message"] == "Could not identify LICENSE - no known license matched."
    assert payload["error"].startswith("Fingerprint mismatch for HOLDER.")


def test_cli_validate_latin1_license(project: Path, capsys):
    main(MIT_ARGS + ["--yes", "--name", "José García"], cwd=project)
    capsys.readouterr()
    license_path = project / "LICENSE"
    license_path.write_bytes(license_path.read_text(encoding="utf-8").encode("latin-1"))

    rc = main(["--validate"], cwd=project)

    assert rc == 0
    assert capsys.readouterr().out.startswith("Identified LICENSE as MIT (100% confidence")
