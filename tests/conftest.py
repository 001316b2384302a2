import json
import logging
from pathlib import Path

import pytest

from nicelicense.core.catalog import LicenseDescriptor, parse_catalog
from nicelicense.core.integrity import sha256_hex

HOLDER_TEMPLATE = "Copyright (c) <year> <owner>\n\nPermission is granted to do anything.\n"


@pytest.fixture(autouse=True)
def _restore_package_logger():
    logger = logging.getLogger("nicelicense")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]


def make_descriptor(spdx, fingerprints=(), **kwargs):
    return LicenseDescriptor(
        spdx=spdx,
        name=kwargs.pop("name", f"{spdx} License"),
        url=kwargs.pop("url", f"https://example.com/{spdx}.txt"),
        fingerprints=tuple(fingerprints),
        **kwargs,
    )


@pytest.fixture
def write_catalog(tmp_path: Path):
    """Write license texts plus a JSON catalog under ``tmp_path/catalog``."""

    def _write(entries, *, filename="licenses.json"):
        root = tmp_path / "catalog"
        root.mkdir(exist_ok=True)
        records = []
        for entry in entries:
            record = dict(entry)
            text = record.pop("text", None)
            if text is not None:
                (root / f"{record['spdx']}.txt").write_text(text, encoding="utf-8")
                record.setdefault("url", f"{record['spdx']}.txt")
                if record.pop("pin", True):
                    record.setdefault("sha256", sha256_hex(text))
            records.append(record)
        path = root / filename
        path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def holder_catalog(tmp_path: Path):
    """Two-entry catalog whose first entry is a tiny holder template on disk."""
    (tmp_path / "HOLDER.txt").write_text(HOLDER_TEMPLATE, encoding="utf-8")
    return parse_catalog(
        [
            {
                "spdx": "HOLDER",
                "name": "Holder License",
                "url": "HOLDER.txt",
                "sha256": sha256_hex(HOLDER_TEMPLATE),
                "fingerprints": ["Permission is granted to do anything"],
                "template": {
                    "fields": ["years", "name"],
                    "replacements": [
                        {"field": "years", "start": 14, "end": 20},
                        {"field": "name", "start": 21, "end": 28},
                    ],
                },
                "warnings": ["Keep the notice."],
            },
            {"spdx": "OTHER", "name": "Other License", "url": "https://example.com/other.txt"},
        ],
        base_dir=tmp_path,
    )
