# catalog.py
# SPDX-License-Identifier: MIT
"""
License catalog models and loaders.

A catalog is an ordered list of license descriptors. Each descriptor names
an SPDX id, where its canonical text lives, an optional pinned SHA-256 of
that text, optional identification fingerprints, an optional fill template
(required fields plus replacement spans), and free-text warnings.

Catalogs are read from JSON (a top-level array, or an object with a
``licenses`` array), TOML (``[[licenses]]`` tables), or YAML. Relative
``url`` values are resolved against the catalog's directory so a catalog can
ship its canonical texts next to itself.
"""

from __future__ import annotations

import json
import os
import urllib.parse
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except Exception:  # pragma: no cover
        tomllib = None  # type: ignore[assignment]

import yaml

from .errors import CatalogError
from .log import get_logger

__all__ = [
    "BUNDLED_CATALOG",
    "CATALOG_ENV_VAR",
    "Replacement",
    "FieldTemplate",
    "LicenseDescriptor",
    "LicenseCatalog",
    "parse_catalog",
    "load_catalog",
    "resolve_catalog_path",
]

log = get_logger(__name__)

CATALOG_ENV_VAR = "NICELICENSE_DATA"
BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "licenses.json"

_URL_SCHEMES = ("http", "https", "file", "data")


@dataclass(frozen=True, slots=True)
class Replacement:
    """Half-open ``[start, end)`` span of canonical text filled by ``field``."""

    field: str
    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class FieldTemplate:
    """Required holder fields and the spans they replace."""

    fields: tuple[str, ...] = ()
    replacements: tuple[Replacement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": list(self.fields),
            "replacements": [r.to_dict() for r in self.replacements],
        }


@dataclass(frozen=True, slots=True)
class LicenseDescriptor:
    """
    One catalog entry, keyed by SPDX identifier.

    Attributes:
        spdx (str): SPDX license identifier, unique within a catalog.
        name (str): Human-readable license name.
        url (str): Location of the canonical text (http(s), file, data URL).
        sha256 (str | None): Pinned lowercase hex digest of the canonical text.
        fingerprints (tuple[str, ...]): Literal phrases used for
            identification. Empty means the license is never identified by
            fingerprint.
        template (FieldTemplate | None): Holder fields and their spans.
        warnings (tuple[str, ...]): Advisories shown after writing.
    """

    spdx: str
    name: str
    url: str
    sha256: str | None = None
    fingerprints: tuple[str, ...] = ()
    template: FieldTemplate | None = None
    warnings: tuple[str, ...] = ()

    @property
    def required_fields(self) -> tuple[str, ...]:
        return self.template.fields if self.template else ()

    @property
    def replacements(self) -> tuple[Replacement, ...]:
        return self.template.replacements if self.template else ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the catalog record shape, omitting unset optionals."""
        data: dict[str, Any] = {"spdx": self.spdx, "name": self.name, "url": self.url}
        if self.sha256:
            data["sha256"] = self.sha256
        if self.fingerprints:
            data["fingerprints"] = list(self.fingerprints)
        if self.template is not None:
            data["template"] = self.template.to_dict()
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, base_dir: Path | None = None) -> LicenseDescriptor:
        """Build a descriptor from one catalog record.

        Raises:
            CatalogError: If required keys are missing or the template is
                malformed.
        """
        if not isinstance(data, Mapping):
            raise CatalogError(f"License entries must be objects; got {type(data).__name__}.")
        missing = [key for key in ("spdx", "name", "url") if not _as_str(data.get(key))]
        if missing:
            label = _as_str(data.get("spdx")) or "<unnamed>"
            raise CatalogError(f"License entry {label} is missing {', '.join(missing)}.")
        spdx = _as_str(data["spdx"])
        template = _parse_template(spdx, data.get("template"))
        return cls(
            spdx=spdx,
            name=_as_str(data["name"]),
            url=_resolve_url(_as_str(data["url"]), base_dir),
            sha256=(_as_str(data.get("sha256")) or None),
            fingerprints=_str_tuple(spdx, "fingerprints", data.get("fingerprints")),
            template=template,
            warnings=_str_tuple(spdx, "warnings", data.get("warnings")),
        )


@dataclass(frozen=True)
class LicenseCatalog:
    """Ordered, SPDX-keyed collection of license descriptors."""

    licenses: tuple[LicenseDescriptor, ...] = ()
    source: Path | None = None
    _index: dict[str, LicenseDescriptor] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for descriptor in self.licenses:
            if descriptor.spdx in self._index:
                raise CatalogError(f"Duplicate SPDX id in license catalog: {descriptor.spdx}")
            self._index[descriptor.spdx] = descriptor

    def __iter__(self) -> Iterator[LicenseDescriptor]:
        return iter(self.licenses)

    def __len__(self) -> int:
        return len(self.licenses)

    def __contains__(self, spdx: object) -> bool:
        return spdx in self._index

    def get(self, spdx: str) -> LicenseDescriptor | None:
        return self._index.get(spdx)

    def ids(self) -> list[str]:
        return [d.spdx for d in self.licenses]


def parse_catalog(data: Any, *, base_dir: Path | None = None, source: Path | None = None) -> LicenseCatalog:
    """Validate a decoded catalog document and build a :class:`LicenseCatalog`.

    Args:
        data (Any): Decoded JSON/TOML/YAML document.
        base_dir (Path | None): Directory relative ``url`` values resolve against.
        source (Path | None): Path the document was read from, for messages.

    Raises:
        CatalogError: If the document or any record is malformed.
    """
    if isinstance(data, Mapping) and "licenses" in data:
        data = data["licenses"]
    if not isinstance(data, Sequence) or isinstance(data, (str, bytes)):
        raise CatalogError("License list must be an array.")
    descriptors = tuple(LicenseDescriptor.from_dict(item, base_dir=base_dir) for item in data)
    return LicenseCatalog(descriptors, source=source)


def load_catalog(path: str | Path | None = None) -> LicenseCatalog:
    """Load a catalog from ``path`` (``.json``, ``.toml``, ``.yaml``/``.yml``).

    When ``path`` is None the bundled catalog is used.
    """
    p = Path(path).expanduser() if path else BUNDLED_CATALOG
    try:
        raw = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CatalogError(f"License catalog not found: {p}") from exc

    suffix = p.suffix.lower()
    try:
        if suffix == ".toml":
            if tomllib is None:
                raise CatalogError(
                    "TOML catalogs require Python 3.11+ (tomllib) or the 'tomli' package."
                )
            data = tomllib.loads(raw)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (ValueError, yaml.YAMLError) as exc:
        raise CatalogError(f"Could not parse license catalog {p}: {exc}") from exc

    catalog = parse_catalog(data, base_dir=p.resolve().parent, source=p)
    log.debug("Loaded %d license(s) from %s", len(catalog), p)
    return catalog


def resolve_catalog_path(
    explicit: str | Path | None = None,
    configured: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Pick the catalog path: CLI flag, then config, then env var, then bundled."""
    env = os.environ if environ is None else environ
    for candidate in (explicit, configured, env.get(CATALOG_ENV_VAR)):
        if candidate:
            return Path(candidate).expanduser().resolve()
    return BUNDLED_CATALOG


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _str_tuple(spdx: str, key: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise CatalogError(f"{spdx}: {key} must be a list of strings.")
    return tuple(str(item) for item in value if str(item))


def _parse_template(spdx: str, raw: Any) -> FieldTemplate | None:
    """Validate a ``template`` object; span bounds vs. text length are checked at fill time."""
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise CatalogError(f"{spdx}: template must be an object.")
    fields = _str_tuple(spdx, "template.fields", raw.get("fields"))
    declared = set(fields)
    replacements: list[Replacement] = []
    raw_reps = raw.get("replacements") or ()
    if isinstance(raw_reps, (str, bytes)) or not isinstance(raw_reps, Sequence):
        raise CatalogError(f"{spdx}: template.replacements must be a list.")
    for item in raw_reps:
        if not isinstance(item, Mapping):
            raise CatalogError(f"{spdx}: each replacement must be an object.")
        name = _as_str(item.get("field"))
        if not name:
            raise CatalogError(f"{spdx}: replacement is missing its field name.")
        if name not in declared:
            raise CatalogError(f"{spdx}: replacement field {name!r} is not declared in template.fields.")
        try:
            start = int(item["start"])
            end = int(item["end"])
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"{spdx}: replacement for {name!r} needs integer start and end.") from exc
        if start < 0 or end < start:
            raise CatalogError(f"{spdx}: replacement for {name!r} has invalid span [{start}, {end}).")
        replacements.append(Replacement(field=name, start=start, end=end))
    return FieldTemplate(fields=fields, replacements=tuple(replacements))


def _resolve_url(url: str, base_dir: Path | None) -> str:
    scheme = urllib.parse.urlsplit(url).scheme.lower()
    if scheme in _URL_SCHEMES:
        return url
    path = Path(url).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path.resolve().as_uri()
