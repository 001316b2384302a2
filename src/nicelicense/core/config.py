# config.py
# SPDX-License-Identifier: MIT
"""Declarative configuration for nicelicense runs.

Dataclasses cover the catalog location, HTTP client settings, logging, and
holder-field defaults. Configs round-trip through plain dicts and can be
loaded from JSON or TOML files.
"""
from __future__ import annotations

import json
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except Exception:  # pragma: no cover
        tomllib = None  # type: ignore[assignment]
from collections.abc import Sequence as ABCSequence
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .fetch import LicenseFetcher
from .identify import STRATEGY_NAMES
from .log import configure_logging, PACKAGE_LOGGER_NAME
from .safe_http import SafeHttpClient

__all__ = [
    "CatalogConfig",
    "HttpConfig",
    "LoggingConfig",
    "DefaultsConfig",
    "NiceLicenseConfig",
    "load_config_from_path",
]

T = TypeVar("T")


@dataclass(slots=True)
class CatalogConfig:
    """Where the license catalog lives; None falls back to env/bundled."""
    path: Optional[str] = None


@dataclass(slots=True)
class HttpConfig:
    """Settings for the HTTP client used to download canonical texts."""
    timeout: float = 30.0
    max_redirects: int = 5
    allowed_redirect_suffixes: Tuple[str, ...] = ("githubusercontent.com", "github.com")
    max_bytes: int = 1024 * 1024
    retries: int = 1
    backoff_base: float = 0.5

    def build_client(self) -> SafeHttpClient:
        """Construct a fresh SafeHttpClient from these settings."""
        return SafeHttpClient(
            timeout=self.timeout,
            max_redirects=self.max_redirects,
            allowed_redirect_suffixes=self.allowed_redirect_suffixes,
            max_bytes=self.max_bytes,
        )

    def build_fetcher(self) -> LicenseFetcher:
        """Construct a LicenseFetcher wired to a new client."""
        return LicenseFetcher(self.build_client(), retries=self.retries, backoff_base=self.backoff_base)


@dataclass(slots=True)
class LoggingConfig:
    level: int | str = "WARNING"
    propagate: bool = False
    fmt: Optional[str] = None

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=PACKAGE_LOGGER_NAME,
        )


@dataclass(slots=True)
class DefaultsConfig:
    """Holder-field defaults that take precedence over git/directory guesses."""
    name: Optional[str] = None
    email: Optional[str] = None
    years: Optional[str] = None
    software: Optional[str] = None
    description: Optional[str] = None
    organization: Optional[str] = None

    def as_mapping(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


@dataclass(slots=True)
class NiceLicenseConfig:
    """Top-level configuration. Holds settings only, never live clients."""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    strategy: str = "fingerprint"

    def validate(self) -> None:
        """Raise ValueError on inconsistent settings."""
        strategy = (self.strategy or "fingerprint").strip().lower()
        if strategy not in STRATEGY_NAMES:
            raise ValueError(f"strategy must be one of {list(STRATEGY_NAMES)}; got {self.strategy!r}.")
        self.strategy = strategy
        if self.http.timeout <= 0:
            raise ValueError("http.timeout must be positive.")
        if self.http.max_redirects < 0 or self.http.retries < 0:
            raise ValueError("http.max_redirects and http.retries must be >= 0.")
        if self.http.max_bytes <= 0:
            raise ValueError("http.max_bytes must be positive.")

    def to_dict(self) -> Dict[str, Any]:
        return _dataclass_to_dict(self)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        return _dataclass_from_dict(cls, data)

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload)

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """Load from TOML; tables mirror the dataclass ([catalog], [http], ...)."""
        if tomllib is None:
            raise RuntimeError(
                "TOML support requires Python 3.11+ (tomllib) or installing the 'tomli' package."
            )
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)


def load_config_from_path(path: str | Path) -> NiceLicenseConfig:
    """Load a NiceLicenseConfig from a ``.json`` or ``.toml`` file.

    Raises:
        ValueError: If the extension is neither ``.toml`` nor ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        cfg = NiceLicenseConfig.from_toml(p)
    elif suffix == ".json":
        cfg = NiceLicenseConfig.from_json(p)
    else:
        raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")
    cfg.validate()
    return cfg


def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize dataclasses to JSON-friendly dicts, skipping None values."""
    result: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        if is_dataclass(value):
            result[f.name] = _dataclass_to_dict(value)
        elif isinstance(value, tuple):
            result[f.name] = list(value)
        else:
            result[f.name] = value
    return result


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate ``cls`` from a mapping, recursing into nested dataclasses.

    Unknown keys are rejected so typos in config files surface early.
    """
    if data is None:
        return cls()  # type: ignore[call-arg]
    if not isinstance(data, Mapping):
        raise TypeError(f"{cls.__name__} expects a mapping; got {type(data).__name__}.")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(unknown)}")
    hints = get_type_hints(cls)
    kwargs = {name: _coerce_value(hints[name], value) for name, value in data.items()}
    return cls(**kwargs)  # type: ignore[arg-type]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    base_type = _strip_optional(expected_type)
    if value is None:
        return None
    if isinstance(base_type, type) and is_dataclass(base_type):
        return _dataclass_from_dict(base_type, value)
    origin = get_origin(base_type)
    if origin in (list, tuple, ABCSequence):
        args = get_args(base_type)
        inner = args[0] if args else Any
        items = [_coerce_value(inner, v) for v in value]
        return tuple(items) if origin is tuple else items
    if base_type in (str, int, float, bool):
        return base_type(value)
    return value


def _strip_optional(typ: Any) -> Any:
    if get_origin(typ) is Union:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            return _strip_optional(args[0])
    return typ
