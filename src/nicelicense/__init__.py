# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`nicelicense`.

nicelicense scaffolds LICENSE files from a catalog of SPDX licenses and
recognizes existing ones. The stable surface is small:

- Load a catalog with :func:`load_catalog` (bundled by default).
- Fetch and verify canonical text with :class:`LicenseFetcher`.
- Fill holder fields with :func:`fill_license` / :func:`fill`.
- Identify existing text with :func:`identify` (fingerprints),
  :func:`build_matcher` (templates), or a strategy from
  :func:`build_strategy`.

Examples:
    >>> from nicelicense import load_catalog, identify
    >>> catalog = load_catalog()
    >>> result = identify(open("LICENSE").read(), catalog)
"""

from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("nicelicense")
except Exception:  # PackageNotFoundError when running from a source tree
    __version__ = "0.0.0+unknown"

from .core.catalog import (
    FieldTemplate,
    LicenseCatalog,
    LicenseDescriptor,
    Replacement,
    load_catalog,
    parse_catalog,
)
from .core.config import NiceLicenseConfig, load_config_from_path
from .core.errors import (
    CatalogError,
    FetchError,
    FieldValidationError,
    IntegrityError,
    NiceLicenseError,
    TemplateError,
    UsageError,
)
from .core.fetch import LicenseFetcher
from .core.fingerprint import IdentificationResult, identify
from .core.identify import (
    ChainedStrategy,
    FingerprintStrategy,
    IdentificationStrategy,
    PatternStrategy,
    Verdict,
    build_strategy,
)
from .core.integrity import sha256_hex, verify
from .core.normalize import normalize
from .core.pattern import PatternScanResult, TemplateMatcher, build_matcher, scan_catalog
from .core.template import fill, fill_license

__all__ = [
    "__version__",
    "FieldTemplate",
    "LicenseCatalog",
    "LicenseDescriptor",
    "Replacement",
    "load_catalog",
    "parse_catalog",
    "NiceLicenseConfig",
    "load_config_from_path",
    "NiceLicenseError",
    "CatalogError",
    "FetchError",
    "FieldValidationError",
    "IntegrityError",
    "TemplateError",
    "UsageError",
    "LicenseFetcher",
    "IdentificationResult",
    "identify",
    "IdentificationStrategy",
    "FingerprintStrategy",
    "PatternStrategy",
    "ChainedStrategy",
    "Verdict",
    "build_strategy",
    "sha256_hex",
    "verify",
    "normalize",
    "TemplateMatcher",
    "PatternScanResult",
    "build_matcher",
    "scan_catalog",
    "fill",
    "fill_license",
]
