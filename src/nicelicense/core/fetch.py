# fetch.py
# SPDX-License-Identifier: MIT
"""Retrieve canonical license text and verify it against the catalog pin."""

from __future__ import annotations

import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable

from .catalog import LicenseDescriptor
from .errors import FetchError
from .integrity import verify
from .log import get_logger
from .safe_http import HttpError, SafeHttpClient

__all__ = ["LicenseFetcher"]

log = get_logger(__name__)

_LOCAL_SCHEMES = ("file", "data")


class LicenseFetcher:
    """Download license bodies over HTTP(S) or read them from file/data URLs.

    Network access goes through the supplied :class:`SafeHttpClient`; there
    is no shared module-level client. Failed HTTP requests are retried
    ``retries`` times with exponential backoff starting at ``backoff_base``
    seconds.
    """

    def __init__(
        self,
        client: SafeHttpClient | None = None,
        *,
        retries: int = 0,
        backoff_base: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client or SafeHttpClient()
        self.retries = max(0, int(retries))
        self.backoff_base = backoff_base
        self._sleep = sleep

    def fetch(self, descriptor: LicenseDescriptor) -> str:
        """Return the verified canonical text for ``descriptor``.

        Raises:
            FetchError: If the text cannot be retrieved or decoded.
            IntegrityError: If it does not match ``descriptor.sha256``.
        """
        text = self.fetch_text(descriptor.url)
        return verify(text, descriptor.sha256, spdx=descriptor.spdx)

    __call__ = fetch

    def fetch_text(self, url: str) -> str:
        scheme = urllib.parse.urlsplit(url).scheme.lower()
        if scheme in _LOCAL_SCHEMES:
            body = self._read_local(url)
        elif scheme in ("http", "https"):
            body = self._download(url)
        else:
            raise FetchError(f"Unsupported license URL: {url}", url=url)
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FetchError(f"License text at {url} is not valid UTF-8.", url=url) from exc

    def _read_local(self, url: str) -> bytes:
        try:
            with urllib.request.urlopen(url) as response:
                return response.read()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise FetchError(f"Failed to read license: {exc}", url=url) from exc

    def _download(self, url: str) -> bytes:
        attempts = self.retries + 1
        for attempt in range(attempts):
            try:
                response = self.client.get(url)
            except HttpError as exc:
                if attempt >= attempts - 1:
                    raise FetchError(f"Failed to download license: {exc}", url=url) from exc
                delay = self.backoff_base * (2 ** attempt)
                log.debug("Retrying %s in %.2fs after %s", url, delay, exc)
                if delay > 0:
                    self._sleep(delay)
                continue
            if not response.ok:
                raise FetchError(
                    f"Failed to download license: {response.status} {response.reason}",
                    url=url,
                    status=response.status,
                )
            log.debug("Downloaded %d bytes from %s", len(response.body), response.url)
            return response.body
        raise FetchError(f"Failed to download license from {url}", url=url)  # pragma: no cover
