# safe_http.py
# SPDX-License-Identifier: MIT
"""Stdlib-only GET client for license downloads.

Resolved addresses must be globally routable, connections are pinned to the
vetted IP, redirects stay on related hosts (or an explicit suffix allowlist),
HTTPS never downgrades to HTTP, and response bodies are capped.
"""

from __future__ import annotations

import http.client
import ipaddress
import socket
import ssl
import urllib.parse
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from .log import get_logger

__all__ = [
    "HttpError",
    "PrivateAddressBlocked",
    "RedirectBlocked",
    "ResponseTooLarge",
    "SafeHttpResponse",
    "SafeHttpClient",
]

log = get_logger(__name__)

DEFAULT_USER_AGENT = "nicelicense"


class HttpError(OSError):
    """Transport-level failure raised by :class:`SafeHttpClient`."""


class PrivateAddressBlocked(HttpError):
    """Raised when every resolved address for a host is disallowed."""


class RedirectBlocked(HttpError):
    """Raised when a redirect leaves the origin host family or downgrades scheme."""


class ResponseTooLarge(HttpError):
    """Raised when a response body exceeds the configured byte cap."""


class _PinnedHTTPConnection(http.client.HTTPConnection):
    """HTTPConnection that dials a pre-resolved IP."""

    def __init__(self, host: str, *, resolved_ip: str, **kwargs):
        super().__init__(host=host, **kwargs)
        self._resolved_ip = resolved_ip

    def connect(self) -> None:
        self.sock = socket.create_connection(
            (self._resolved_ip, self.port), self.timeout, self.source_address
        )


class _PinnedHTTPSConnection(http.client.HTTPSConnection):
    """HTTPSConnection that dials a pre-resolved IP but verifies the hostname."""

    def __init__(self, host: str, *, resolved_ip: str, **kwargs):
        super().__init__(host=host, **kwargs)
        self._resolved_ip = resolved_ip

    def connect(self) -> None:
        sock = socket.create_connection(
            (self._resolved_ip, self.port), self.timeout, self.source_address
        )
        self.sock = self._context.wrap_socket(sock, server_hostname=self.host)


@dataclass(frozen=True, slots=True)
class SafeHttpResponse:
    """Fully-read response of a GET request."""

    url: str
    status: int
    reason: str
    headers: Mapping[str, str]
    body: bytes
    redirects: tuple[tuple[str, str, int], ...] = ()

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)


def allow_public_ip(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    """Accept only globally routable unicast addresses."""
    if not addr.is_global:
        return False
    return not (addr.is_multicast or addr.is_unspecified or addr.is_loopback or addr.is_link_local)


def _normalize_host(host: str | None) -> str | None:
    if not host:
        return None
    return host.rstrip(".").lower() or None


def _host_in_suffix(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


class SafeHttpClient:
    """GET-only HTTP client with address and redirect safeguards.

    Args:
        timeout (float): Socket timeout in seconds.
        max_redirects (int): Redirects followed before giving up.
        allowed_redirect_suffixes (Sequence[str] | None): Host suffixes
            between which redirects are always allowed, e.g.
            ``githubusercontent.com``.
        max_bytes (int): Largest response body accepted.
        allow_ip (Callable | None): Override for the address filter.
    """

    _REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        max_redirects: int = 5,
        allowed_redirect_suffixes: Sequence[str] | None = None,
        max_bytes: int = 1024 * 1024,
        allow_ip: Callable[[ipaddress.IPv4Address | ipaddress.IPv6Address], bool] | None = None,
    ):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.max_bytes = max_bytes
        self.trusted_suffixes = frozenset(
            s.lower().lstrip(".") for s in (allowed_redirect_suffixes or ()) if s
        )
        self._allow_ip = allow_ip or allow_public_ip

    def resolve(self, hostname: str) -> list[str]:
        """Resolve ``hostname`` and keep only allowed addresses, in order."""
        try:
            infos = socket.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        except socket.gaierror as exc:
            raise HttpError(f"DNS resolution failed for {hostname}: {exc}") from exc
        ips: list[str] = []
        for _family, _type, _proto, _canon, sockaddr in infos:
            ip = sockaddr[0]
            if ip in ips:
                continue
            if self._allow_ip(ipaddress.ip_address(ip)):
                ips.append(ip)
        if not ips:
            raise PrivateAddressBlocked(f"All resolved addresses for {hostname} are disallowed")
        return ips

    def hosts_related(self, origin: str | None, target: str | None) -> bool:
        """Whether a redirect from ``origin`` to ``target`` stays in one host family."""
        origin_n = _normalize_host(origin)
        target_n = _normalize_host(target)
        if not origin_n or not target_n:
            return False
        if target_n == origin_n or target_n.endswith("." + origin_n):
            return True
        if origin_n.endswith("." + target_n) and "." in target_n:
            return True
        return any(
            _host_in_suffix(origin_n, suffix) and _host_in_suffix(target_n, suffix)
            for suffix in self.trusted_suffixes
        )

    def _connect(self, scheme: str, host: str, ip: str, port: int) -> http.client.HTTPConnection:
        if scheme == "https":
            return _PinnedHTTPSConnection(
                host,
                resolved_ip=ip,
                port=port,
                timeout=self.timeout,
                context=ssl.create_default_context(),
            )
        return _PinnedHTTPConnection(host, resolved_ip=ip, port=port, timeout=self.timeout)

    def get(self, url: str, *, headers: Mapping[str, str] | None = None) -> SafeHttpResponse:
        """Fetch ``url``, following safe redirects, and return the whole body.

        Raises:
            HttpError: On DNS, connection, redirect, or size-cap failures.
        """
        origin = urllib.parse.urlsplit(url).hostname
        redirects: list[tuple[str, str, int]] = []
        current = url
        while True:
            status, reason, resp_headers, body, location = self._get_once(current, headers)
            if status not in self._REDIRECT_CODES:
                log.debug("GET %s status=%s redirects=%d", current, status, len(redirects))
                return SafeHttpResponse(
                    url=current,
                    status=status,
                    reason=reason,
                    headers=resp_headers,
                    body=body,
                    redirects=tuple(redirects),
                )
            if len(redirects) >= self.max_redirects:
                raise RedirectBlocked("Too many redirects")
            if not location:
                raise RedirectBlocked("Redirect response missing Location header")
            target = urllib.parse.urljoin(current, location)
            self._check_redirect(current, target, origin)
            redirects.append((current, target, status))
            current = target

    def _check_redirect(self, current: str, target: str, origin: str | None) -> None:
        old_scheme = urllib.parse.urlsplit(current).scheme.lower()
        parts = urllib.parse.urlsplit(target)
        new_scheme = parts.scheme.lower()
        if new_scheme not in ("http", "https"):
            raise RedirectBlocked(f"Redirect blocked: scheme {new_scheme!r} not permitted")
        if old_scheme == "https" and new_scheme == "http":
            raise RedirectBlocked("Redirect blocked: https to http downgrade")
        if not self.hosts_related(origin, parts.hostname):
            raise RedirectBlocked(
                f"Redirect blocked: cross-host redirect from {origin} to {parts.hostname}"
            )

    def _get_once(self, url: str, headers: Mapping[str, str] | None):
        parts = urllib.parse.urlsplit(url)
        scheme = (parts.scheme or "http").lower()
        if scheme not in ("http", "https"):
            raise HttpError(f"Unsupported URL scheme: {scheme}")
        host = parts.hostname
        if not host:
            raise HttpError(f"URL missing host: {url}")
        port = parts.port or (443 if scheme == "https" else 80)
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        request_headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "text/plain, */*"}
        request_headers.update({k: v for k, v in (headers or {}).items() if k.lower() != "host"})

        last_error: OSError | None = None
        for ip in self.resolve(host):
            conn = self._connect(scheme, host, ip, port)
            try:
                conn.request("GET", path, headers=request_headers)
                response = conn.getresponse()
                body = response.read(self.max_bytes + 1)
            except (OSError, http.client.HTTPException) as exc:
                last_error = exc
                conn.close()
                continue
            try:
                if len(body) > self.max_bytes:
                    raise ResponseTooLarge(f"Response from {url} exceeds {self.max_bytes} bytes")
                return (
                    response.status,
                    response.reason,
                    dict(response.getheaders()),
                    body,
                    response.getheader("Location"),
                )
            finally:
                response.close()
                conn.close()
        raise HttpError(f"All resolved addresses for {host} failed: {last_error}") from last_error
