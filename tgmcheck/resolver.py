"""Lookup of the latest stable TGMPA release on GitHub."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from http.client import HTTPException
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from . import __version__
from .logging import get_logger
from .versioning import normalise_release_tag

FALLBACK_VERSION = "2.5.0"


class ResolverError(str, Enum):
    """Sticky resolver problems worth telling the user about once."""

    AUTH_INVALID = "auth_invalid"
    RATE_LIMITED = "rate_limited"


@dataclass
class ReleaseRequest:
    """Represents the HTTP request for the latest release listing."""

    url: str
    headers: Dict[str, str]
    timeout: float


@dataclass
class ReleaseResponse:
    """Raw response; header names are lower-cased."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolver call: the version to compare against and any sticky error."""

    version: str
    error: Optional[ResolverError] = None
    from_upstream: bool = False


class VersionResolver:
    """Fetches the latest TGMPA release tag once and caches it for the run."""

    DEFAULT_API_URL = "https://api.github.com/repos/TGMPA/TGM-Plugin-Activation/releases/latest"
    ENV_TOKEN_KEYS = ("GITHUB_OAUTH_TOKEN",)
    USER_AGENT = f"tgmcheck/{__version__}"

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        fallback_version: str = FALLBACK_VERSION,
        request_timeout: float = 10.0,
        offline: bool = False,
        fetcher: Callable[[ReleaseRequest], ReleaseResponse] | None = None,
    ) -> None:
        self.token = token or None
        self.api_url = api_url or self.DEFAULT_API_URL
        self.fallback_version = fallback_version
        self.request_timeout = request_timeout
        self.offline = offline
        self._fetcher = fetcher or self._http_fetcher
        self._resolution: Optional[Resolution] = None
        self._lock = threading.Lock()
        self.logger = get_logger("resolver")

    def resolve(self, token: Optional[str] = None) -> Resolution:
        """Return the latest stable version; only the first call touches the network."""
        with self._lock:
            if self._resolution is None:
                self._resolution = self._fetch_resolution(token)
            return self._resolution

    def _fetch_resolution(self, token: Optional[str]) -> Resolution:
        fallback = Resolution(version=self.fallback_version)
        if self.offline:
            self.logger.debug("Offline mode; using fallback version %s", self.fallback_version)
            return fallback

        effective_token = self._resolve_token(token)
        request = ReleaseRequest(
            url=self.api_url,
            headers=self._build_headers(effective_token),
            timeout=self.request_timeout,
        )
        self.logger.debug("Requesting latest release from %s", request.url)

        try:
            response = self._fetcher(request)
        except (OSError, HTTPException, ValueError) as exc:
            self.logger.debug("Release lookup failed (%s); using fallback version %s", exc, self.fallback_version)
            return fallback

        status = response.status
        if status == 401 and effective_token:
            self.logger.debug("GitHub rejected the supplied token")
            return Resolution(version=self.fallback_version, error=ResolverError.AUTH_INVALID)

        if status == 403 and response.headers.get("x-ratelimit-remaining") == "0":
            self.logger.debug("GitHub API rate limit exhausted")
            return Resolution(version=self.fallback_version, error=ResolverError.RATE_LIMITED)

        if status != 200:
            # Something unexpected going on, just ignore it.
            self.logger.debug("Unexpected status %s from release lookup; ignoring", status)
            return fallback

        try:
            payload = json.loads(response.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self.logger.debug("Release lookup returned invalid JSON; using fallback version")
            return fallback

        version = self._extract_version(payload)
        if version is None:
            return fallback
        self.logger.debug("Latest stable TGMPA release is %s", version)
        return Resolution(version=version, from_upstream=True)

    def _resolve_token(self, token: Optional[str]) -> Optional[str]:
        if token:
            return token
        if self.token:
            return self.token
        return self._first_env_value(self.ENV_TOKEN_KEYS)

    def _build_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {
            "User-Agent": self.USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    @staticmethod
    def _extract_version(payload: object) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        tag = payload.get("tag_name")
        if not isinstance(tag, str) or not tag.strip():
            return None
        prerelease = payload.get("prerelease")
        if prerelease is not None and prerelease is not False:
            return None
        return normalise_release_tag(tag)

    @staticmethod
    def _http_fetcher(request: ReleaseRequest) -> ReleaseResponse:
        http_request = Request(request.url, headers=request.headers, method="GET")
        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                return ReleaseResponse(
                    status=response.status,
                    headers=_lower_headers(response.headers.items()),
                    body=response.read(),
                )
        except HTTPError as exc:
            headers = exc.headers.items() if exc.headers is not None else ()
            return ReleaseResponse(status=exc.code, headers=_lower_headers(headers), body=b"")

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> Optional[str]:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


def _lower_headers(items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    return {name.lower(): value.strip() for name, value in items}


__all__ = [
    "FALLBACK_VERSION",
    "ReleaseRequest",
    "ReleaseResponse",
    "Resolution",
    "ResolverError",
    "VersionResolver",
]
