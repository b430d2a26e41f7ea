from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional

import pytest

from tests._fixtures.token_builder import TokenBuilder
from tgmcheck.resolver import ReleaseRequest, ReleaseResponse, VersionResolver


@pytest.fixture
def token_builder() -> TokenBuilder:
    """Provide a fresh synthetic token stream builder."""
    return TokenBuilder()


@pytest.fixture(autouse=True)
def _no_env_token(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_OAUTH_TOKEN", raising=False)


@pytest.fixture
def resolver_factory() -> Callable[..., VersionResolver]:
    """Build resolvers backed by a canned GitHub response; requests land in ``resolver.requests``."""

    def _factory(
        status: int = 200,
        payload: Optional[object] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> VersionResolver:
        requests: List[ReleaseRequest] = []

        def fetcher(request: ReleaseRequest) -> ReleaseResponse:
            requests.append(request)
            body = json.dumps(payload).encode("utf-8") if payload is not None else b""
            return ReleaseResponse(status=status, headers=dict(headers or {}), body=body)

        resolver = VersionResolver(fetcher=fetcher, **kwargs)
        resolver.requests = requests  # type: ignore[attr-defined]
        return resolver

    return _factory
