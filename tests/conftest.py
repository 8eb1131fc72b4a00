from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
import pytest


POD = "https://pod.test"


@dataclass
class RecordedRequest:
    url: str
    method: str
    headers: dict[str, str]
    content: str | bytes | None


@dataclass
class StubFetch:
    """Answers requests from a queue of canned responses and records what was sent."""

    responses: list[tuple[int, dict[str, str], str]] = field(default_factory=list)
    requests: list[RecordedRequest] = field(default_factory=list)
    error: Exception | None = None

    def reply(self, status: int = 200, headers: dict[str, str] | None = None, text: str = "") -> StubFetch:
        self.responses.append((status, headers or {}, text))
        return self

    async def __call__(self, url, *, method="GET", headers=None, content=None) -> httpx.Response:
        self.requests.append(RecordedRequest(str(url), method, dict(headers or {}), content))
        if self.error is not None:
            raise self.error
        status, response_headers, text = self.responses.pop(0)
        return httpx.Response(
            status,
            headers=response_headers,
            content=text.encode("utf-8"),
            request=httpx.Request(method, url),
        )

    @property
    def methods(self) -> list[str]:
        return [request.method for request in self.requests]


@pytest.fixture
def stub_fetch() -> StubFetch:
    return StubFetch()


@pytest.fixture
def devpod(monkeypatch: pytest.MonkeyPatch) -> Any:
    from devpod import main

    main.reset_store()
    monkeypatch.setattr(main, "NSS_CONTAINER_QUIRK", False)
    monkeypatch.setattr(main, "POD_OWNER", "")
    yield main
    main.reset_store()


@pytest.fixture
def pod_client(devpod: Any) -> Callable[[], httpx.AsyncClient]:
    """Build clients talking to the in-process development pod."""

    def build() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=devpod.app), base_url=POD)

    return build
