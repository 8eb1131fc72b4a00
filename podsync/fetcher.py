from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

import httpx

from podsync import settings


logger = logging.getLogger(__name__)


class Response(Protocol):
    """The subset of a response the engine reads. ``httpx.Response`` fits."""

    status_code: int

    @property
    def reason_phrase(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def text(self) -> str: ...

    @property
    def url(self) -> Any: ...


class Fetch(Protocol):
    async def __call__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
    ) -> Response: ...


def create_client(**kwargs: Any) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", settings.REQUEST_TIMEOUT)
    kwargs.setdefault("follow_redirects", settings.FOLLOW_REDIRECTS)
    headers = {"User-Agent": settings.USER_AGENT, **kwargs.pop("headers", {})}
    return httpx.AsyncClient(headers=headers, **kwargs)


def client_fetch(client: httpx.AsyncClient) -> Fetch:
    """Adapt an ``httpx.AsyncClient`` to the request mechanism the engine expects."""

    async def fetch(
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
    ) -> httpx.Response:
        logger.debug(f"{method} {url}")
        return await client.request(method, url, headers=headers, content=content)

    return fetch


def is_unsuccessful(response: Response) -> bool:
    return not 200 <= response.status_code < 300


def response_url(response: Response, fallback: str) -> str:
    url = str(response.url or "")
    return url or fallback
