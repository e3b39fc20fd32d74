"""
Provider Client - aiohttp transport for provider HTTP calls.

Generation jobs only depend on the HttpTransport protocol, so anything
with matching post/get coroutines can stand in for ProviderClient.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class HttpResponse:
    """
    Transport-neutral HTTP reply.

    Attributes:
        status: HTTP status code
        data: Decoded JSON body, or None when the body is not JSON
        text: Raw body text
    """
    status: int
    data: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransport(Protocol):
    """What a generation job needs from an HTTP client."""

    async def post(self, url: str, json_body: dict[str, Any], headers: dict[str, str]) -> HttpResponse:
        ...

    async def get(self, url: str, headers: dict[str, str]) -> HttpResponse:
        ...


class ProviderClient:
    """
    HTTP client for provider APIs.

    Either shares a caller-owned ClientSession or lazily creates its own,
    in which case close() (or leaving the async context) releases it.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def __aenter__(self) -> ProviderClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def post(self, url: str, json_body: dict[str, Any], headers: dict[str, str]) -> HttpResponse:
        """POST a JSON body."""
        logger.debug(f"POST {url}")
        session = self._get_session()
        async with session.post(url, json=json_body, headers=headers) as resp:
            return await self._read(resp)

    async def get(self, url: str, headers: dict[str, str]) -> HttpResponse:
        """GET a status or result document."""
        logger.debug(f"GET {url}")
        session = self._get_session()
        async with session.get(url, headers=headers) as resp:
            return await self._read(resp)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None if self._owns_session else self._session

    @staticmethod
    async def _read(resp: aiohttp.ClientResponse) -> HttpResponse:
        text = await resp.text()
        try:
            data = json.loads(text) if text else None
        except json.JSONDecodeError:
            data = None
        return HttpResponse(status=resp.status, data=data, text=text)
