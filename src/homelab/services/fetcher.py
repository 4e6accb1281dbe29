from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from homelab.errors import FetchNetworkError, FetchTimeout, UpstreamStatusError

logger = logging.getLogger(__name__)


@dataclass
class FetchResponse:
    url: str
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def json(self) -> Any:
        return json.loads(self.content)


class BoundedFetcher:
    """One outbound GET with a hard deadline, redirects and a fixed User-Agent.

    Raises ``FetchTimeout``, ``FetchNetworkError`` or ``UpstreamStatusError``;
    never retries.
    """

    def __init__(
        self,
        timeout: float,
        user_agent: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def get(self, url: str) -> FetchResponse:
        try:
            # httpx timeouts are per phase; the outer deadline caps the whole exchange
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(
                    transport=self.transport,
                    timeout=self.timeout,
                    follow_redirects=True,
                    headers={"User-Agent": self.user_agent},
                ) as client:
                    response = await client.get(url)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise FetchTimeout(f"{url} timed out after {self.timeout}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchNetworkError(f"{url} failed: {exc.__class__.__name__}") from exc

        if not response.is_success:
            raise UpstreamStatusError(url, response.status_code)

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers.items()),
        )
