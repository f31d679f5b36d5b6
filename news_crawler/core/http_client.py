"""Shared aiohttp client with retries on transport errors."""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential


DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Connection failures and timeouts only; HTTP error statuses are the caller's business
_transport_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((ClientError, asyncio.TimeoutError)),
    reraise=True,
)


class AsyncHTTPClient:
    """Pooled aiohttp session, opened on first request.

    Whoever creates the client owns the session and must ``close()`` it
    (or use ``async with``).
    """

    def __init__(self, timeout_seconds: float = 30, user_agent: str = DEFAULT_USER_AGENT,
                 headers: Optional[Dict[str, str]] = None):
        self.session: Optional[aiohttp.ClientSession] = None
        self.timeout = ClientTimeout(total=timeout_seconds, connect=10)
        self.headers = {'User-Agent': user_agent, **(headers or {})}

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self.session is not None and not self.session.closed:
            return
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=20, limit_per_host=5, ttl_dns_cache=300),
            timeout=self.timeout,
            headers=self.headers,
        )

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    @_transport_retry
    async def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> aiohttp.ClientResponse:
        await self.start()
        return await self.session.get(url, headers=headers, **kwargs)

    @_transport_retry
    async def post(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None,
                   **kwargs) -> aiohttp.ClientResponse:
        await self.start()
        return await self.session.post(url, json=json, headers=headers, **kwargs)

    async def fetch_text(self, url: str, **kwargs) -> str:
        """GET a page and return its decoded body; raises on HTTP error status.

        Bytes that do not fit the declared charset become U+FFFD instead of
        failing the whole page.
        """
        async with await self.get(url, **kwargs) as response:
            response.raise_for_status()
            return await response.text(errors="replace")
