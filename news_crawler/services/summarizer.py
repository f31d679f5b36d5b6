"""AI summarization of newly stored articles (Qwen / DashScope)."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Sequence

from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..config import Settings
from ..core.exceptions import APIError, RateLimitError
from ..core.http_client import AsyncHTTPClient
from ..crawler.base import Article
from .prompts import SummaryPrompts


logger = logging.getLogger(__name__)


class SummaryBackend(ABC):
    """Anything that turns a prompt into summary text."""

    @abstractmethod
    async def summarize(self, prompt: str) -> str:
        """
        Raises:
            RateLimitError: The backend is throttling us
            APIError: Any other backend failure
        """
        pass

    async def close(self):
        pass


class QwenBackend(SummaryBackend):
    """Client for the DashScope text-generation endpoint."""

    def __init__(self, api_key: str, api_url: str, model: str = "qwen-flash",
                 max_tokens: int = 500, temperature: float = 0.7, timeout_seconds: float = 60):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = AsyncHTTPClient(timeout_seconds=timeout_seconds)

    def build_payload(self, prompt: str, max_tokens: Optional[int] = None) -> dict:
        return {
            "model": self.model,
            "input": {
                "messages": [
                    {"role": "system", "content": SummaryPrompts.SYSTEM},
                    {"role": "user", "content": prompt},
                ]
            },
            "parameters": {
                "max_tokens": max_tokens or self.max_tokens,
                "temperature": self.temperature,
            },
        }

    async def summarize(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
        }
        payload = self.build_payload(prompt, max_tokens)

        response = await self.client.post(self.api_url, json=payload, headers=headers)
        async with response:
            response_text = await response.text()

            if response.status == 429:
                raise RateLimitError(response_text=response_text)
            if response.status != 200:
                logger.error("Qwen API error %s: %s", response.status, response_text[:500])
                raise APIError(
                    f"Qwen API error: {response.status}",
                    status_code=response.status,
                    response_text=response_text,
                )

        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response from API: {e}", status_code=200,
                           response_text=response_text) from e

        text = self._extract_text(data)
        if not text:
            raise APIError("Empty summary in API response", status_code=200, response_text=response_text)

        usage = data.get('usage') or {}
        logger.debug("Qwen usage: %s tokens", usage.get('total_tokens', 'n/a'))
        return text.strip()

    @staticmethod
    def _extract_text(data: dict) -> Optional[str]:
        output = data.get('output') or {}
        if output.get('text'):
            return output['text']
        # result_format=message
        choices = output.get('choices') or []
        if choices:
            return (choices[0].get('message') or {}).get('content')
        return None

    async def close(self):
        await self.client.close()


class BatchSummary(dict):
    """URL -> summary mapping, plus the URLs that got no summary and why."""

    def __init__(self):
        super().__init__()
        self.skipped: List[str] = []   # empty content, never sent
        self.omitted: List[str] = []   # still throttled after the last retry
        self.failed: List[str] = []    # any other backend failure


class SummarizationClient:
    """
    Summarizes articles one at a time with throttling protection.

    A rate-limited call is retried after a fixed backoff, up to
    ``max_retries`` times; after that the article is reported as omitted.
    Every backend call is followed by ``call_delay_seconds`` to stay under
    the rate limit. Without a backend (no API key) this is a no-op.
    """

    def __init__(self, backend: Optional[SummaryBackend], max_retries: int = 3,
                 backoff_seconds: float = 10.0, call_delay_seconds: float = 1.0,
                 content_limit: int = 3000,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.backend = backend
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.call_delay_seconds = call_delay_seconds
        self.content_limit = content_limit
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "SummarizationClient":
        api_key = settings.get_qwen_api_key()
        backend = None
        if api_key:
            backend = QwenBackend(api_key, settings.qwen_api_url, settings.qwen_model)
        else:
            logger.warning("QWEN_API_KEY is not configured, AI summaries are disabled")

        return cls(
            backend,
            max_retries=settings.summary_max_retries,
            backoff_seconds=settings.summary_backoff_seconds,
            call_delay_seconds=settings.summary_call_delay_seconds,
            content_limit=settings.summary_content_limit,
            **kwargs,
        )

    @property
    def enabled(self) -> bool:
        return self.backend is not None

    async def summarize_article(self, article: Article) -> str:
        """
        Summarize one article, retrying while throttled.

        Raises:
            RateLimitError: Still throttled after ``max_retries`` retries
            APIError: Any other backend failure
        """
        prompt = SummaryPrompts.article_summary(article, self.content_limit)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.backoff_seconds),
            retry=retry_if_exception_type(RateLimitError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                return await self.backend.summarize(prompt)

    async def summarize_batch(self, articles: Sequence[Article]) -> BatchSummary:
        """Summarize articles in the order given."""
        result = BatchSummary()
        if not self.enabled:
            logger.info("Summarization disabled, skipping %d articles", len(articles))
            return result

        for article in articles:
            if not article.url:
                continue
            if not article.content or not article.content.strip():
                logger.warning("Article has no content, not summarizing: %s", article.url)
                result.skipped.append(article.url)
                continue

            try:
                result[article.url] = await self.summarize_article(article)
                logger.info("Summary generated: %s", article.title)
            except RateLimitError:
                logger.error("Still rate limited after %d retries, summary omitted: %s",
                             self.max_retries, article.url)
                result.omitted.append(article.url)
            except Exception as e:
                logger.error("Summary generation failed for %s: %s", article.url, e)
                result.failed.append(article.url)

            await self._sleep(self.call_delay_seconds)

        return result

    async def test_connection(self) -> bool:
        """Send a tiny request to check the API key and endpoint."""
        if not self.enabled:
            logger.warning("QWEN_API_KEY is not configured")
            return False
        try:
            await self.backend.summarize("ping")
            return True
        except Exception as e:
            logger.error("Summarization API connection test failed: %s", e)
            return False

    async def close(self):
        if self.backend:
            await self.backend.close()
