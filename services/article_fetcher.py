from __future__ import annotations

import logging

import httpx

from services.errors import ArticleFetchError

logger = logging.getLogger(__name__)

__all__ = ["ArticleFetchError", "ArticleFetcherService"]


class ArticleFetcherService:
    """Fetch readable article text through a reader proxy such as r.jina.ai."""

    def __init__(
        self,
        endpoint: str = "https://r.jina.ai",
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def reader_url(self, article_url: str) -> str:
        return f"{self._endpoint}/{article_url}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/plain"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def fetch(self, article_url: str) -> str:
        reader_url = self.reader_url(article_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(reader_url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise ArticleFetchError(f"Failed to fetch article: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Reader returned %s for %s", response.status_code, article_url
            )
            raise ArticleFetchError(
                f"Failed to fetch article: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        article_text = response.text
        if not article_text.strip():
            raise ArticleFetchError("No content found at the provided URL")

        logger.debug("Fetched %s chars for %s", len(article_text), article_url)
        return article_text
