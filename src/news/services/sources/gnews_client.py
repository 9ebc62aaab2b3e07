"""
GNews search client
Wraps the GNews v4 search endpoint and maps failures to API errors
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ....core.exceptions import (
    NotConfiguredError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from ...models.news_article import NewsArticle

logger = structlog.get_logger(__name__)

PLACEHOLDER_API_KEY = "your_gnews_api_key_here"

# status -> (kind, safe message)
UPSTREAM_ERRORS = {
    400: ("invalid-request", "Invalid request to news API"),
    401: ("invalid-credentials", "Invalid API key for news service"),
    403: ("forbidden", "Access forbidden to news API"),
    429: ("rate-limited", "Rate limit exceeded for news API"),
    500: ("server-error", "News API server error"),
}


@dataclass
class SearchResult:
    total_articles: int = 0
    articles: List[NewsArticle] = field(default_factory=list)


class GNewsClient:
    """Async client for the GNews search API"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://gnews.io/api/v4",
        language: str = "en",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    async def search(self, query: str, max_results: int = 10) -> SearchResult:
        """
        Search news articles.

        Args:
            query: Search query
            max_results: Maximum number of articles to return

        Returns:
            SearchResult with the provider's total count and parsed articles

        Raises:
            NotConfiguredError: no API key configured
            UpstreamUnavailableError: provider unreachable or timed out
            UpstreamRejectedError: provider answered with an error status
        """
        if not self.is_configured:
            raise NotConfiguredError()

        params = {
            "q": query,
            "lang": self.language,
            "max": max_results,
            "apikey": self.api_key,
        }

        try:
            response = await self.client.get(f"{self.base_url}/search", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._map_status_error(e.response) from e
        except httpx.RequestError as e:
            logger.warning("gnews_unreachable", query=query, error=str(e))
            raise UpstreamUnavailableError() from e

        return self._parse_search_response(response, query)

    def _parse_search_response(self, response: httpx.Response, query: str) -> SearchResult:
        try:
            data = response.json()
            items = data.get("articles") or []
            articles = []
            for item in items:
                if not item.get("url"):
                    logger.info("gnews_article_skipped", query=query, reason="missing_url")
                    continue
                articles.append(NewsArticle.from_provider(item))
            total_articles = int(data.get("totalArticles", len(articles)))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("gnews_invalid_response", query=query, error=str(e))
            raise UpstreamRejectedError(
                message="News API returned an invalid response",
                status_code=502,
                kind="server-error",
            ) from e

        return SearchResult(total_articles=total_articles, articles=articles)

    def _map_status_error(self, response: httpx.Response) -> UpstreamRejectedError:
        status = response.status_code
        kind, message = UPSTREAM_ERRORS.get(status, (None, None))

        if kind is None:
            kind = "server-error" if status >= 500 else "invalid-request"
            message = self._provider_message(response) or "News API error"

        logger.warning("gnews_request_rejected", status_code=status, kind=kind)
        return UpstreamRejectedError(message=message, status_code=status, kind=kind)

    @staticmethod
    def _provider_message(response: httpx.Response) -> Optional[str]:
        try:
            body: Dict[str, Any] = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return str(errors[0])
        return body.get("message")

    async def close(self):
        """Close the httpx client"""
        await self.client.aclose()
