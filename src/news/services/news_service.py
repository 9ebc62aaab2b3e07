"""
News Service
Cache-backed news search and the personalized feed built from a user's
topic preferences.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ...core.exceptions import NotConfiguredError
from ...services.cache_service import CacheService
from ..models.news_article import NewsArticle
from .sources.gnews_client import GNewsClient, SearchResult

logger = structlog.get_logger(__name__)


class NewsService:
    def __init__(
        self,
        client: GNewsClient,
        cache: CacheService,
        cache_ttl: float = 300.0,
        max_results: int = 10,
        max_personalized_articles: int = 10,
    ):
        self.client = client
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.max_results = max_results
        self.max_personalized_articles = max_personalized_articles

    def is_configured(self) -> bool:
        return self.client.is_configured

    def ensure_configured(self) -> None:
        if not self.is_configured():
            raise NotConfiguredError()

    async def search_news(self, query: str) -> Dict[str, Any]:
        """
        Search news with caching.

        Returns:
            Dict with success, total_articles, articles and from_cache
        """
        cache_key = self.cache.generate_key("search", {"query": query})

        cached: Optional[SearchResult] = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("news_search_cache_hit", query=query)
            return self._search_response(cached, from_cache=True)

        result = await self.client.search(query, max_results=self.max_results)
        self.cache.set(cache_key, result, self.cache_ttl)
        logger.info("news_search_fetched", query=query, articles=len(result.articles))

        return self._search_response(result, from_cache=False)

    @staticmethod
    def _search_response(result: SearchResult, from_cache: bool) -> Dict[str, Any]:
        return {
            "success": True,
            "total_articles": result.total_articles,
            "articles": list(result.articles),
            "from_cache": from_cache,
        }

    async def _search_topic(self, preference: str) -> Dict[str, Any]:
        try:
            return await self.search_news(preference)
        except Exception as e:
            logger.error("personalized_topic_failed", preference=preference, error=str(e))
            return {"success": False, "total_articles": 0, "articles": [], "from_cache": False}

    async def get_personalized_news(self, preferences: Sequence[str]) -> Dict[str, Any]:
        """
        Build a personalized feed from topic preferences.

        Topics are searched concurrently. A failing topic contributes no
        articles instead of failing the feed. Results are merged in
        preference order, deduplicated by URL and capped at
        ``max_personalized_articles``.

        ``from_cache`` is True only when every topic was served from cache.
        """
        if not preferences:
            return {
                "success": True,
                "total_articles": 0,
                "articles": [],
                "from_cache": False,
                "cache_hits": 0,
                "topics": 0,
            }

        results = await asyncio.gather(*(self._search_topic(preference) for preference in preferences))

        articles: List[NewsArticle] = []
        seen_urls = set()
        for result in results:
            for article in result["articles"]:
                if article.url not in seen_urls:
                    seen_urls.add(article.url)
                    articles.append(article)

        articles = articles[:self.max_personalized_articles]
        cache_hits = sum(1 for result in results if result["from_cache"])

        return {
            "success": True,
            "total_articles": len(articles),
            "articles": articles,
            "from_cache": cache_hits == len(results),
            "cache_hits": cache_hits,
            "topics": len(results),
        }

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()

    def set_cache_ttl(self, ttl: float) -> None:
        self.cache_ttl = ttl
