"""
Background Job Service
Periodic maintenance of the news cache and article tracking store:
1. Re-warm personalized feeds for registered users
2. Remove expired cache entries
3. Remove old article metadata that no favorite refers to
"""

import asyncio
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import structlog

from ...repositories.user_repository import UserRepository
from ...services.cache_service import CacheService
from .article_store import ArticleStore
from .news_service import NewsService

logger = structlog.get_logger(__name__)

JOB_NAMES = ("cache_update", "cache_cleanup", "article_cleanup")


class BackgroundJobService:
    """Runs the periodic cache and metadata jobs on the event loop"""

    def __init__(
        self,
        news_service: NewsService,
        cache: CacheService,
        article_store: ArticleStore,
        user_repository: UserRepository,
        cache_update_interval: float = 300.0,
        cache_cleanup_interval: float = 600.0,
        article_cleanup_interval: float = 3600.0,
        warm_batch_size: int = 10,
        metadata_max_age: timedelta = timedelta(days=7),
    ):
        self.news_service = news_service
        self.cache = cache
        self.article_store = article_store
        self.user_repository = user_repository
        self.intervals = {
            "cache_update": cache_update_interval,
            "cache_cleanup": cache_cleanup_interval,
            "article_cleanup": article_cleanup_interval,
        }
        self.warm_batch_size = warm_batch_size
        self.metadata_max_age = metadata_max_age
        self._tasks: Dict[str, asyncio.Task] = {}
        self._running_cycles: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    def start(
        self,
        cache_update_interval: Optional[float] = None,
        cache_cleanup_interval: Optional[float] = None,
        article_cleanup_interval: Optional[float] = None,
    ) -> None:
        """
        Start all background jobs. Must be called from a running event loop.
        Does nothing when the jobs are already running.
        """
        if self.is_running:
            logger.info("background_jobs_already_running")
            return

        overrides = {
            "cache_update": cache_update_interval,
            "cache_cleanup": cache_cleanup_interval,
            "article_cleanup": article_cleanup_interval,
        }
        for name, interval in overrides.items():
            if interval is not None:
                self.intervals[name] = interval

        jobs: Dict[str, Callable[[], Awaitable[Any]]] = {
            "cache_update": self.update_popular_news_cache,
            "cache_cleanup": self.cleanup_cache,
            "article_cleanup": self.cleanup_old_articles,
        }
        loop = asyncio.get_running_loop()
        self._tasks = {
            name: loop.create_task(self._run_periodically(name, jobs[name], self.intervals[name]))
            for name in JOB_NAMES
        }
        logger.info("background_jobs_started", intervals=self.intervals)

    def stop(self) -> None:
        """
        Cancel future job runs. A cycle that is already executing finishes.
        Does nothing when the jobs are not running.
        """
        if not self.is_running:
            logger.info("background_jobs_not_running")
            return

        for task in self._tasks.values():
            task.cancel()
        self._tasks = {}
        logger.info("background_jobs_stopped")

    async def shutdown(self) -> None:
        """Stop the jobs and wait for in-flight cycles to finish"""
        self.stop()
        if self._running_cycles:
            logger.info("background_jobs_draining", cycles=len(self._running_cycles))
            await asyncio.gather(*list(self._running_cycles), return_exceptions=True)

    async def _run_periodically(self, name: str, job: Callable[[], Awaitable[Any]], interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            cycle = asyncio.ensure_future(self._run_cycle(name, job))
            self._running_cycles.add(cycle)
            cycle.add_done_callback(self._running_cycles.discard)
            await asyncio.shield(cycle)

    async def _run_cycle(self, name: str, job: Callable[[], Awaitable[Any]]) -> None:
        try:
            await job()
        except Exception as e:
            logger.error("background_job_failed", job=name, error=str(e), exc_info=e)

    async def update_popular_news_cache(self) -> int:
        """
        Re-run personalization for the first ``warm_batch_size`` users so their
        feeds are cached before they ask for them.

        Returns:
            Number of users whose feed was refreshed
        """
        if not self.news_service.is_configured():
            logger.info("cache_update_skipped", reason="news service not configured")
            return 0

        users = self.user_repository.list_users(limit=self.warm_batch_size)
        refreshed = 0

        for user in users:
            if not user.preferences:
                continue
            try:
                await self.news_service.get_personalized_news(user.preferences)
                refreshed += 1
            except Exception as e:
                logger.error("cache_update_user_failed", user_id=user.user_id, error=str(e))

        logger.info("cache_update_completed", users_checked=len(users), users_refreshed=refreshed)
        return refreshed

    async def cleanup_cache(self) -> int:
        removed = self.cache.clear_expired()
        logger.info("cache_cleanup_completed", removed=removed, stats=self.cache.get_stats())
        return removed

    async def cleanup_old_articles(self) -> int:
        deleted = self.article_store.clear_old_metadata(self.metadata_max_age)
        logger.info("article_cleanup_completed", deleted=deleted)
        return deleted

    async def force_update(self) -> None:
        """Run the cache update and cleanup immediately"""
        logger.info("background_jobs_force_update")
        await self._run_cycle("cache_update", self.update_popular_news_cache)
        await self._run_cycle("cache_cleanup", self.cleanup_cache)

    def get_status(self) -> Dict[str, Any]:
        return {
            "is_running": self.is_running,
            "jobs": {name: name in self._tasks for name in JOB_NAMES},
            "cache_stats": self.cache.get_stats(),
        }
