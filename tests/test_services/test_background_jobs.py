import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.news.services.news_cron_service import BackgroundJobService


@pytest.fixture
def mock_news_service():
    service = MagicMock()
    service.is_configured = MagicMock(return_value=True)
    service.get_personalized_news = AsyncMock(return_value={"articles": []})
    return service


@pytest.fixture
async def background_jobs(mock_news_service, cache_service, article_store, user_repository):
    service = BackgroundJobService(
        news_service=mock_news_service,
        cache=cache_service,
        article_store=article_store,
        user_repository=user_repository,
        cache_update_interval=0.01,
        cache_cleanup_interval=0.01,
        article_cleanup_interval=0.01,
    )
    yield service
    service.stop()
    await asyncio.sleep(0)


def add_users(user_repository, count, preferences=("tech",)):
    for i in range(count):
        user_repository.get_or_create(f"user-{i}", f"user-{i}", f"user{i}@example.com", f"User {i}")
        user_repository.update_preferences(f"user-{i}", list(preferences))


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, background_jobs):
        assert background_jobs.get_status()["is_running"] is False

        background_jobs.start()
        status = background_jobs.get_status()

        assert status["is_running"] is True
        assert status["jobs"] == {"cache_update": True, "cache_cleanup": True, "article_cleanup": True}
        assert "cache_stats" in status

        background_jobs.stop()
        assert background_jobs.get_status()["jobs"] == {
            "cache_update": False, "cache_cleanup": False, "article_cleanup": False
        }

    @pytest.mark.asyncio
    async def test_start_twice_keeps_existing_tasks(self, background_jobs):
        background_jobs.start()
        tasks = dict(background_jobs._tasks)

        background_jobs.start()

        assert background_jobs._tasks == tasks
        background_jobs.stop()

    @pytest.mark.asyncio
    async def test_stop_when_stopped_is_noop(self, background_jobs):
        background_jobs.stop()

        assert background_jobs.is_running is False

    @pytest.mark.asyncio
    async def test_start_overrides_intervals(self, background_jobs):
        background_jobs.start(cache_update_interval=120)

        assert background_jobs.intervals["cache_update"] == 120
        background_jobs.stop()

    @pytest.mark.asyncio
    async def test_jobs_run_periodically(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 1)
        background_jobs.start()

        await asyncio.sleep(0.1)
        background_jobs.stop()

        assert mock_news_service.get_personalized_news.await_count >= 2

    @pytest.mark.asyncio
    async def test_failing_cycle_does_not_stop_loop(self, background_jobs, cache_service):
        calls = []

        def flaky_clear_expired():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 0

        cache_service.clear_expired = MagicMock(side_effect=flaky_clear_expired)
        background_jobs.start(cache_update_interval=60, article_cleanup_interval=60)

        await asyncio.sleep(0.1)
        background_jobs.stop()

        assert cache_service.clear_expired.call_count >= 2

    @pytest.mark.asyncio
    async def test_stop_lets_running_cycle_finish(self, background_jobs):
        finished = asyncio.Event()

        async def slow_update():
            await asyncio.sleep(0.03)
            finished.set()

        background_jobs.update_popular_news_cache = slow_update
        background_jobs.start(cache_cleanup_interval=60, article_cleanup_interval=60)

        await asyncio.sleep(0.02)
        background_jobs.stop()

        await asyncio.wait_for(finished.wait(), timeout=1)


class TestJobs:
    @pytest.mark.asyncio
    async def test_cache_update_limits_batch(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 12)

        refreshed = await background_jobs.update_popular_news_cache()

        assert refreshed == 10
        assert mock_news_service.get_personalized_news.await_count == 10

    @pytest.mark.asyncio
    async def test_cache_update_skips_users_without_preferences(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 2, preferences=())

        assert await background_jobs.update_popular_news_cache() == 0
        mock_news_service.get_personalized_news.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_update_continues_after_user_failure(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 3)
        mock_news_service.get_personalized_news = AsyncMock(side_effect=[RuntimeError("boom"), {}, {}])

        refreshed = await background_jobs.update_popular_news_cache()

        assert refreshed == 2
        assert mock_news_service.get_personalized_news.await_count == 3

    @pytest.mark.asyncio
    async def test_cache_update_skipped_when_not_configured(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 1)
        mock_news_service.is_configured.return_value = False

        assert await background_jobs.update_popular_news_cache() == 0
        mock_news_service.get_personalized_news.assert_not_called()

    @pytest.mark.asyncio
    async def test_cleanup_cache_removes_expired(self, background_jobs, cache_service, clock):
        cache_service.set("old", 1, ttl=1)
        cache_service.set("fresh", 2, ttl=1000)
        clock.advance(10)

        assert await background_jobs.cleanup_cache() == 1
        assert cache_service.get_keys() == ["fresh"]

    @pytest.mark.asyncio
    async def test_cleanup_old_articles(self, background_jobs, article_store, sample_article, datetime_clock):
        article_store.store_article_metadata(sample_article)
        datetime_clock.advance(timedelta(days=8))

        assert await background_jobs.cleanup_old_articles() == 1

    @pytest.mark.asyncio
    async def test_force_update(self, background_jobs, mock_news_service, user_repository):
        add_users(user_repository, 1)
        background_jobs.cleanup_cache = AsyncMock(return_value=0)

        await background_jobs.force_update()

        mock_news_service.get_personalized_news.assert_awaited_once_with(["tech"])
        background_jobs.cleanup_cache.assert_awaited_once()


class TestShutdown:
    @pytest.mark.asyncio
    async def test_shutdown_waits_for_running_cycle(self, background_jobs):
        finished = asyncio.Event()

        async def slow_update():
            await asyncio.sleep(0.05)
            finished.set()

        background_jobs.update_popular_news_cache = slow_update
        background_jobs.start(cache_cleanup_interval=60, article_cleanup_interval=60)
        await asyncio.sleep(0.02)

        await background_jobs.shutdown()

        assert finished.is_set()
        assert background_jobs.is_running is False
        assert not background_jobs._running_cycles

    @pytest.mark.asyncio
    async def test_shutdown_when_stopped(self, background_jobs):
        await background_jobs.shutdown()

        assert background_jobs.is_running is False

    @pytest.mark.asyncio
    async def test_lifespan_drains_jobs_before_closing_client(self):
        from src.main import lifespan

        calls = MagicMock()
        news_service = MagicMock()
        news_service.is_configured = MagicMock(return_value=True)
        news_service.client.close = AsyncMock(side_effect=lambda: calls("client_closed"))
        background_jobs = MagicMock()
        background_jobs.shutdown = AsyncMock(side_effect=lambda: calls("jobs_shutdown"))
        app = MagicMock()
        app.state.news_service = news_service
        app.state.background_jobs = background_jobs

        async with lifespan(app):
            pass

        assert [c.args[0] for c in calls.call_args_list] == ["jobs_shutdown", "client_closed"]
