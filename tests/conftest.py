import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, AsyncMock

from src.news.models.news_article import ArticleSource, NewsArticle
from src.news.services.article_store import ArticleStore
from src.news.services.news_service import NewsService
from src.news.services.sources.gnews_client import SearchResult
from src.repositories.user_repository import UserRepository
from src.services.cache_service import CacheService


class FakeClock:
    """Manually advanced epoch-seconds clock"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDateTimeClock:
    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def make_article(url: str, title: str = "Sample title") -> NewsArticle:
    return NewsArticle(
        url=url,
        title=title,
        description=f"Description of {title}",
        content=f"Content of {title}",
        image="https://img.example.com/a.jpg",
        published_at="2024-01-01T08:00:00Z",
        source=ArticleSource(name="Example News", url="https://example.com"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def datetime_clock():
    return FakeDateTimeClock()


@pytest.fixture
def cache_service(clock):
    return CacheService(default_ttl=300.0, clock=clock)


@pytest.fixture
def article_store(datetime_clock):
    return ArticleStore(clock=datetime_clock)


@pytest.fixture
def user_repository():
    return UserRepository()


@pytest.fixture
def sample_article():
    return make_article("https://example.com/news/1", "First story")


@pytest.fixture
def mock_gnews_client():
    client = MagicMock()
    client.is_configured = True
    client.search = AsyncMock(return_value=SearchResult(total_articles=0, articles=[]))
    client.close = AsyncMock()
    return client


@pytest.fixture
def news_service(mock_gnews_client, cache_service):
    return NewsService(client=mock_gnews_client, cache=cache_service, cache_ttl=300.0)


@pytest.fixture
def mock_current_user(user_repository):
    user = user_repository.get_or_create(
        user_id="test_user_id",
        firebase_uid="test_user_id",
        email="test@example.com",
        full_name="Test User",
    )
    return user


@pytest.fixture
async def async_client(news_service, cache_service, article_store, user_repository, mock_current_user):
    from httpx import AsyncClient, ASGITransport
    from src.main import app
    from src.api.dependencies import get_current_user_required

    app.state.cache_service = cache_service
    app.state.article_store = article_store
    app.state.user_repository = user_repository
    app.state.news_service = news_service
    app.dependency_overrides[get_current_user_required] = lambda: mock_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def article_factory():
    return make_article
