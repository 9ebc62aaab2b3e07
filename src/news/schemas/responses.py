"""News API response schemas"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every news endpoint"""
    success: bool = True
    message: str
    data: Optional[T] = None


class ArticleSourceOut(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None

    class Config:
        from_attributes = True


class ArticleOut(BaseModel):
    """Provider article as returned by feed and search"""
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    url: str
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: ArticleSourceOut

    class Config:
        from_attributes = True


class NewsFeedData(BaseModel):
    preferences: List[str]
    total_articles: int
    articles: List[ArticleOut]


class NewsSearchData(BaseModel):
    query: str
    total_articles: int
    articles: List[ArticleOut]


class NewsListResponse(ApiResponse[T], Generic[T]):
    from_cache: bool = False


class TrackedArticle(BaseModel):
    """Tracked article metadata; favorites of unknown articles only carry id and favorited_at"""
    id: str
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: Optional[ArticleSourceOut] = None
    cached_at: Optional[datetime] = None
    favorited_at: Optional[datetime] = None


class ReadArticlesData(BaseModel):
    total_read: int
    articles: List[TrackedArticle]


class FavoriteArticlesData(BaseModel):
    total_favorites: int
    articles: List[TrackedArticle]


class MarkReadData(BaseModel):
    article_id: str
    marked_at: datetime


class MarkFavoriteData(BaseModel):
    article_id: str
    favorited_at: datetime


class ArticleStatsData(BaseModel):
    total_read: int
    total_favorites: int
    total_articles_tracked: int
