"""News API request schemas"""

from typing import Optional

from pydantic import BaseModel, Field

from ..models.news_article import ArticleSource, NewsArticle


class ArticleSourcePayload(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class ArticlePayload(BaseModel):
    """Full article payload, as returned by the search endpoints"""
    url: str = Field(..., min_length=1, max_length=2000, description="Article URL, used to derive the article id")
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: ArticleSourcePayload = Field(default_factory=ArticleSourcePayload)

    def to_article(self) -> NewsArticle:
        return NewsArticle(
            url=self.url,
            title=self.title,
            description=self.description,
            content=self.content,
            image=self.image,
            published_at=self.published_at,
            source=ArticleSource(name=self.source.name, url=self.source.url),
        )
