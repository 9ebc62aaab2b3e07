from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class ArticleSource:
    name: Optional[str] = None
    url: Optional[str] = None


@dataclass
class NewsArticle:
    """Article as returned by the news provider"""
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: ArticleSource = field(default_factory=ArticleSource)

    @classmethod
    def from_provider(cls, payload: Dict[str, Any]) -> "NewsArticle":
        """Build from a GNews article payload (camelCase keys)"""
        source = payload.get("source") or {}
        return cls(
            url=payload["url"],
            title=payload.get("title"),
            description=payload.get("description"),
            content=payload.get("content"),
            image=payload.get("image"),
            published_at=payload.get("publishedAt", payload.get("published_at")),
            source=ArticleSource(name=source.get("name"), url=source.get("url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ArticleMetadata:
    """
    Shared metadata for a tracked article.
    Stored once per id and never mutated afterwards.
    """
    id: str
    url: str
    title: Optional[str]
    description: Optional[str]
    content: Optional[str]
    image: Optional[str]
    published_at: Optional[str]
    source: ArticleSource
    cached_at: datetime

    @classmethod
    def from_article(cls, article_id: str, article: NewsArticle, cached_at: datetime) -> "ArticleMetadata":
        return cls(
            id=article_id,
            url=article.url,
            title=article.title,
            description=article.description,
            content=article.content,
            image=article.image,
            published_at=article.published_at,
            source=ArticleSource(name=article.source.name, url=article.source.url),
            cached_at=cached_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FavoriteArticle:
    """
    A user's favorite: a snapshot of the metadata at favorite time,
    or only the id when no metadata was known.
    """
    id: str
    favorited_at: datetime
    metadata: Optional[ArticleMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.metadata.to_dict() if self.metadata else {"id": self.id}
        data["favorited_at"] = self.favorited_at
        return data
