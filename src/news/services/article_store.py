"""
Article Store
In-memory read/favorite tracking per user, with article metadata shared
across users and keyed by an id derived from the article URL.
"""

import hashlib
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set, Union

import structlog

from ..models.news_article import ArticleMetadata, FavoriteArticle, NewsArticle

logger = structlog.get_logger(__name__)

UserId = Union[int, str]
ArticleRef = Union[NewsArticle, str]

DEFAULT_METADATA_MAX_AGE = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArticleStore:
    """Tracks which articles each user has read or favorited"""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._lock = threading.RLock()
        self._read_articles: Dict[UserId, Set[str]] = {}
        self._favorite_articles: Dict[UserId, Dict[str, FavoriteArticle]] = {}
        self._article_metadata: Dict[str, ArticleMetadata] = {}

    @staticmethod
    def generate_article_id(url: str) -> str:
        """
        Derive a stable article id from its URL.

        First 128 bits of the SHA-256 digest, hex encoded. Identical URLs
        always map to the same id; distinct URLs collide only with negligible
        probability (the id is not a uniqueness guarantee).
        """
        return hashlib.sha256(url.encode("utf-8")).hexdigest()[:32]

    def store_article_metadata(self, article: NewsArticle) -> str:
        """
        Store article metadata unless it is already known.

        Args:
            article: Article payload

        Returns:
            The article id
        """
        article_id = self.generate_article_id(article.url)
        with self._lock:
            if article_id not in self._article_metadata:
                self._article_metadata[article_id] = ArticleMetadata.from_article(
                    article_id, article, cached_at=self._clock()
                )
        return article_id

    def get_article_metadata(self, article_id: str) -> Optional[ArticleMetadata]:
        with self._lock:
            return self._article_metadata.get(article_id)

    def _resolve_id(self, article: ArticleRef) -> str:
        if isinstance(article, NewsArticle):
            return self.store_article_metadata(article)
        return article

    def mark_as_read(self, user_id: UserId, article: ArticleRef) -> Dict[str, object]:
        """
        Mark an article as read for a user.

        Args:
            user_id: User ID
            article: Full article payload (its metadata is stored first) or a bare article id

        Returns:
            Dict with article_id and marked_at
        """
        with self._lock:
            article_id = self._resolve_id(article)
            self._read_articles.setdefault(user_id, set()).add(article_id)
            marked_at = self._clock()

        return {"article_id": article_id, "marked_at": marked_at}

    def is_read(self, user_id: UserId, article_id: str) -> bool:
        with self._lock:
            return article_id in self._read_articles.get(user_id, ())

    def get_read_articles(self, user_id: UserId) -> List[ArticleMetadata]:
        """Read articles joined with their metadata; ids without metadata are skipped"""
        with self._lock:
            read_ids = self._read_articles.get(user_id, set())
            return [
                self._article_metadata[article_id]
                for article_id in read_ids
                if article_id in self._article_metadata
            ]

    def mark_as_favorite(self, user_id: UserId, article: ArticleRef) -> Dict[str, object]:
        """
        Mark an article as favorite for a user.

        The favorite keeps a snapshot of the metadata known at this point;
        for an unknown bare id only the id is kept.

        Args:
            user_id: User ID
            article: Full article payload or a bare article id

        Returns:
            Dict with article_id and favorited_at
        """
        with self._lock:
            article_id = self._resolve_id(article)
            favorited_at = self._clock()
            self._favorite_articles.setdefault(user_id, {})[article_id] = FavoriteArticle(
                id=article_id,
                favorited_at=favorited_at,
                metadata=self._article_metadata.get(article_id),
            )

        return {"article_id": article_id, "favorited_at": favorited_at}

    def remove_favorite(self, user_id: UserId, article_id: str) -> bool:
        with self._lock:
            favorites = self._favorite_articles.get(user_id)
            if not favorites or article_id not in favorites:
                return False
            del favorites[article_id]
            return True

    def is_favorite(self, user_id: UserId, article_id: str) -> bool:
        with self._lock:
            return article_id in self._favorite_articles.get(user_id, {})

    def get_favorite_articles(self, user_id: UserId) -> List[FavoriteArticle]:
        with self._lock:
            return list(self._favorite_articles.get(user_id, {}).values())

    def get_user_stats(self, user_id: UserId) -> Dict[str, int]:
        """Per-user read/favorite counts; total_articles_tracked covers all users"""
        with self._lock:
            return {
                "total_read": len(self._read_articles.get(user_id, ())),
                "total_favorites": len(self._favorite_articles.get(user_id, {})),
                "total_articles_tracked": len(self._article_metadata),
            }

    def clear_old_metadata(self, max_age: timedelta = DEFAULT_METADATA_MAX_AGE) -> int:
        """
        Delete metadata cached longer than ``max_age`` ago.

        Metadata referenced by any user's favorites is kept. Read sets and
        favorites themselves are left untouched.

        Returns:
            Number of metadata entries deleted
        """
        with self._lock:
            cutoff = self._clock() - max_age
            favorited_ids = set()
            for favorites in self._favorite_articles.values():
                favorited_ids.update(favorites.keys())

            to_delete = [
                article_id
                for article_id, metadata in self._article_metadata.items()
                if metadata.cached_at < cutoff and article_id not in favorited_ids
            ]
            for article_id in to_delete:
                del self._article_metadata[article_id]

        logger.info("article_metadata_cleared", deleted=len(to_delete), max_age_days=max_age.days)
        return len(to_delete)
