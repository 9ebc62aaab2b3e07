from fastapi import APIRouter, Depends, Query
import structlog

from ...dependencies import get_article_store, get_current_user_required, get_news_service
from ....core.exceptions import NotFoundError, ValidationError
from ....models.user import User
from ....news.services.article_store import ArticleStore
from ....news.services.news_service import NewsService
from ....news.schemas.requests import ArticlePayload
from ....news.schemas.responses import (
    ApiResponse,
    ArticleOut,
    ArticleStatsData,
    FavoriteArticlesData,
    MarkFavoriteData,
    MarkReadData,
    NewsFeedData,
    NewsListResponse,
    NewsSearchData,
    ReadArticlesData,
    TrackedArticle,
)
from ....utils.string_utils import sanitize_input
from ....utils.validation_utils import validate_search_query

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=NewsListResponse[NewsFeedData])
async def get_news(
    current_user: User = Depends(get_current_user_required),
    news_service: NewsService = Depends(get_news_service)
):
    """Get personalized news based on the user's preferences"""
    news_service.ensure_configured()

    if not current_user.preferences:
        raise ValidationError(
            "No preferences set. Please set your preferences first using PUT /api/v1/users/preferences"
        )

    news_data = await news_service.get_personalized_news(current_user.preferences)

    logger.info(
        "personalized_news_served",
        user_id=current_user.user_id,
        articles=news_data["total_articles"],
        cache_hits=news_data["cache_hits"],
        topics=news_data["topics"],
    )

    return NewsListResponse[NewsFeedData](
        message="News fetched successfully",
        from_cache=news_data["from_cache"],
        data=NewsFeedData(
            preferences=current_user.preferences,
            total_articles=news_data["total_articles"],
            articles=[ArticleOut.model_validate(article) for article in news_data["articles"]],
        ),
    )


@router.get("/search", response_model=NewsListResponse[NewsSearchData])
async def search_news(
    q: str = Query("", description="Search query"),
    current_user: User = Depends(get_current_user_required),
    news_service: NewsService = Depends(get_news_service)
):
    """Search news articles"""
    news_service.ensure_configured()
    validate_search_query(q)
    query = sanitize_input(q)
    validate_search_query(query)

    news_data = await news_service.search_news(query)

    return NewsListResponse[NewsSearchData](
        message="News search completed successfully",
        from_cache=news_data["from_cache"],
        data=NewsSearchData(
            query=query,
            total_articles=news_data["total_articles"],
            articles=[ArticleOut.model_validate(article) for article in news_data["articles"]],
        ),
    )


@router.get("/read", response_model=ApiResponse[ReadArticlesData])
async def get_read_articles(
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    read_articles = article_store.get_read_articles(current_user.user_id)
    return ApiResponse[ReadArticlesData](
        message="Read articles retrieved successfully",
        data=ReadArticlesData(
            total_read=len(read_articles),
            articles=[TrackedArticle(**article.to_dict()) for article in read_articles],
        ),
    )


@router.post("/read", response_model=ApiResponse[MarkReadData])
async def mark_article_payload_as_read(
    article: ArticlePayload,
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    """Mark an article as read and keep its metadata"""
    result = article_store.mark_as_read(current_user.user_id, article.to_article())
    return ApiResponse[MarkReadData](message="Article marked as read", data=MarkReadData(**result))


@router.post("/{article_id}/read", response_model=ApiResponse[MarkReadData])
async def mark_as_read(
    article_id: str,
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    result = article_store.mark_as_read(current_user.user_id, article_id)
    return ApiResponse[MarkReadData](message="Article marked as read", data=MarkReadData(**result))


@router.get("/favorites", response_model=ApiResponse[FavoriteArticlesData])
async def get_favorite_articles(
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    favorites = article_store.get_favorite_articles(current_user.user_id)
    return ApiResponse[FavoriteArticlesData](
        message="Favorite articles retrieved successfully",
        data=FavoriteArticlesData(
            total_favorites=len(favorites),
            articles=[TrackedArticle(**favorite.to_dict()) for favorite in favorites],
        ),
    )


@router.post("/favorites", response_model=ApiResponse[MarkFavoriteData])
async def mark_article_payload_as_favorite(
    article: ArticlePayload,
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    """Mark an article as favorite and keep its metadata"""
    result = article_store.mark_as_favorite(current_user.user_id, article.to_article())
    return ApiResponse[MarkFavoriteData](message="Article marked as favorite", data=MarkFavoriteData(**result))


@router.post("/{article_id}/favorite", response_model=ApiResponse[MarkFavoriteData])
async def mark_as_favorite(
    article_id: str,
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    result = article_store.mark_as_favorite(current_user.user_id, article_id)
    return ApiResponse[MarkFavoriteData](message="Article marked as favorite", data=MarkFavoriteData(**result))


@router.delete("/{article_id}/favorite", response_model=ApiResponse[None])
async def remove_favorite(
    article_id: str,
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    if not article_store.remove_favorite(current_user.user_id, article_id):
        raise NotFoundError("Article not found in favorites", details={"article_id": article_id})

    return ApiResponse[None](message="Article removed from favorites")


@router.get("/stats", response_model=ApiResponse[ArticleStatsData])
async def get_article_stats(
    current_user: User = Depends(get_current_user_required),
    article_store: ArticleStore = Depends(get_article_store)
):
    stats = article_store.get_user_stats(current_user.user_id)
    return ApiResponse[ArticleStatsData](
        message="Article statistics retrieved successfully",
        data=ArticleStatsData(**stats),
    )
