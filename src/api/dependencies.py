from typing import Optional
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, Request, HTTPException

from ..core.firebase import verify_firebase_token, get_or_create_user
from ..repositories.user_repository import UserRepository
from ..services.cache_service import CacheService
from ..news.services.article_store import ArticleStore
from ..news.services.news_service import NewsService
from ..news.services.news_cron_service import BackgroundJobService
from ..models.user import User
from ..config import get_settings

security = HTTPBearer(auto_error=False)


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_cache_service(request: Request) -> CacheService:
    return request.app.state.cache_service


def get_article_store(request: Request) -> ArticleStore:
    return request.app.state.article_store


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


def get_background_jobs(request: Request) -> BackgroundJobService:
    return request.app.state.background_jobs


async def get_current_user_optional(
    users: UserRepository = Depends(get_user_repository),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    if not credentials or not credentials.credentials:
        return None

    firebase_data = verify_firebase_token(credentials.credentials)
    if not firebase_data:
        return None

    firebase_uid = firebase_data.get("uid")
    email = firebase_data.get("email")
    name = firebase_data.get("name", firebase_data.get("email", "Unknown User"))

    if not firebase_uid or not email:
        return None

    return get_or_create_user(users, firebase_uid=firebase_uid, email=email, full_name=name)


async def get_current_user_required(
    users: UserRepository = Depends(get_user_repository),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    settings = get_settings()

    if not settings.authentication_enabled:
        return get_or_create_user(
            users, firebase_uid="anonymous-user", email="anonymous@example.com", full_name="Anonymous User"
        )

    user = await get_current_user_optional(users, credentials)

    if not user and settings.demo_mode:
        return get_or_create_user(
            users, firebase_uid=settings.demo_user_id, email="demo@example.com", full_name="Demo User"
        )

    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Please provide a valid Firebase token."
        )
    return user
