from datetime import datetime, timezone
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends

from ...dependencies import get_background_jobs, get_news_service
from ....config import get_settings
from ....news.services.news_cron_service import BackgroundJobService
from ....news.services.news_service import NewsService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/")
@router.get("/health")
async def health_check(
    background_jobs: BackgroundJobService = Depends(get_background_jobs),
    news_service: NewsService = Depends(get_news_service)
) -> Dict[str, Any]:
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "News Aggregator API",
        "version": "0.1.0",
        "environment": "development" if settings.debug else "production",
        "news_provider_configured": news_service.is_configured(),
        "background_jobs": background_jobs.get_status(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
