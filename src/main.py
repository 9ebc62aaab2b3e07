import logging
from datetime import timedelta

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.router import api_router
from .config import Settings, get_settings
from .core.exceptions import NewsAPIError
from .news.services.article_store import ArticleStore
from .news.services.news_cron_service import BackgroundJobService
from .news.services.news_service import NewsService
from .news.services.sources.gnews_client import GNewsClient
from .repositories.user_repository import UserRepository
from .services.cache_service import CacheService


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s"
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


settings = get_settings()
configure_logging(settings)

logger = structlog.get_logger(__name__)


def build_services(app: FastAPI, settings: Settings) -> None:
    """Create the shared cache, stores and jobs and attach them to app.state"""
    cache = CacheService(default_ttl=settings.news_cache_ttl_seconds)
    article_store = ArticleStore()
    user_repository = UserRepository()
    client = GNewsClient(
        api_key=settings.gnews_api_key,
        base_url=settings.gnews_base_url,
        language=settings.gnews_language,
        timeout=settings.gnews_timeout_seconds,
    )
    news_service = NewsService(
        client=client,
        cache=cache,
        cache_ttl=settings.news_cache_ttl_seconds,
        max_results=settings.gnews_max_results,
        max_personalized_articles=settings.personalized_max_articles,
    )
    background_jobs = BackgroundJobService(
        news_service=news_service,
        cache=cache,
        article_store=article_store,
        user_repository=user_repository,
        cache_update_interval=settings.cache_warm_interval_seconds,
        cache_cleanup_interval=settings.cache_cleanup_interval_seconds,
        article_cleanup_interval=settings.article_cleanup_interval_seconds,
        warm_batch_size=settings.cache_warm_batch_size,
        metadata_max_age=timedelta(days=settings.article_metadata_max_age_days),
    )

    app.state.cache_service = cache
    app.state.article_store = article_store
    app.state.user_repository = user_repository
    app.state.news_service = news_service
    app.state.background_jobs = background_jobs


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("application_starting", version="0.1.0")
    if not app.state.news_service.is_configured():
        logger.warning("news_provider_not_configured")

    if settings.background_jobs_enabled:
        app.state.background_jobs.start()

    yield

    logger.info("application_stopping")
    await app.state.background_jobs.shutdown()
    await app.state.news_service.client.close()


def create_application() -> FastAPI:
    app = FastAPI(
        title="News Aggregator",
        description="Personalized news feed with cached search, background refresh and read/favorite tracking",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    build_services(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NewsAPIError)
    async def news_api_exception_handler(request: Request, exc: NewsAPIError):
        logger.info(
            "request_failed",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            status_code=exc.status_code,
        )
        content = {
            "success": False,
            "message": exc.message,
            "error": exc.error_code,
        }
        if exc.details.get("errors"):
            content["errors"] = exc.details["errors"]
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "An unexpected error occurred. Please try again later.",
                "error": "Internal server error",
            }
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
