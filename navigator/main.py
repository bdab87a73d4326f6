import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from navigator import __version__
from navigator.api import catalog, conversation, search, trends, videos
from navigator.config import Settings, get_settings
from navigator.core.conversation import ConversationService
from navigator.core.demo_data import demo_search_events, demo_videos
from navigator.core.errors import UpstreamFailure
from navigator.core.search_service import ContentSearchService
from navigator.core.storage import InMemoryVideoStore, VideoStore


def configure_logging(settings: Settings) -> None:
    """Configure structured logging"""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json" or settings.is_production
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


def build_store(settings: Settings) -> VideoStore:
    """Storage backend selected by configuration"""
    if settings.storage_backend == "memory":
        if not settings.seed_demo_data:
            return InMemoryVideoStore()
        now = datetime.now(timezone.utc)
        return InMemoryVideoStore(demo_videos(now), demo_search_events(now))

    from navigator.core.database import async_session_maker, engine
    from navigator.core.sql_store import SQLVideoStore

    return SQLVideoStore(
        async_session_maker,
        timeout_seconds=settings.db_query_timeout_seconds,
        engine=engine,
    )


def build_llm_client(settings: Settings) -> Optional[Any]:
    """OpenAI client, or None when no key is configured (keyword fallback only)"""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set, conversation will use keyword extraction")
        return None

    from openai import AsyncOpenAI

    # Retries are handled by RetryPolicy, not the SDK
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        max_retries=0,
        http_client=httpx.AsyncClient(timeout=settings.openai_timeout_seconds),
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VideoStore] = None,
    llm_client: Optional[Any] = None,
) -> FastAPI:
    """
    Build the API application.

    `store` and `llm_client` override the configured backends; tests pass an
    in-memory store and a fake chat-completion client.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Application lifecycle management"""
        logger.info(
            "Starting Brawl Content Navigator API",
            env=settings.app_env,
            storage=settings.storage_backend if store is None else type(store).__name__,
        )

        app_store = store if store is not None else build_store(settings)
        client = llm_client if llm_client is not None else build_llm_client(settings)

        app.state.settings = settings
        app.state.store = app_store
        app.state.search_service = ContentSearchService.from_settings(app_store, settings)
        app.state.conversation_service = ConversationService.from_settings(client, settings)

        yield

        logger.info("Shutting down API")
        if store is None:
            await app_store.close()
        if llm_client is None and client is not None:
            await client.close()

    app = FastAPI(
        title="Brawl Content Navigator API",
        description="Conversational search and recommendations for Brawl Stars videos",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UpstreamFailure)
    async def upstream_failure_handler(request: Request, exc: UpstreamFailure):
        logger.error("Upstream failure", source=exc.source, error=exc.message, path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message, "source": exc.source},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An internal error occurred. Please try again later."},
        )

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.app_env,
            "storage": settings.storage_backend,
            "version": __version__,
        }

    app.include_router(search.router, prefix="/api", tags=["Search"])
    app.include_router(videos.router, prefix="/api", tags=["Videos"])
    app.include_router(trends.router, prefix="/api/trends", tags=["Trends"])
    app.include_router(catalog.router, prefix="/api", tags=["Catalog"])
    app.include_router(conversation.router, prefix="/api", tags=["Conversation"])

    @app.get("/")
    async def root():
        return {
            "message": "Brawl Content Navigator API",
            "docs": "/docs",
            "health": "/health",
        }

    return app


configure_logging(get_settings())

app = create_app()
