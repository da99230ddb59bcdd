from asyncio import Event
from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, List, Optional

import anyio
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..modules.common.utils.error_handler import register_exception_handlers
from .config.settings import DatabaseSettings, EnvironmentOption, Settings, get_settings
from .database.session import create_tables
from .logging import configure_logging, get_logger

logger = get_logger(__name__)


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio.

    Local embedding and file reads run in worker threads, so the default
    limit of 40 is raised.
    """
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def lifespan_factory(
    settings: Settings,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    Args:
        settings: Application settings
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        initialization_complete = Event()
        app.state.initialization_complete = initialization_complete

        await set_threadpool_tokens()

        if isinstance(settings, DatabaseSettings) and create_tables_on_startup:
            await create_tables()
            logger.info(f"Database tables ready ({settings.DATABASE_ENGINE.value})")

        initialization_complete.set()
        yield

    return lifespan


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    create_tables_on_startup: Optional[bool] = None,
    enable_cors: Optional[bool] = None,
    cors_origins: Optional[List[str]] = None,
    enable_gzip: Optional[bool] = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    Args:
        router: The APIRouter containing the routes for the application
        settings: Application settings (uses get_settings() if None)
        lifespan: Optional lifespan function. Defaults to ``lifespan_factory``.
        create_tables_on_startup: Defaults to settings.CREATE_TABLES_ON_STARTUP if None.
        enable_cors: Defaults to settings.CORS_ENABLED if None.
        cors_origins: Defaults to settings.CORS_ORIGINS_LIST if None.
        enable_gzip: Defaults to settings.GZIP_ENABLED if None.
        **kwargs: Additional keyword arguments passed to the FastAPI constructor

    Returns:
        A configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    configure_logging()

    _create_tables_on_startup = (
        create_tables_on_startup if create_tables_on_startup is not None else settings.CREATE_TABLES_ON_STARTUP
    )
    _enable_cors = enable_cors if enable_cors is not None else settings.CORS_ENABLED
    _cors_origins = cors_origins if cors_origins is not None else settings.CORS_ORIGINS_LIST
    _enable_gzip = enable_gzip if enable_gzip is not None else settings.GZIP_ENABLED

    metadata: Dict[str, Any] = {
        "title": settings.APP_NAME,
        "description": settings.APP_DESCRIPTION,
        "version": settings.VERSION,
        "docs_url": settings.DOCS_URL,
        "redoc_url": settings.REDOC_URL,
        "openapi_url": settings.OPENAPI_URL,
    }
    metadata.update(kwargs)

    hide_docs = settings.ENVIRONMENT == EnvironmentOption.PRODUCTION and not settings.ENABLE_DOCS_IN_PRODUCTION
    if hide_docs:
        metadata.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings, create_tables_on_startup=_create_tables_on_startup)

    application = FastAPI(lifespan=lifespan, **metadata)
    application.include_router(router)
    register_exception_handlers(application)

    if _enable_cors:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
            allow_methods=settings.CORS_ALLOW_METHODS.split(","),
            allow_headers=settings.CORS_ALLOW_HEADERS.split(","),
        )

    if _enable_gzip:
        application.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    return application
