"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restock_service import __version__
from restock_service.api.v1.router import api_router, legacy_router
from restock_service.config import Settings, get_settings
from restock_service.exceptions import ValidationError
from restock_service.notifiers import Notifier, build_notifier
from restock_service.services import (
    InMemoryRequestStore,
    MatchingEngine,
    NotificationDispatcher,
    RequestStore,
    RestockService,
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if get_settings().debug else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(get_settings().log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting Restock Notification Service",
        app_env=settings.app_env,
        email_service=settings.email_service,
        smtp_configured=settings.smtp_configured,
        store_url=settings.store_url or "NOT SET",
    )

    yield

    await app.state.restock_service.dispatcher.drain()
    logger.info("Shutting down Restock Notification Service")


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected stock request", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})


def build_restock_service(
    settings: Settings,
    notifier: Notifier | None = None,
    store: RequestStore | None = None,
) -> RestockService:
    """Wire the store, matching engine and dispatcher."""
    store = store or InMemoryRequestStore()
    dispatcher = NotificationDispatcher(
        notifier or build_notifier(settings),
        max_concurrent_deliveries=settings.max_concurrent_deliveries,
        history_size=settings.delivery_history_size,
    )
    return RestockService(store, MatchingEngine(store), dispatcher)


def create_app(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
    store: RequestStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Restock Notification API",
        description="Emails customers when an out-of-stock product variant is available again",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.restock_service = build_restock_service(settings, notifier=notifier, store=store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ValidationError, validation_error_handler)

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(legacy_router)

    return app


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    # The request store lives in process memory, so a single worker only
    uvicorn.run(
        "restock_service.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
