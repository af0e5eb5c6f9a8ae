import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from collector.app.api.event import router as event_router
from collector.app.core.config import Settings, settings
from collector.app.core.logging import get_logger, setup_logging
from collector.app.core.utils import now_ms
from collector.app.exceptions import CollectorException
from collector.app.middleware.request_id import RequestIdMiddleware, get_request_id
from collector.app.services.event_sink import get_event_sink
from collector.app.services.ingestion import EventIngestionService
from collector.app.services.rate_limit import RateLimitRegistry


async def sweep_rate_limits(registry: RateLimitRegistry, interval_seconds: float) -> None:
    """Periodically drop expired rate limit buckets until cancelled."""
    logger = get_logger(__name__)
    while True:
        await asyncio.sleep(interval_seconds)
        removed = registry.sweep(now_ms())
        if removed:
            logger.info(f"Rate limit sweep removed {removed} buckets, {len(registry)} remain")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build the app from (defaults to the
            global settings)

    Returns:
        Configured FastAPI application instance
    """
    app_settings = app_settings or settings

    setup_logging(app_settings)
    logger = get_logger(__name__)

    registry = RateLimitRegistry(max_entries=app_settings.rate_limit_max_entries)
    ingestion = EventIngestionService(registry=registry, sink=get_event_sink(app_settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Start and stop the background rate limit sweep."""
        sweeper: Optional[asyncio.Task] = None
        if app_settings.rate_limit_sweep_interval_seconds > 0:
            sweeper = asyncio.create_task(
                sweep_rate_limits(registry, app_settings.rate_limit_sweep_interval_seconds)
            )

        logger.info(
            "Application startup complete",
            extra={
                "environment": app_settings.environment,
                "event_logging": app_settings.is_production,
            }
        )

        yield

        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

        logger.info("Application shutdown complete")

    app = FastAPI(
        title="First-Party Event Collector",
        description="Rate limited ingestion of client interaction events",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.rate_limits = registry
    app.state.ingestion = ingestion

    app.add_middleware(RequestIdMiddleware)

    app.include_router(event_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Liveness check with the number of tracked clients."""
        return {
            "status": "ok",
            "environment": app_settings.environment,
            "tracked_clients": len(registry),
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Turn unhandled exceptions into a generic failure.

        The traceback is only logged server-side. Debug mode adds the
        exception message to the response.
        """
        request_id = get_request_id(request)

        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
            }
        )

        status_code = exc.status_code if isinstance(exc, CollectorException) else 500
        content: dict[str, Any] = {"ok": False, "error": "internal_error"}
        if app_settings.debug:
            content["message"] = str(exc)
            content["request_id"] = request_id
        # Sent by ServerErrorMiddleware, outside RequestIdMiddleware
        return JSONResponse(
            status_code=status_code,
            content=content,
            headers={"X-Request-ID": request_id},
        )

    return app


# Create the application instance
app = create_app()
