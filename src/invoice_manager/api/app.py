"""FastAPI application factory."""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from invoice_manager import __version__
from invoice_manager.api.routes import (
    analytics_router,
    get_app_container,
    health_router,
    invoice_router,
    product_router,
    receipt_router,
)
from invoice_manager.config import get_settings
from invoice_manager.container import get_container, reset_container
from invoice_manager.exceptions import InvoiceManagerError
from invoice_manager.logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
ROUTERS = (health_router, product_router, invoice_router, receipt_router, analytics_router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the global container on startup and close it on shutdown.

    When a test overrides ``get_app_container`` the global container is
    never touched.
    """
    settings = get_settings()
    configure_logging(settings)
    uses_global_container = get_app_container not in app.dependency_overrides

    if uses_global_container:
        database = get_container().database
        logger.info("application_started", version=__version__, database=database.path)

    yield

    if uses_global_container:
        reset_container()
    logger.info("application_stopped")


async def log_request_middleware(request: Request, call_next):
    """Tag every log line of a request with its id and echo the id back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
    bind_context(request_id=request_id, method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        logger.debug(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        clear_context()


async def exception_handler(request: Request, exc: InvoiceManagerError) -> JSONResponse:
    """Turn domain exceptions into ``{"error", "message", "retryable", "context"}``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("domain_exception", error_code=exc.error_code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Invoices, receipts and a product catalog for small businesses",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.middleware("http")(log_request_middleware)
    app.add_exception_handler(InvoiceManagerError, exception_handler)
    for router in ROUTERS:
        app.include_router(router)

    return app
