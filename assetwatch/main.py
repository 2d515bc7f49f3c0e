"""
AssetWatch FastAPI application.

Every response is JSON. Successful calls return ``{"success": true, "data": ...}``;
failures return ``{"success": false, "error": ...}`` with the status code
chosen by the exception handlers below:

- EntityNotFoundError -> 404
- DependencyValidationError -> 422 with the validator's ``errors``
- StorageError -> 500
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assetwatch.config import get_settings
from assetwatch.routers import (
    alerts,
    analysis,
    audit,
    components,
    dependencies,
    health,
    system,
    validation,
    workflows,
)
from assetwatch.services import DependencyValidationError, EntityNotFoundError
from assetwatch.storage import StorageError, get_storage
from assetwatch.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

API_VERSION = "0.1.0"
API_PREFIX = "/api/v1"
REQUEST_ID_HEADER = "X-Request-ID"

# (router module, path segment, OpenAPI tag)
ROUTES = [
    (components, "components", "Components"),
    (dependencies, "dependencies", "Dependencies"),
    (workflows, "workflows", "Workflows"),
    (analysis, "analysis", "Analysis"),
    (alerts, "alerts", "Alerts"),
    (health, "health", "Health"),
    (audit, "audit", "Audit"),
    (validation, "validation", "Validation"),
    (system, "system", "System"),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the storage backend (creating the schema) before serving."""
    settings = get_settings()
    get_storage()
    logger.info(
        "application_startup",
        version=app.version,
        db_path=settings.db_path,
        dev_mode=settings.dev_mode,
    )
    yield
    logger.info("application_shutdown")


def _error_response(status_code: int, request: Request, error: str, **extra) -> JSONResponse:
    content = {"success": False, "error": error, **extra}
    request_id = request.headers.get(REQUEST_ID_HEADER)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content)


def install_request_tracing(app: FastAPI) -> None:
    """Bind a request id to every log event and echo it in the response."""

    @app.middleware("http")
    async def request_tracing_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_failed", error=str(e), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "request_id": request_id,
                },
                headers={REQUEST_ID_HEADER: request_id},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("request_completed", status_code=response.status_code)
        return response


def install_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses."""

    @app.exception_handler(EntityNotFoundError)
    async def entity_not_found_handler(request: Request, exc: EntityNotFoundError):
        logger.info(
            "entity_not_found", entity_type=exc.entity_type, entity_id=exc.entity_id
        )
        return _error_response(404, request, str(exc))

    @app.exception_handler(DependencyValidationError)
    async def dependency_invalid_handler(request: Request, exc: DependencyValidationError):
        return _error_response(422, request, "Invalid dependency", errors=exc.errors)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("storage_error", error=str(exc))
        return _error_response(500, request, "Storage failure")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="AssetWatch API",
        description="IT asset inventory with cascading outage impact analysis",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    install_request_tracing(app)
    install_exception_handlers(app)

    @app.get("/health", tags=["System"])
    async def liveness():
        """Liveness probe; does not touch storage."""
        return {"status": "healthy", "version": app.version}

    for module, segment, tag in ROUTES:
        app.include_router(module.router, prefix=f"{API_PREFIX}/{segment}", tags=[tag])

    logger.debug("application_configured", routers=[segment for _, segment, _ in ROUTES])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "assetwatch.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
