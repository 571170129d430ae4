"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse

from helm_tenancy.app.api.http.deps import build_gateway
from helm_tenancy.app.api.http.routers import health, releases
from helm_tenancy.app.api.http.schemas.releases import FailureResponse
from helm_tenancy.app.core.errors import ReleaseError
from helm_tenancy.app.runtime.context import get_config
from helm_tenancy.app.runtime.log_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Configure logging and initialize the package manager once."""
    config = get_config()
    configure_logging(config.logging.level)
    logger.info(f"Starting helm-tenancy ({config.app.environment})")

    try:
        await build_gateway(config).initialize()
    except ReleaseError as e:
        # The process keeps serving; /health/ready reports not ready
        logger.error(f"Package manager initialization failed: {e.message}")

    yield
    logger.info("helm-tenancy stopped")


async def release_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a release failure into the uniform failure envelope."""
    message = exc.message if isinstance(exc, ReleaseError) else str(exc)
    logger.error(f"{request.method} {request.url.path} failed: {message}")
    if isinstance(exc, ReleaseError) and exc.details:
        logger.debug(f"Failure details: {exc.details}")
    return JSONResponse(
        status_code=500,
        content=FailureResponse(reason=message).model_dump(mode="json"),
    )


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report a malformed request with the same failure envelope."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = str(exc)
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(
        status_code=500,
        content=FailureResponse(reason=message).model_dump(mode="json"),
    )


def create_app() -> FastAPI:
    """Build the HTTP application."""
    app = FastAPI(
        title="helm-tenancy",
        description="Per-tenant Helm release lifecycle over HTTP",
        lifespan=lifespan,
    )
    app.add_exception_handler(ReleaseError, release_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(health.router)
    app.include_router(releases.router)
    return app
