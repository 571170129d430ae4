"""Health check endpoints.

Endpoint Summary:
    GET /health         - Liveness probe (app is running)
    GET /health/ready   - Readiness probe (package manager initialized and
                          cluster credential service configured)
"""

from __future__ import annotations

from fastapi import APIRouter
from loguru import logger
from starlette.responses import JSONResponse

from helm_tenancy.app.api.http.deps import build_gateway
from helm_tenancy.app.api.http.schemas.health import (
    DependencyHealth,
    LivenessResponse,
    OverallStatus,
    ReadinessChecks,
    ReadinessResponse,
    ServiceStatus,
)
from helm_tenancy.app.core.errors import ReleaseError
from helm_tenancy.app.runtime.context import get_config
from helm_tenancy.infra.helm import package_manager_ready, package_manager_version

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Basic health check - returns 200 if the application process is running.",
)
async def health() -> LivenessResponse:
    return LivenessResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "The service can handle release requests"},
        503: {
            "description": "The package manager is not initialized or cluster access is not configured",
            "model": ReadinessResponse,
        },
    },
    summary="Readiness probe",
)
async def readiness() -> ReadinessResponse | JSONResponse:
    """Readiness check.

    Returns 503 until the package manager has been initialized, or while no
    cluster credential service is configured. A failed startup
    initialization is retried on each call.
    """
    config = get_config()

    if not package_manager_ready():
        try:
            await build_gateway(config).initialize()
        except ReleaseError as e:
            logger.warning(f"Package manager still not initialized: {e.message}")

    if package_manager_ready():
        package_manager = DependencyHealth(
            status=ServiceStatus.HEALTHY, note=package_manager_version()
        )
    else:
        package_manager = DependencyHealth(
            status=ServiceStatus.UNHEALTHY, note="package manager not initialized"
        )

    if config.cluster_config.service_url:
        cluster_config = DependencyHealth(
            status=ServiceStatus.HEALTHY, note=config.cluster_config.strategy
        )
    else:
        cluster_config = DependencyHealth(
            status=ServiceStatus.UNHEALTHY, note="cluster credential service not configured"
        )

    ready = all(
        check.status == ServiceStatus.HEALTHY for check in (package_manager, cluster_config)
    )
    result = ReadinessResponse(
        status=OverallStatus.READY if ready else OverallStatus.NOT_READY,
        environment=config.app.environment,
        checks=ReadinessChecks(package_manager=package_manager, cluster_config=cluster_config),
    )

    if not ready:
        return JSONResponse(
            status_code=503,
            content=result.model_dump(mode="json"),
        )

    return result
