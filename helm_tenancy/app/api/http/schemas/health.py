"""Health check response schemas.

Status Terminology:
    - healthy: Dependency is usable
    - unhealthy: Dependency is not usable (critical failure)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ServiceStatus(str, Enum):
    """Status values for individual dependency checks."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class OverallStatus(str, Enum):
    """Overall application readiness status.

    - READY: The package manager is initialized and cluster access is configured
    - NOT_READY: At least one of them is not
    """

    READY = "ready"
    NOT_READY = "not_ready"


class DependencyHealth(BaseModel):
    """Health check result for one dependency."""

    model_config = ConfigDict(use_enum_values=True)

    status: ServiceStatus = Field(description="Current health status of the dependency")
    note: str | None = Field(
        default=None,
        description="Optional additional context about the status",
    )


class ReadinessChecks(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    package_manager: DependencyHealth
    cluster_config: DependencyHealth


class ReadinessResponse(BaseModel):
    """Response model for the /health/ready endpoint."""

    model_config = ConfigDict(use_enum_values=True)

    status: OverallStatus = Field(description="Overall application readiness status")
    environment: str = Field(
        description="Current deployment environment (development, production, etc.)"
    )
    checks: ReadinessChecks


class LivenessResponse(BaseModel):
    """Response model for the /health endpoint (liveness probe).

    Only verifies the application process is running.
    """

    status: Annotated[
        str,
        Field(description="Always 'healthy' if the app is running"),
    ] = "healthy"
    service: Annotated[
        str,
        Field(description="Service identifier"),
    ] = "helm-tenancy"
