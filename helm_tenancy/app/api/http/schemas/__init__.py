"""API schema definitions for HTTP endpoints.

Modules:
    health: Health check response models
    releases: Release lifecycle request/response models
"""

from helm_tenancy.app.api.http.schemas.health import (
    DependencyHealth,
    LivenessResponse,
    OverallStatus,
    ReadinessChecks,
    ReadinessResponse,
    ServiceStatus,
)
from helm_tenancy.app.api.http.schemas.releases import (
    ConnectionDetailsResponse,
    DeployedResponse,
    FailureResponse,
    InstallResponse,
    ReleaseNameBody,
    ReleaseRequest,
    SecretModel,
    ServiceModel,
    ServicesResponse,
    StatusResponse,
    SuccessResponse,
)

__all__ = [
    # Health schemas
    "DependencyHealth",
    "LivenessResponse",
    "OverallStatus",
    "ReadinessChecks",
    "ReadinessResponse",
    "ServiceStatus",
    # Release schemas
    "ConnectionDetailsResponse",
    "DeployedResponse",
    "FailureResponse",
    "InstallResponse",
    "ReleaseNameBody",
    "ReleaseRequest",
    "SecretModel",
    "ServiceModel",
    "ServicesResponse",
    "StatusResponse",
    "SuccessResponse",
]
