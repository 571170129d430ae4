"""FastAPI dependencies for the release endpoints."""

from __future__ import annotations

from helm_tenancy.app.core.services.cluster_config import get_cluster_config_resolver
from helm_tenancy.app.core.services.release_service import ReleaseLifecycleService
from helm_tenancy.app.runtime.config.config_data import ConfigData
from helm_tenancy.app.runtime.context import get_config
from helm_tenancy.infra.helm import AsyncCommandRunner, PackageManagerGateway


def build_gateway(config: ConfigData) -> PackageManagerGateway:
    runner = AsyncCommandRunner(
        max_output_bytes=config.helm.max_output_bytes,
        timeout=config.helm.timeout_seconds,
    )
    return PackageManagerGateway(runner, binary=config.helm.binary)


def build_release_service(config: ConfigData) -> ReleaseLifecycleService:
    """Assemble a release service from configuration."""
    return ReleaseLifecycleService(
        build_gateway(config),
        get_cluster_config_resolver(config.cluster_config),
    )


def get_release_service() -> ReleaseLifecycleService:
    """Get a release service for the current request.

    A fresh service is built per request; none of its collaborators hold
    connections between requests.
    """
    return build_release_service(get_config())
