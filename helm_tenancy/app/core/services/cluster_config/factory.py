"""Factory for obtaining the configured cluster configuration resolver."""

from typing import TYPE_CHECKING

from helm_tenancy.app.core.services.cluster_config.base import ClusterConfigResolver
from helm_tenancy.app.core.services.cluster_config.remote import (
    RemoteClusterConfigResolver,
)

if TYPE_CHECKING:
    from helm_tenancy.app.runtime.config.config_data import ClusterConfigSettings


def get_cluster_config_resolver(settings: "ClusterConfigSettings") -> ClusterConfigResolver:
    """Get the resolver for the configured strategy."""

    remote = RemoteClusterConfigResolver(
        settings.service_url,
        settings.cache_dir,
        timeout=settings.timeout_seconds,
    )

    if settings.strategy == "cached":
        from helm_tenancy.app.core.services.cluster_config.cached import (
            CachedClusterConfigResolver,
        )

        return CachedClusterConfigResolver(remote)

    return remote
