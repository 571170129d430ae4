from helm_tenancy.app.core.services.cluster_config.base import (
    ClusterConfigResolver,
    extract_credentials,
    render_kubeconfig,
)
from helm_tenancy.app.core.services.cluster_config.cached import (
    CachedClusterConfigResolver,
)
from helm_tenancy.app.core.services.cluster_config.factory import (
    get_cluster_config_resolver,
)
from helm_tenancy.app.core.services.cluster_config.remote import (
    RemoteClusterConfigResolver,
)

__all__ = [
    "CachedClusterConfigResolver",
    "ClusterConfigResolver",
    "RemoteClusterConfigResolver",
    "extract_credentials",
    "get_cluster_config_resolver",
    "render_kubeconfig",
]
