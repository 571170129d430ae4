"""Core services exports."""

from .cluster_config import (
    CachedClusterConfigResolver,
    ClusterConfigResolver,
    RemoteClusterConfigResolver,
    get_cluster_config_resolver,
)
from .connection_service import ResourceExporter
from .readiness_service import ReadinessEvaluator
from .release_service import ReleaseLifecycleService

__all__ = [
    "CachedClusterConfigResolver",
    "ClusterConfigResolver",
    "ReadinessEvaluator",
    "ReleaseLifecycleService",
    "RemoteClusterConfigResolver",
    "ResourceExporter",
    "get_cluster_config_resolver",
]
