"""Kubernetes infrastructure abstraction layer.

This module provides an abstraction over the namespace-scoped Kubernetes
operations used by the release services, with a kr8s-backed implementation.

Example:
    from helm_tenancy.infra.k8s import Kr8sController

    controller = Kr8sController(cluster.kubeconfig_path)
    pods = await controller.list_pods("tenant-42")
"""

from .controller import KubernetesController, Manifest
from .kr8s_controller import Kr8sController

__all__ = [
    "KubernetesController",
    "Kr8sController",
    "Manifest",
]
