import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep config loading away from any config.yaml in the working directory
os.environ.setdefault("HELM_TENANCY_CONFIG", "/nonexistent/helm-tenancy-config.yaml")

from helm_tenancy.app.core.models import ClusterConfig  # noqa: E402
from helm_tenancy.infra.helm.gateway import reset_package_manager_state  # noqa: E402
from helm_tenancy.infra.k8s import KubernetesController  # noqa: E402

LIST_METHODS = (
    "list_services",
    "list_pods",
    "list_persistent_volume_claims",
    "list_deployments",
    "list_statefulsets",
    "list_secrets",
)


@pytest.fixture
def cluster(tmp_path: Path) -> ClusterConfig:
    """Cluster access addressed with explicit server and token flags."""
    return ClusterConfig(
        server="https://k8s.example:6443",
        token="s3cr3t",
        document={},
        kubeconfig_path=tmp_path / "tenant-42.kubeconfig",
    )


@pytest.fixture
def mock_controller() -> MagicMock:
    """Kubernetes controller whose namespaces are empty by default."""
    controller = MagicMock(spec=KubernetesController)
    for name in LIST_METHODS:
        setattr(controller, name, AsyncMock(return_value=[]))
    controller.delete_namespace = AsyncMock(return_value=None)
    return controller


@pytest.fixture(autouse=True)
def _reset_package_manager():
    reset_package_manager_state()
    yield
    reset_package_manager_state()
