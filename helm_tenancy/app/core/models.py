"""Domain types shared by the release lifecycle services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# =============================================================================
# Release
# =============================================================================


@dataclass
class Release:
    """A namespace-scoped deployment request for a chart.

    The release name doubles as the Kubernetes namespace. No record of a
    release is kept by this service; the package manager and the cluster are
    the source of truth.

    Attributes:
        release_name: Unique release identifier, also the namespace
        chart_name: Chart reference, e.g. ``acme/app``
        private_charts_repo: Optional URL of the repository hosting the chart
        values: Value overrides, rendered as ``--set key=value``
        flags: Extra CLI flags, rendered as ``--key value``
        reuse_value: Truthy text enables ``--reuse-values``
    """

    release_name: str | None = None
    chart_name: str | None = None
    private_charts_repo: str | None = None
    values: dict[str, Any] = field(default_factory=dict)
    flags: dict[str, Any] = field(default_factory=dict)
    reuse_value: Any = None


# =============================================================================
# Cluster access
# =============================================================================


@dataclass(frozen=True)
class ClusterConfig:
    """Resolved access descriptor for the cluster hosting a release.

    Attributes:
        server: Kubernetes API server address
        token: Bearer token for the API server
        document: Full kubeconfig-shaped credential document
        kubeconfig_path: Rendered kubeconfig file used by the Kubernetes client
        use_kubeconfig_flag: Address the package manager via ``--kubeconfig``
            instead of explicit API server and token flags
    """

    server: str
    token: str
    document: dict[str, Any]
    kubeconfig_path: Path
    use_kubeconfig_flag: bool = False

    def __repr__(self) -> str:
        return (
            f"ClusterConfig(server={self.server!r}, token='***', "
            f"kubeconfig_path={str(self.kubeconfig_path)!r})"
        )


# =============================================================================
# Results
# =============================================================================


class VerdictStatus(str, Enum):
    """Status values reported by readiness and status checks."""

    SUCCESS = "success"
    IN_PROGRESS = "inprogress"
    FAILED = "failed"


@dataclass(frozen=True)
class ReadinessVerdict:
    """Outcome of a readiness check or of a release status query."""

    status: VerdictStatus
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == VerdictStatus.SUCCESS


@dataclass(frozen=True)
class InstallResult:
    """Outcome of a successful install or upgrade.

    Attributes:
        release_name: Name of the release that was installed
        service_name: First Service found among the release resources, if any
        status: Normalized raw status token reported by the package manager
        message: Description reported by the package manager
    """

    release_name: str
    service_name: str | None
    status: str
    message: str


@dataclass(frozen=True)
class DeploymentState:
    """Lifecycle state of a release without the readiness walk."""

    release_name: str
    raw_status: str
    state: str
    description: str = ""

    @property
    def deployed(self) -> bool:
        return self.state == "deployed"


@dataclass
class SecretEntry:
    """Projection of an Opaque secret."""

    name: str
    data: dict[str, str]


@dataclass
class ServiceEntry:
    """Projection of a Service."""

    name: str
    metadata: dict[str, Any]
    spec: dict[str, Any]
    status: dict[str, Any]


@dataclass
class ConnectionBundle:
    """Secrets and services needed to connect to a release."""

    secrets: list[SecretEntry] = field(default_factory=list)
    services: list[ServiceEntry] = field(default_factory=list)
