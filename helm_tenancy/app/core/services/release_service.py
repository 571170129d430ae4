"""Release lifecycle orchestration.

This module composes cluster configuration resolution, Helm command
construction and execution, and the Kubernetes-side checks into the
operations exposed by the HTTP API: install, upgrade, uninstall, status and
connection details.

Every operation is self-contained: it validates its input before any
external call, resolves the release's cluster configuration, then runs its
steps strictly in sequence. Nothing is retried; a failure at any step aborts
the operation with a ``ReleaseError``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import yaml
from loguru import logger

from helm_tenancy.app.core.errors import (
    ClusterQueryError,
    InstallFailed,
    UpgradeFailed,
)
from helm_tenancy.app.core.lifecycle import LifecycleState, ReleaseInfo
from helm_tenancy.app.core.models import (
    ClusterConfig,
    ConnectionBundle,
    DeploymentState,
    InstallResult,
    ReadinessVerdict,
    Release,
    ServiceEntry,
    VerdictStatus,
)
from helm_tenancy.app.core.services.connection_service import ResourceExporter
from helm_tenancy.app.core.services.readiness_service import ReadinessEvaluator
from helm_tenancy.infra.helm.commands import (
    build_install,
    build_status,
    build_uninstall,
    build_upgrade,
    require,
)
from helm_tenancy.infra.k8s import Kr8sController

if TYPE_CHECKING:
    from helm_tenancy.app.core.services.cluster_config import ClusterConfigResolver
    from helm_tenancy.infra.helm.gateway import PackageManagerGateway
    from helm_tenancy.infra.k8s import KubernetesController

DEPLOY_IN_PROGRESS_MESSAGE = "deploy in progress"

ControllerFactory = Callable[[ClusterConfig], "KubernetesController"]


def kr8s_controller_factory(cluster: ClusterConfig) -> KubernetesController:
    """Build a kr8s controller bound to the resolved cluster."""
    return Kr8sController(cluster.kubeconfig_path)


class ReleaseLifecycleService:
    """Orchestrates the lifecycle of per-tenant chart releases.

    Collaborators are injected; the HTTP layer builds one service per request.

    Example:
        ```python
        service = ReleaseLifecycleService(gateway, resolver)
        result = await service.install(
            Release(release_name="tenant-42", chart_name="acme/app")
        )
        ```
    """

    def __init__(
        self,
        gateway: PackageManagerGateway,
        resolver: ClusterConfigResolver,
        *,
        controller_factory: ControllerFactory = kr8s_controller_factory,
        evaluator_factory: Callable[[KubernetesController], ReadinessEvaluator] = ReadinessEvaluator,
        exporter_factory: Callable[[KubernetesController], ResourceExporter] = ResourceExporter,
    ) -> None:
        """Initialize the release lifecycle service.

        Args:
            gateway: Executes Helm commands
            resolver: Resolves cluster access for a release
            controller_factory: Builds a Kubernetes controller for a cluster
            evaluator_factory: Builds the readiness evaluator
            exporter_factory: Builds the connection resource exporter
        """
        self._gateway = gateway
        self._resolver = resolver
        self._controller_factory = controller_factory
        self._evaluator_factory = evaluator_factory
        self._exporter_factory = exporter_factory

    # =========================================================================
    # Install / Upgrade
    # =========================================================================

    async def install(self, release: Release) -> InstallResult:
        """Install a chart as a new release in its own namespace.

        Raises:
            ValidationError: If releaseName or chartName is missing
            InstallFailed: If the release ends in a failed state
        """
        release_name = require(release.release_name, "releaseName")
        require(release.chart_name, "chartName")
        logger.info(f"Installing chart {release.chart_name} as release {release_name}")

        cluster = await self._resolver.resolve(release_name)
        command = build_install(release, cluster)
        await self._gateway.prepare_chart_source(release)
        response = await self._gateway.execute_json(command)

        info = ReleaseInfo.from_response(response)
        logger.info(f"Install of {release_name} reported status {info.raw_status}")
        if info.state == LifecycleState.FAILED:
            raise InstallFailed(
                info.description or f"install finished with status {info.raw_status}"
            )
        return self._result(release_name, info, response)

    async def upgrade(self, release: Release) -> InstallResult:
        """Upgrade an existing release.

        Raises:
            ValidationError: If releaseName or chartName is missing
            UpgradeFailed: If the release ends in a failed state
        """
        release_name = require(release.release_name, "releaseName")
        require(release.chart_name, "chartName")
        logger.info(f"Upgrading release {release_name} to chart {release.chart_name}")

        cluster = await self._resolver.resolve(release_name)
        command = build_upgrade(release, cluster)
        await self._gateway.prepare_chart_source(release)
        response = await self._gateway.execute_json(command)

        info = ReleaseInfo.from_response(response)
        logger.info(f"Upgrade of {release_name} reported status {info.raw_status}")
        if info.state == LifecycleState.FAILED:
            raise UpgradeFailed(
                info.description or f"upgrade finished with status {info.raw_status}"
            )
        return self._result(release_name, info, response)

    # =========================================================================
    # Uninstall
    # =========================================================================

    async def uninstall(self, release_name: str | None) -> None:
        """Remove a release, then delete its namespace on a best-effort basis.

        The package-manager removal is authoritative: a failure to delete the
        namespace afterwards is logged and does not fail the operation. The
        kubeconfig kept for the release is removed in either case.

        Raises:
            ValidationError: If releaseName is missing
        """
        name = require(release_name, "releaseName")
        logger.info(f"Deleting release: {name}")

        cluster = await self._resolver.resolve(name)
        await self._gateway.execute(build_uninstall(name, cluster))

        try:
            await self._controller_factory(cluster).delete_namespace(name)
        except ClusterQueryError as e:
            logger.warning(f"Release {name} removed but namespace deletion failed: {e.message}")
        finally:
            self._resolver.forget(name)

    delete = uninstall

    # =========================================================================
    # Status
    # =========================================================================

    async def release_status(self, release_name: str | None) -> ReadinessVerdict:
        """Report whether a release is provisioned.

        A release the package manager reports as deployed is further checked
        for workload readiness; pending releases are reported as in progress
        without querying the cluster.

        Raises:
            ValidationError: If releaseName is missing
            ClusterQueryError: If a readiness query fails
        """
        name = require(release_name, "releaseName")
        cluster = await self._resolver.resolve(name)
        info = await self._query_status(name, cluster)

        if info.state == LifecycleState.DEPLOYED:
            evaluator = self._evaluator_factory(self._controller_factory(cluster))
            return await evaluator.evaluate(name)
        if info.state == LifecycleState.IN_PROGRESS:
            return ReadinessVerdict(
                status=VerdictStatus.IN_PROGRESS, message=DEPLOY_IN_PROGRESS_MESSAGE
            )
        return ReadinessVerdict(
            status=VerdictStatus.FAILED,
            message=f"deploy failed with code:{info.raw_status}",
        )

    async def is_deployed(self, release_name: str | None) -> DeploymentState:
        """Report the release's lifecycle state without the readiness walk."""
        name = require(release_name, "releaseName")
        cluster = await self._resolver.resolve(name)
        info = await self._query_status(name, cluster)
        return DeploymentState(
            release_name=name,
            raw_status=info.raw_status,
            state=info.state.value,
            description=info.description,
        )

    # =========================================================================
    # Connection details
    # =========================================================================

    async def release_connection_details(self, release_name: str | None) -> ConnectionBundle:
        """Collect the secrets and services of the release namespace."""
        name = require(release_name, "releaseName")
        cluster = await self._resolver.resolve(name)
        exporter = self._exporter_factory(self._controller_factory(cluster))
        return await exporter.export_secrets_and_services(name)

    async def release_services(self, release_name: str | None) -> list[ServiceEntry]:
        """Collect the services of the release namespace."""
        name = require(release_name, "releaseName")
        cluster = await self._resolver.resolve(name)
        exporter = self._exporter_factory(self._controller_factory(cluster))
        return await exporter.export_services(name)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _query_status(self, name: str, cluster: ClusterConfig) -> ReleaseInfo:
        response = await self._gateway.execute_json(build_status(name, cluster))
        info = ReleaseInfo.from_response(response)
        logger.info(f"Release {name} status: {info.raw_status}")
        return info

    @staticmethod
    def _result(release_name: str, info: ReleaseInfo, response: dict[str, Any]) -> InstallResult:
        return InstallResult(
            release_name=release_name,
            service_name=find_first_service(response),
            status=info.raw_status,
            message=info.description,
        )


def find_first_service(response: dict[str, Any]) -> str | None:
    """Name of the first Service among the release's resources.

    Looks at the legacy ``resources`` listing (groups named by kind path,
    e.g. ``v1/Service``) first, then at the rendered ``manifest``.
    """
    for group in response.get("resources") or []:
        if not isinstance(group, dict):
            continue
        kind_path = str(group.get("name", "")).strip().lower()
        if kind_path.rsplit("/", 1)[-1] != "service":
            continue
        members = group.get("resources") or []
        if not members:
            return None
        first = members[0]
        if isinstance(first, dict):
            return (first.get("metadata") or {}).get("name") or first.get("name")
        return str(first)

    manifest = response.get("manifest")
    if not isinstance(manifest, str) or not manifest.strip():
        return None
    try:
        for document in yaml.safe_load_all(manifest):
            if isinstance(document, dict) and document.get("kind") == "Service":
                return (document.get("metadata") or {}).get("name")
    except yaml.YAMLError as e:
        logger.warning(f"Unable to parse release manifest: {e}")
    return None
