"""Unit tests for the ReleaseLifecycleService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from helm_tenancy.app.core.errors import (
    ClusterQueryError,
    ConfigResolutionError,
    ExecutionError,
    InstallFailed,
    UpgradeFailed,
    ValidationError,
)
from helm_tenancy.app.core.models import (
    ClusterConfig,
    ReadinessVerdict,
    Release,
    VerdictStatus,
)
from helm_tenancy.app.core.services.readiness_service import ReadinessEvaluator
from helm_tenancy.app.core.services.release_service import (
    ReleaseLifecycleService,
    find_first_service,
)
from helm_tenancy.infra.helm.gateway import PackageManagerGateway

SERVICE_MANIFEST = """\
---
apiVersion: v1
kind: ServiceAccount
metadata:
  name: tenant-42-sa
---
apiVersion: v1
kind: Service
metadata:
  name: tenant-42-web
spec:
  type: LoadBalancer
"""


def response(status: object, description: str = "", **extra: object) -> dict:
    return {"name": "tenant-42", "info": {"status": status, "description": description}, **extra}


@pytest.fixture
def mock_gateway() -> MagicMock:
    gateway = MagicMock(spec=PackageManagerGateway)
    gateway.prepare_chart_source = AsyncMock(return_value=None)
    gateway.execute = AsyncMock()
    gateway.execute_json = AsyncMock(return_value=response("deployed"))
    return gateway


@pytest.fixture
def mock_resolver(cluster: ClusterConfig) -> MagicMock:
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=cluster)
    return resolver


@pytest.fixture
def mock_evaluator() -> MagicMock:
    evaluator = MagicMock(spec=ReadinessEvaluator)
    evaluator.evaluate = AsyncMock(
        return_value=ReadinessVerdict(VerdictStatus.SUCCESS, "successfully provisioned")
    )
    return evaluator


@pytest.fixture
def service(
    mock_gateway: MagicMock,
    mock_resolver: MagicMock,
    mock_controller: MagicMock,
    mock_evaluator: MagicMock,
) -> ReleaseLifecycleService:
    return ReleaseLifecycleService(
        mock_gateway,
        mock_resolver,
        controller_factory=lambda cluster: mock_controller,
        evaluator_factory=lambda controller: mock_evaluator,
    )


@pytest.fixture
def release() -> Release:
    return Release(release_name="tenant-42", chart_name="acme/app")


class TestValidation:
    @pytest.mark.parametrize(
        "bad",
        [
            Release(release_name=None, chart_name="acme/app"),
            Release(release_name="", chart_name="acme/app"),
            Release(release_name="tenant-42", chart_name=None),
            Release(release_name="tenant-42", chart_name=" "),
        ],
    )
    async def test_install_fails_before_any_external_call(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_resolver: MagicMock,
        bad: Release,
    ) -> None:
        with pytest.raises(ValidationError):
            await service.install(bad)

        mock_resolver.resolve.assert_not_called()
        mock_gateway.prepare_chart_source.assert_not_called()
        mock_gateway.execute_json.assert_not_called()

    @pytest.mark.parametrize(
        "operation",
        ["uninstall", "delete", "release_status", "is_deployed", "release_connection_details"],
    )
    async def test_release_name_required(
        self,
        service: ReleaseLifecycleService,
        mock_resolver: MagicMock,
        operation: str,
    ) -> None:
        with pytest.raises(ValidationError, match="releaseName is required"):
            await getattr(service, operation)(None)

        mock_resolver.resolve.assert_not_called()


class TestInstall:
    async def test_install_returns_first_service(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        release: Release,
    ) -> None:
        mock_gateway.execute_json.return_value = response(
            "deployed", "Install complete", manifest=SERVICE_MANIFEST
        )

        result = await service.install(release)

        assert result.release_name == "tenant-42"
        assert result.service_name == "tenant-42-web"
        assert result.status == "deployed"
        assert result.message == "Install complete"

    async def test_install_runs_steps_in_order(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_resolver: MagicMock,
        release: Release,
        cluster: ClusterConfig,
    ) -> None:
        order: list[str] = []
        mock_resolver.resolve.side_effect = lambda name: order.append("resolve") or cluster
        mock_gateway.prepare_chart_source.side_effect = lambda r: order.append("repo")
        mock_gateway.execute_json.side_effect = lambda c: order.append(c.verb[0]) or response(
            "deployed"
        )

        await service.install(release)

        assert order == ["resolve", "repo", "install"]

    async def test_pending_install_is_accepted(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock, release: Release
    ) -> None:
        mock_gateway.execute_json.return_value = response("pending-install")

        result = await service.install(release)

        assert result.status == "pending_install"

    async def test_failed_install_carries_description(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock, release: Release
    ) -> None:
        mock_gateway.execute_json.return_value = response(
            "failed", "Release \"tenant-42\" failed: timed out waiting for the condition"
        )

        with pytest.raises(InstallFailed, match="timed out waiting for the condition"):
            await service.install(release)

    async def test_failed_upgrade(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock, release: Release
    ) -> None:
        mock_gateway.execute_json.return_value = response("superseded", "superseded by v3")

        with pytest.raises(UpgradeFailed, match="superseded by v3"):
            await service.upgrade(release)

    async def test_upgrade_uses_upgrade_command(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock, release: Release
    ) -> None:
        await service.upgrade(release)

        command = mock_gateway.execute_json.call_args[0][0]
        assert command.verb == ("upgrade",)
        assert not command.has_option("--create-namespace")

    async def test_resolution_failure_aborts_before_package_manager(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_resolver: MagicMock,
        release: Release,
    ) -> None:
        mock_resolver.resolve.side_effect = ConfigResolutionError("no mapping")

        with pytest.raises(ConfigResolutionError):
            await service.install(release)

        mock_gateway.prepare_chart_source.assert_not_called()
        mock_gateway.execute_json.assert_not_called()

    async def test_repo_failure_aborts_install(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock, release: Release
    ) -> None:
        mock_gateway.prepare_chart_source.side_effect = ExecutionError("repo add failed")

        with pytest.raises(ExecutionError):
            await service.install(release)

        mock_gateway.execute_json.assert_not_called()


class TestUninstall:
    async def test_uninstall_deletes_namespace(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_controller: MagicMock,
    ) -> None:
        await service.uninstall("tenant-42")

        command = mock_gateway.execute.call_args[0][0]
        assert command.verb == ("uninstall",)
        mock_controller.delete_namespace.assert_awaited_once_with("tenant-42")

    async def test_uninstall_forgets_stored_kubeconfig(
        self, service: ReleaseLifecycleService, mock_resolver: MagicMock
    ) -> None:
        await service.uninstall("tenant-42")

        mock_resolver.forget.assert_called_once_with("tenant-42")

    async def test_namespace_failure_does_not_fail_uninstall(
        self, service: ReleaseLifecycleService, mock_controller: MagicMock
    ) -> None:
        mock_controller.delete_namespace.side_effect = ClusterQueryError("forbidden")

        await service.delete("tenant-42")

        mock_controller.delete_namespace.assert_awaited_once()

    async def test_package_manager_failure_skips_namespace(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_controller: MagicMock,
        mock_resolver: MagicMock,
    ) -> None:
        mock_gateway.execute.side_effect = ExecutionError("Error: uninstall: Release not loaded")

        with pytest.raises(ExecutionError):
            await service.uninstall("tenant-42")

        mock_controller.delete_namespace.assert_not_called()
        mock_resolver.forget.assert_not_called()


class TestReleaseStatus:
    async def test_deployed_delegates_to_evaluator_once(
        self,
        service: ReleaseLifecycleService,
        mock_evaluator: MagicMock,
    ) -> None:
        verdict = await service.release_status("tenant-42")

        mock_evaluator.evaluate.assert_awaited_once_with("tenant-42")
        assert verdict is mock_evaluator.evaluate.return_value

    @pytest.mark.parametrize("status", ["pending_upgrade", "pending-install", 8])
    async def test_pending_is_in_progress_without_cluster_calls(
        self,
        service: ReleaseLifecycleService,
        mock_gateway: MagicMock,
        mock_evaluator: MagicMock,
        mock_controller: MagicMock,
        status: object,
    ) -> None:
        mock_gateway.execute_json.return_value = response(status)

        verdict = await service.release_status("tenant-42")

        assert verdict.status == VerdictStatus.IN_PROGRESS
        assert verdict.message == "deploy in progress"
        mock_evaluator.evaluate.assert_not_called()
        mock_controller.list_services.assert_not_called()

    async def test_terminal_status_is_failed(
        self, service: ReleaseLifecycleService, mock_gateway: MagicMock
    ) -> None:
        mock_gateway.execute_json.return_value = response("FAILED")

        verdict = await service.release_status("tenant-42")

        assert verdict.status == VerdictStatus.FAILED
        assert verdict.message == "deploy failed with code:failed"

    async def test_is_deployed_skips_readiness(
        self,
        service: ReleaseLifecycleService,
        mock_evaluator: MagicMock,
    ) -> None:
        state = await service.is_deployed("tenant-42")

        assert state.deployed
        assert state.raw_status == "deployed"
        mock_evaluator.evaluate.assert_not_called()


class TestConnectionDetails:
    async def test_connection_details(
        self, service: ReleaseLifecycleService, mock_controller: MagicMock
    ) -> None:
        mock_controller.list_secrets.return_value = [
            {"metadata": {"name": "creds"}, "type": "Opaque", "data": {"user": "YQ=="}}
        ]
        mock_controller.list_services.return_value = [
            {"metadata": {"name": "web"}, "spec": {}, "status": {}}
        ]

        bundle = await service.release_connection_details("tenant-42")

        assert [s.name for s in bundle.secrets] == ["creds"]
        assert [s.name for s in bundle.services] == ["web"]

    async def test_services(
        self, service: ReleaseLifecycleService, mock_controller: MagicMock
    ) -> None:
        mock_controller.list_services.return_value = [{"metadata": {"name": "web"}}]

        services = await service.release_services("tenant-42")

        assert [s.name for s in services] == ["web"]
        mock_controller.list_secrets.assert_not_called()


class TestFindFirstService:
    def test_legacy_resources_listing(self) -> None:
        found = find_first_service(
            {
                "resources": [
                    {"name": "v1/ServiceAccount", "resources": ["tenant-42-sa"]},
                    {"name": "v1/Service", "resources": ["tenant-42-db", "tenant-42-web"]},
                ]
            }
        )

        assert found == "tenant-42-db"

    def test_manifest(self) -> None:
        assert find_first_service({"manifest": SERVICE_MANIFEST}) == "tenant-42-web"

    @pytest.mark.parametrize(
        "payload", [{}, {"manifest": ""}, {"manifest": "kind: [unclosed"}, {"resources": "x"}]
    )
    def test_nothing_found(self, payload: dict) -> None:
        assert find_first_service(payload) is None
