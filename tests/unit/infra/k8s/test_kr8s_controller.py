"""Tests for the kr8s-backed Kubernetes controller."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import kr8s
import pytest
from kr8s.asyncio.objects import Namespace, Secret, Service

from helm_tenancy.app.core.errors import ClusterQueryError
from helm_tenancy.infra.k8s import Kr8sController


def objects(*manifests: dict):
    async def listing(*args, **kwargs):
        for manifest in manifests:
            yield SimpleNamespace(raw=manifest)

    return listing


@pytest.fixture
def mock_api() -> MagicMock:
    api = MagicMock()
    with patch("kr8s.asyncio.api", new=AsyncMock(return_value=api)):
        yield api


class TestKr8sController:
    async def test_lists_raw_manifests(self, mock_api: MagicMock) -> None:
        manifest = {"metadata": {"name": "web"}, "spec": {"type": "ClusterIP"}}
        controller = Kr8sController("/tmp/tenant-42.kubeconfig")

        with patch.object(Service, "list", objects(manifest)):
            services = await controller.list_services("tenant-42")

        assert services == [manifest]

    async def test_uses_release_kubeconfig(self) -> None:
        api = AsyncMock(return_value=MagicMock())
        controller = Kr8sController("/tmp/tenant-42.kubeconfig")

        with patch("kr8s.asyncio.api", new=api), patch.object(Secret, "list", objects()):
            await controller.list_secrets("tenant-42")

        api.assert_awaited_once_with(kubeconfig="/tmp/tenant-42.kubeconfig")

    async def test_list_failure_is_cluster_query_error(self, mock_api: MagicMock) -> None:
        async def failing(*args, **kwargs):
            raise RuntimeError("forbidden")
            yield

        with patch.object(Service, "list", failing):
            with pytest.raises(ClusterQueryError, match="forbidden"):
                await Kr8sController("/tmp/k").list_services("tenant-42")

    async def test_connection_failure_is_cluster_query_error(self) -> None:
        with patch("kr8s.asyncio.api", new=AsyncMock(side_effect=OSError("no such file"))):
            with pytest.raises(ClusterQueryError, match="Unable to connect"):
                await Kr8sController("/tmp/k").list_pods("tenant-42")

    async def test_delete_namespace(self, mock_api: MagicMock) -> None:
        namespace = MagicMock()
        namespace.delete = AsyncMock()

        with patch.object(Namespace, "get", AsyncMock(return_value=namespace)) as get:
            await Kr8sController("/tmp/k").delete_namespace("tenant-42")

        get.assert_awaited_once_with("tenant-42", api=mock_api)
        namespace.delete.assert_awaited_once()

    async def test_delete_missing_namespace(self, mock_api: MagicMock) -> None:
        missing = AsyncMock(side_effect=kr8s.NotFoundError("not found"))

        with patch.object(Namespace, "get", missing):
            with pytest.raises(ClusterQueryError, match='namespace "tenant-42" not found'):
                await Kr8sController("/tmp/k").delete_namespace("tenant-42")
