"""Unit tests for the cluster configuration resolvers."""

from __future__ import annotations

import json
import stat
from pathlib import Path

import httpx
import pytest
import yaml

from helm_tenancy.app.core.errors import ConfigResolutionError, ValidationError
from helm_tenancy.app.core.services.cluster_config import (
    CachedClusterConfigResolver,
    RemoteClusterConfigResolver,
    extract_credentials,
    get_cluster_config_resolver,
    render_kubeconfig,
)
from helm_tenancy.app.runtime.config.config_data import ClusterConfigSettings

BUNDLE = {
    "clusters": [{"cluster": {"server": "https://k8s.example:6443"}}],
    "users": [{"user": {"token": "s3cr3t"}}],
}


def transport_for(handler, calls: list[httpx.Request] | None = None) -> httpx.MockTransport:
    def record(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return handler(request)

    return httpx.MockTransport(record)


def remote(tmp_path: Path, handler, calls: list | None = None) -> RemoteClusterConfigResolver:
    return RemoteClusterConfigResolver(
        "http://hcaas.example/",
        tmp_path,
        transport=transport_for(handler, calls),
    )


class TestRemoteResolver:
    async def test_resolves_bundle(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)

        cluster = await resolver.resolve("tenant-42")

        assert cluster.server == "https://k8s.example:6443"
        assert cluster.token == "s3cr3t"
        assert not cluster.use_kubeconfig_flag
        assert calls[0].url.path == "/clusterConfig"
        assert calls[0].url.params["releaseName"] == "tenant-42"

    async def test_writes_usable_kubeconfig(self, tmp_path: Path) -> None:
        resolver = remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE))

        cluster = await resolver.resolve("tenant-42")

        written = yaml.safe_load(cluster.kubeconfig_path.read_text())
        assert written["current-context"] == "tenant-42"
        assert written["contexts"][0]["context"]["namespace"] == "tenant-42"
        assert stat.S_IMODE(cluster.kubeconfig_path.stat().st_mode) == 0o600

    async def test_fetches_on_every_call(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)

        await resolver.resolve("tenant-42")
        await resolver.resolve("tenant-42")

        assert len(calls) == 2

    async def test_accepts_yaml_kubeconfig(self, tmp_path: Path) -> None:
        body = yaml.safe_dump(BUNDLE)
        resolver = remote(tmp_path, lambda r: httpx.Response(200, text=body))

        cluster = await resolver.resolve("tenant-42")

        assert cluster.token == "s3cr3t"

    async def test_repr_masks_token(self, tmp_path: Path) -> None:
        resolver = remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE))

        cluster = await resolver.resolve("tenant-42")

        assert "s3cr3t" not in repr(cluster)

    @pytest.mark.parametrize(
        ("response", "message"),
        [
            (httpx.Response(404), "No cluster configuration found"),
            (httpx.Response(200, text=""), "No cluster configuration found"),
            (httpx.Response(503, text="maintenance"), "HTTP 503"),
            (httpx.Response(200, json=[1, 2]), "unreadable document"),
            (httpx.Response(200, json={"clusters": []}), "no API server or token"),
        ],
    )
    async def test_failures(self, tmp_path: Path, response: httpx.Response, message: str) -> None:
        resolver = remote(tmp_path, lambda r: response)

        with pytest.raises(ConfigResolutionError, match=message):
            await resolver.resolve("tenant-42")

    async def test_unreachable_service(self, tmp_path: Path) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        resolver = remote(tmp_path, refuse)

        with pytest.raises(ConfigResolutionError, match="unreachable"):
            await resolver.resolve("tenant-42")


class TestCachedResolver:
    async def test_fetches_once_then_reuses_stored_kubeconfig(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = CachedClusterConfigResolver(
            remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)
        )

        first = await resolver.resolve("tenant-42")
        second = await resolver.resolve("tenant-42")

        assert len(calls) == 1
        assert first.use_kubeconfig_flag and second.use_kubeconfig_flag
        assert first.kubeconfig_path == second.kubeconfig_path
        assert second.token == "s3cr3t"

    async def test_entries_are_per_release(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = CachedClusterConfigResolver(
            remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)
        )

        a = await resolver.resolve("tenant-a")
        b = await resolver.resolve("tenant-b")

        assert len(calls) == 2
        assert a.kubeconfig_path != b.kubeconfig_path

    async def test_incomplete_stored_kubeconfig_is_refetched(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = CachedClusterConfigResolver(
            remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)
        )
        resolver.kubeconfig_path("tenant-42").write_text("clusters: []\n")

        cluster = await resolver.resolve("tenant-42")

        assert len(calls) == 1
        assert cluster.server == "https://k8s.example:6443"

    async def test_no_temporary_files_are_left_behind(self, tmp_path: Path) -> None:
        resolver = CachedClusterConfigResolver(
            remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE))
        )

        await resolver.resolve("tenant-42")

        assert [p.name for p in tmp_path.iterdir()] == ["tenant-42.kubeconfig"]

    async def test_forget_removes_stored_kubeconfig(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []
        resolver = CachedClusterConfigResolver(
            remote(tmp_path, lambda r: httpx.Response(200, json=BUNDLE), calls)
        )
        cluster = await resolver.resolve("tenant-42")

        resolver.forget("tenant-42")
        resolver.forget("tenant-42")

        assert not cluster.kubeconfig_path.exists()
        await resolver.resolve("tenant-42")
        assert len(calls) == 2


class TestHelpers:
    def test_kubeconfig_path_is_sanitized(self, tmp_path: Path) -> None:
        resolver = RemoteClusterConfigResolver("http://x", tmp_path)

        assert resolver.kubeconfig_path("../etc/passwd").parent == tmp_path

    def test_kubeconfig_path_requires_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            RemoteClusterConfigResolver("http://x", tmp_path).kubeconfig_path(" ")

    def test_extract_credentials(self) -> None:
        assert extract_credentials(json.loads(json.dumps(BUNDLE))) == (
            "https://k8s.example:6443",
            "s3cr3t",
        )

    def test_complete_kubeconfig_is_kept(self) -> None:
        document = {**BUNDLE, "contexts": [{"name": "x"}], "current-context": "x"}

        assert render_kubeconfig(document, "tenant-42") is document

    @pytest.mark.parametrize(
        ("strategy", "expected"),
        [("remote", RemoteClusterConfigResolver), ("cached", CachedClusterConfigResolver)],
    )
    def test_factory_picks_strategy(self, tmp_path: Path, strategy: str, expected: type) -> None:
        settings = ClusterConfigSettings(strategy=strategy, cache_dir=tmp_path)

        assert isinstance(get_cluster_config_resolver(settings), expected)
