"""Readiness evaluation for the workloads of a release.

A release the package manager reports as deployed is not necessarily
serving: load balancers may still be waiting for an address, pods may be
pulling images, volumes may be unbound. This module verifies actual workload
health by inspecting five resource kinds of the release namespace, strictly
in this order:

    1. Service                - load balancers have an ingress address
    2. Pod                    - every pod is Running
    3. PersistentVolumeClaim  - every claim is Bound
    4. Deployment             - ready replicas reach the declared count
    5. StatefulSet            - ready replicas are reported and reach the count

Evaluation stops at the first kind that is not ready and reports that
kind's message only. Kinds are queried one after another, never
concurrently.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from loguru import logger

from helm_tenancy.app.core.models import ReadinessVerdict, VerdictStatus

if TYPE_CHECKING:
    from helm_tenancy.infra.k8s import KubernetesController, Manifest

PROVISIONED_MESSAGE = "successfully provisioned"
LOAD_BALANCER_PENDING_MESSAGE = "service deployment load balancer in progress"

_READY = ReadinessVerdict(status=VerdictStatus.SUCCESS)


def _in_progress(message: str) -> ReadinessVerdict:
    return ReadinessVerdict(status=VerdictStatus.IN_PROGRESS, message=message)


def _name(manifest: Manifest) -> str:
    return (manifest.get("metadata") or {}).get("name", "")


def _section(manifest: Manifest, key: str) -> dict[str, Any]:
    return manifest.get(key) or {}


def _declared_replicas(manifest: Manifest) -> int:
    # Kubernetes defaults an omitted replica count to 1
    replicas = _section(manifest, "spec").get("replicas")
    return 1 if replicas is None else int(replicas)


class ReadinessEvaluator:
    """Aggregates per-kind readiness of a namespace into one verdict.

    Example:
        ```python
        evaluator = ReadinessEvaluator(Kr8sController(cluster.kubeconfig_path))
        verdict = await evaluator.evaluate("tenant-42")
        ```
    """

    def __init__(self, controller: KubernetesController) -> None:
        """Initialize the evaluator.

        Args:
            controller: Kubernetes controller bound to the release's cluster
        """
        self._controller = controller

    # =========================================================================
    # Public API
    # =========================================================================

    async def evaluate(self, namespace: str) -> ReadinessVerdict:
        """Run every check in order, stopping at the first non-success.

        Raises:
            ClusterQueryError: If a Kubernetes query fails
        """
        logger.info(f"Checking resource readiness for namespace {namespace}")

        checks: tuple[Callable[[str], Awaitable[ReadinessVerdict]], ...] = (
            self.check_services,
            self.check_pods,
            self.check_volume_claims,
            self.check_deployments,
            self.check_statefulsets,
        )
        for check in checks:
            verdict = await check(namespace)
            if not verdict.is_success:
                logger.info(
                    f"Namespace {namespace} not ready ({check.__name__}): {verdict.message}"
                )
                return verdict

        return ReadinessVerdict(status=VerdictStatus.SUCCESS, message=PROVISIONED_MESSAGE)

    # =========================================================================
    # Individual checks
    # =========================================================================

    async def check_services(self, namespace: str) -> ReadinessVerdict:
        """Every LoadBalancer service must have an ingress address."""
        for service in await self._controller.list_services(namespace):
            if _section(service, "spec").get("type") != "LoadBalancer":
                continue
            load_balancer = _section(service, "status").get("loadBalancer") or {}
            if not load_balancer.get("ingress"):
                return _in_progress(LOAD_BALANCER_PENDING_MESSAGE)
        return _READY

    async def check_pods(self, namespace: str) -> ReadinessVerdict:
        """Every pod must be Running.

        The message gathers the condition messages of all pods that are not
        running, one per line.
        """
        messages: list[str] = []
        pending = False
        for pod in await self._controller.list_pods(namespace):
            status = _section(pod, "status")
            if status.get("phase") == "Running":
                continue
            pending = True
            pod_messages = [
                condition["message"]
                for condition in status.get("conditions") or []
                if condition.get("message")
            ]
            messages.extend(pod_messages or [f"Pod is not ready: {_name(pod)}"])

        if pending:
            return _in_progress("\n".join(messages))
        return _READY

    async def check_volume_claims(self, namespace: str) -> ReadinessVerdict:
        """Every PersistentVolumeClaim must be Bound."""
        for claim in await self._controller.list_persistent_volume_claims(namespace):
            if _section(claim, "status").get("phase") != "Bound":
                return _in_progress(f"PersistentVolumeClaim is not ready: {_name(claim)}")
        return _READY

    async def check_deployments(self, namespace: str) -> ReadinessVerdict:
        """Every Deployment must have its declared number of ready replicas."""
        for deployment in await self._controller.list_deployments(namespace):
            ready = _section(deployment, "status").get("readyReplicas") or 0
            if ready < _declared_replicas(deployment):
                return _in_progress(f"Deployment is not ready: {_name(deployment)}")
        return _READY

    async def check_statefulsets(self, namespace: str) -> ReadinessVerdict:
        """Every StatefulSet must report ready replicas reaching its declared count."""
        for statefulset in await self._controller.list_statefulsets(namespace):
            ready = _section(statefulset, "status").get("readyReplicas")
            if ready is None or ready < _declared_replicas(statefulset):
                return _in_progress(f"Statefulset is not ready: {_name(statefulset)}")
        return _READY
