"""Helm command construction.

Commands are described as structured ``HelmCommand`` values (verb words,
positional arguments and ordered options) and only rendered into an argument
vector at execution time. Builders are pure functions: given the same
release and cluster access they always produce the same command, which keeps
the command shape testable without invoking the binary.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from helm_tenancy.app.core.errors import ValidationError
from helm_tenancy.app.core.models import ClusterConfig, Release

# Matches one and only one of 'true', '1' or 'on', regardless of
# capitalization and surrounding white-space.
_TRUTHY_PATTERN = re.compile(r"^\s*(true|1|on)\s*$", re.IGNORECASE)

_SECRET_OPTIONS = frozenset({"--kube-token"})


class HelmIntent(str, Enum):
    """Lifecycle intents that can be rendered into a command."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    STATUS = "status"
    UNINSTALL = "uninstall"


@dataclass(frozen=True)
class HelmCommand:
    """A structured Helm invocation.

    Attributes:
        verb: Sub-command words, e.g. ``("repo", "add")``
        positionals: Positional arguments following the verb
        options: Ordered ``(flag, value)`` pairs; ``None`` marks a bare flag
    """

    verb: tuple[str, ...]
    positionals: tuple[str, ...] = ()
    options: tuple[tuple[str, str | None], ...] = ()

    def with_options(self, options: Iterable[tuple[str, str | None]]) -> HelmCommand:
        """Return a copy with ``options`` appended in order."""
        return replace(self, options=self.options + tuple(options))

    def render(self, binary: str = "helm") -> list[str]:
        """Render the command into an argument vector."""
        argv = [binary, *self.verb, *self.positionals]
        for flag, value in self.options:
            argv.append(flag)
            if value is not None:
                argv.append(value)
        return argv

    def redacted(self, binary: str = "helm") -> str:
        """Render the command for logging with credentials masked."""
        parts = [binary, *self.verb, *self.positionals]
        for flag, value in self.options:
            parts.append(flag)
            if value is not None:
                parts.append("***" if flag in _SECRET_OPTIONS else value)
        return " ".join(parts)

    def option_values(self, flag: str) -> list[str | None]:
        """Return the values of every occurrence of ``flag``."""
        return [value for name, value in self.options if name == flag]

    def has_option(self, flag: str) -> bool:
        return any(name == flag for name, _ in self.options)


# =============================================================================
# Value helpers
# =============================================================================


def is_truthy(value: Any) -> bool:
    """Interpret a loosely typed flag value.

    ``None`` is false. Anything else is converted to text and must match
    ``true``, ``1`` or ``on`` (case-insensitive, surrounding white-space
    ignored).
    """
    if value is None:
        return False
    if isinstance(value, bool):
        value = "true" if value else "false"
    return bool(_TRUTHY_PATTERN.match(str(value)))


def format_scalar(value: Any) -> str:
    """Format a value override the way the chart expects to read it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def value_overrides(values: Mapping[str, Any] | None) -> list[tuple[str, str | None]]:
    """Render value overrides as ``--set key=value``, one per key, in order."""
    return [("--set", f"{key}={format_scalar(value)}") for key, value in (values or {}).items()]


def extra_flags(flags: Mapping[str, Any] | None) -> list[tuple[str, str | None]]:
    """Render extra CLI flags as ``--key value``, one per key, in order.

    ``True``, ``None`` and empty values produce a bare ``--key``, ``False``
    a single ``--key=false`` token.
    """
    rendered: list[tuple[str, str | None]] = []
    for key, value in (flags or {}).items():
        flag = key if key.startswith("-") else f"--{key}"
        if value is None or value is True or value == "":
            rendered.append((flag, None))
        elif value is False:
            rendered.append((f"{flag}=false", None))
        else:
            rendered.append((flag, format_scalar(value)))
    return rendered


def credential_options(cluster: ClusterConfig) -> list[tuple[str, str | None]]:
    """Render the options that address the release's cluster."""
    if cluster.use_kubeconfig_flag:
        return [("--kubeconfig", str(cluster.kubeconfig_path))]
    return [
        ("--kube-apiserver", cluster.server),
        ("--kube-token", cluster.token),
    ]


def require(value: str | None, name: str) -> str:
    """Ensure an identifier is present and non-empty."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return str(value)


# =============================================================================
# Lifecycle commands
# =============================================================================


def build_install(release: Release, cluster: ClusterConfig) -> HelmCommand:
    """Build ``helm install`` for a release into its own namespace."""
    release_name = require(release.release_name, "releaseName")
    chart_name = require(release.chart_name, "chartName")
    command = HelmCommand(
        verb=("install",),
        positionals=(release_name, chart_name),
        options=(
            ("--namespace", release_name),
            ("--create-namespace", None),
            ("--output", "json"),
        ),
    )
    return _with_overrides(command.with_options(credential_options(cluster)), release)


def build_upgrade(release: Release, cluster: ClusterConfig) -> HelmCommand:
    """Build ``helm upgrade`` for an existing release."""
    release_name = require(release.release_name, "releaseName")
    chart_name = require(release.chart_name, "chartName")
    command = HelmCommand(
        verb=("upgrade",),
        positionals=(release_name, chart_name),
        options=(
            ("--namespace", release_name),
            ("--output", "json"),
        ),
    )
    return _with_overrides(command.with_options(credential_options(cluster)), release)


def build_status(release_name: str | None, cluster: ClusterConfig) -> HelmCommand:
    """Build ``helm status`` with JSON output."""
    name = require(release_name, "releaseName")
    return HelmCommand(
        verb=("status",),
        positionals=(name,),
        options=(("--namespace", name), ("--output", "json")),
    ).with_options(credential_options(cluster))


def build_uninstall(release_name: str | None, cluster: ClusterConfig) -> HelmCommand:
    """Build ``helm uninstall`` for a release."""
    name = require(release_name, "releaseName")
    return HelmCommand(
        verb=("uninstall",),
        positionals=(name,),
        options=(("--namespace", name),),
    ).with_options(credential_options(cluster))


def build_command(
    intent: HelmIntent, release: Release, cluster: ClusterConfig
) -> HelmCommand:
    """Render a lifecycle intent for a release."""
    if intent == HelmIntent.INSTALL:
        return build_install(release, cluster)
    if intent == HelmIntent.UPGRADE:
        return build_upgrade(release, cluster)
    if intent == HelmIntent.STATUS:
        return build_status(release.release_name, cluster)
    return build_uninstall(release.release_name, cluster)


# =============================================================================
# Repository and client commands
# =============================================================================


def chart_repository_root(chart_name: str) -> str:
    """Return the repository alias of a chart reference (``acme/app`` -> ``acme``)."""
    return chart_name.split("/", 1)[0]


def build_repo_add(chart_name: str, repository_url: str) -> HelmCommand:
    """Build ``helm repo add`` registering the chart's repository."""
    return HelmCommand(
        verb=("repo", "add"),
        positionals=(chart_repository_root(chart_name), repository_url),
    )


def build_repo_update() -> HelmCommand:
    """Build ``helm repo update``."""
    return HelmCommand(verb=("repo", "update"))


def build_version() -> HelmCommand:
    """Build ``helm version --short``."""
    return HelmCommand(verb=("version",), options=(("--short", None),))


def _with_overrides(command: HelmCommand, release: Release) -> HelmCommand:
    options: list[tuple[str, str | None]] = []
    if is_truthy(release.reuse_value):
        options.append(("--reuse-values", None))
    options.extend(extra_flags(release.flags))
    options.extend(value_overrides(release.values))
    return command.with_options(options)
