"""Release lifecycle commands.

These drive the same release service as the HTTP API, using the cluster
credential service and Helm binary named in config.yaml.
"""

from typing import Annotated

import typer
from rich.table import Table

from helm_tenancy.app.api.http.deps import build_release_service
from helm_tenancy.app.core.models import InstallResult, Release, VerdictStatus
from helm_tenancy.app.core.services.release_service import ReleaseLifecycleService
from helm_tenancy.app.runtime.context import get_config
from helm_tenancy.app.runtime.log_config import configure_logging

from .shared import (
    confirm_action,
    console,
    parse_pairs,
    print_header,
    run_sync,
    with_error_handling,
)

release_app = typer.Typer(
    help="Install, upgrade, remove and inspect tenant releases",
    no_args_is_help=True,
)

ReleaseOption = Annotated[
    str,
    typer.Option("--release", "-r", help="Release name (also the namespace)"),
]
ChartOption = Annotated[
    str,
    typer.Option("--chart", "-c", help="Chart reference, e.g. acme/app"),
]
RepoOption = Annotated[
    str | None,
    typer.Option("--repo", help="URL of the private chart repository"),
]
SetOption = Annotated[
    list[str] | None,
    typer.Option("--set", help="Value override key=value (repeatable)"),
]
FlagOption = Annotated[
    list[str] | None,
    typer.Option("--flag", help="Extra Helm flag key=value (repeatable)"),
]
ReuseOption = Annotated[
    bool,
    typer.Option("--reuse-values", help="Reuse the values of the previous release"),
]


def _service() -> ReleaseLifecycleService:
    config = get_config()
    configure_logging(config.logging.level)
    return build_release_service(config)


def _release(
    release: str,
    chart: str,
    repo: str | None,
    values: list[str] | None,
    flags: list[str] | None,
    reuse_values: bool,
) -> Release:
    return Release(
        release_name=release,
        chart_name=chart,
        private_charts_repo=repo,
        values=parse_pairs(values, "--set"),
        flags=parse_pairs(flags, "--flag"),
        reuse_value="true" if reuse_values else None,
    )


def _print_result(verb: str, result: InstallResult) -> None:
    console.print(f"[green]✅ Release {result.release_name} {verb}[/green]")
    console.print(f"   Status:  {result.status}")
    if result.service_name:
        console.print(f"   Service: {result.service_name}")
    if result.message:
        console.print(f"   [dim]{result.message}[/dim]")


@release_app.command()
@with_error_handling
def install(
    release: ReleaseOption,
    chart: ChartOption,
    repo: RepoOption = None,
    values: SetOption = None,
    flags: FlagOption = None,
    reuse_values: ReuseOption = False,
) -> None:
    """Install a chart as a new release.

    Examples:
        helm-tenancy release install -r tenant-42 -c acme/app
        helm-tenancy release install -r tenant-42 -c acme/app --set replicas=3
    """
    print_header(f"Installing {chart} as {release}")
    spec = _release(release, chart, repo, values, flags, reuse_values)
    result = run_sync(_service().install(spec))
    _print_result("installed", result)


@release_app.command()
@with_error_handling
def upgrade(
    release: ReleaseOption,
    chart: ChartOption,
    repo: RepoOption = None,
    values: SetOption = None,
    flags: FlagOption = None,
    reuse_values: ReuseOption = False,
) -> None:
    """Upgrade an existing release."""
    print_header(f"Upgrading {release} to {chart}")
    spec = _release(release, chart, repo, values, flags, reuse_values)
    result = run_sync(_service().upgrade(spec))
    _print_result("upgraded", result)


@release_app.command()
@with_error_handling
def uninstall(
    release: ReleaseOption,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Remove a release and delete its namespace."""
    if not confirm_action(
        f"Uninstall release {release}",
        details=f"The namespace {release} and everything in it will be deleted.",
        force=yes,
    ):
        raise typer.Exit(1)

    run_sync(_service().uninstall(release))
    console.print(f"[green]✅ Release {release} removed[/green]")


@release_app.command()
@with_error_handling
def status(release: ReleaseOption) -> None:
    """Show whether a release is fully provisioned."""
    verdict = run_sync(_service().release_status(release))

    color = {
        VerdictStatus.SUCCESS: "green",
        VerdictStatus.IN_PROGRESS: "yellow",
        VerdictStatus.FAILED: "red",
    }[verdict.status]
    console.print(f"[bold {color}]{verdict.status.value}[/bold {color}] {verdict.message}")
    if verdict.status == VerdictStatus.FAILED:
        raise typer.Exit(1)


@release_app.command("connection-details")
@with_error_handling
def connection_details(release: ReleaseOption) -> None:
    """List the Opaque secrets and services of a release."""
    bundle = run_sync(_service().release_connection_details(release))

    services = Table(title=f"Services in {release}")
    services.add_column("Name", style="cyan")
    services.add_column("Type")
    services.add_column("Cluster IP")
    services.add_column("Ports")
    services.add_column("External")
    for entry in bundle.services:
        ports = ", ".join(
            f"{p.get('port')}/{p.get('protocol', 'TCP')}" for p in entry.spec.get("ports") or []
        )
        ingress = (entry.status.get("loadBalancer") or {}).get("ingress") or []
        external = ", ".join(i.get("ip") or i.get("hostname") or "" for i in ingress)
        services.add_row(
            entry.name,
            entry.spec.get("type", ""),
            entry.spec.get("clusterIP", ""),
            ports,
            external or "-",
        )
    console.print(services)

    secrets = Table(title=f"Secrets in {release}")
    secrets.add_column("Name", style="cyan")
    secrets.add_column("Keys")
    for secret in bundle.secrets:
        secrets.add_row(secret.name, ", ".join(sorted(secret.data)))
    console.print(secrets)
