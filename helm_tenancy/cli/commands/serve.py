"""HTTP server command."""

from typing import Annotated

import typer

from helm_tenancy.app.runtime.context import get_config

from .shared import console, print_header


def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (defaults to config app.host)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Bind port (defaults to config app.port)"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", help="Restart on code changes (development only)"),
    ] = False,
) -> None:
    """Serve the release API.

    Examples:
        helm-tenancy serve
        helm-tenancy serve --port 8080 --reload
    """
    import uvicorn

    config = get_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    print_header("helm-tenancy")
    console.print(f"[cyan]Listening on {bind_host}:{bind_port}[/cyan]")

    uvicorn.run(
        "helm_tenancy.app.api.http.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=config.logging.level.lower(),
    )
