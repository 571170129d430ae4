"""Main CLI application module.

Command Groups:
- serve: Run the HTTP API with uvicorn
- release: Install, upgrade, uninstall and inspect releases directly
"""

import typer

from .commands import release_app, serve

# Create the main CLI application
app = typer.Typer(
    help="🛠️  helm-tenancy - per-tenant Helm releases over HTTP",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(serve)
app.add_typer(release_app, name="release")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
