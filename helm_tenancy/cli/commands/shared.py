"""Shared utilities for CLI commands.

Console output, confirmation prompts, error handling and the bridge from
synchronous Typer commands to the async release service.
"""

from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel

from helm_tenancy.app.core.errors import ReleaseError

# Shared console instance for consistent output
console = Console()


def run_sync[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a release service coroutine from a synchronous command."""
    import asyncio

    return asyncio.run(coro)


def parse_pairs(pairs: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into an ordered mapping.

    Raises:
        typer.BadParameter: If an entry has no ``=`` or an empty key
    """
    parsed: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint=option)
        parsed[key.strip()] = value
    return parsed


def confirm_action(action: str, details: str | None = None, force: bool = False) -> bool:
    """Prompt the user to confirm a destructive action.

    Returns:
        True if the user confirmed (or ``force`` is set), False otherwise
    """
    if force:
        return True

    message = f"[bold red]⚠️  {action}[/bold red]"
    if details:
        message += f"\n\n{details}"
    console.print(Panel(message, title="Confirmation Required", border_style="red"))

    try:
        response = console.input("\n[bold]Are you sure you want to proceed?[/bold] \\[y/N]: ")
        return response.strip().lower() in ("y", "yes")
    except (KeyboardInterrupt, EOFError):
        console.print("\n[dim]Cancelled.[/dim]")
        return False


def handle_error(message: str, details: str | None = None, exit_code: int = 1) -> None:
    """Print an error and exit.

    Args:
        message: Error message to display
        details: Optional additional details
        exit_code: Exit code to use
    """
    console.print(f"\n[bold red]❌ {message}[/bold red]\n")
    if details:
        console.print(Panel(details, title="Details", border_style="red"))
    raise typer.Exit(exit_code)


def print_header(title: str, style: str = "blue") -> None:
    console.print(
        Panel.fit(
            f"[bold {style}]{title}[/bold {style}]",
            border_style=style,
        )
    )


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator translating release failures into a red panel and exit code 1."""

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except ReleaseError as e:
            handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper
