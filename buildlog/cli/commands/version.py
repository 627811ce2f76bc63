"""Version command."""

import click
from rich.console import Console

from ... import __version__

console = Console()


@click.command()
def version() -> None:
    """Show Build Log version."""
    console.print(f"[bold]Build Log[/bold] v{__version__}")
