"""Builds command."""

import click
from rich.console import Console
from rich.table import Table

from ...app import create_services
from ..app import load_config

console = Console()


@click.command()
@click.option("--author", default=None, help="Author name contains")
@click.option("--name", default=None, help="Build name contains")
@click.option("--theme", default=None, help="Theme name contains")
@click.option("--color", default=None, help="Color name contains")
@click.pass_context
def builds(ctx: click.Context, author: str, name: str, theme: str, color: str) -> None:
    """List builds in the catalog, optionally filtered.

    Examples:

        buildlog -s builds.yaml builds

        buildlog -s builds.yaml builds --theme medieval --color gray
    """
    services = create_services(load_config(ctx))
    found = services.catalog.filter_builds(author=author, name=name, theme=theme, color=color)

    table = Table(title=f"Builds ({len(found)})")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Authors")
    table.add_column("Themes")
    table.add_column("Colors")
    for b in found:
        table.add_row(
            str(b.id),
            b.name,
            ", ".join(r.name for r in b.authors),
            ", ".join(r.name for r in b.themes),
            ", ".join(r.name for r in b.colors),
        )
    console.print(table)
