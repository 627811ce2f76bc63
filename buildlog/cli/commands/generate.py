"""Generate command."""

import click
from rich.console import Console
from rich.table import Table

from ...app import create_services
from ...errors import BuildLogError
from ...types import TaskState
from ...utils.logging import setup_logging
from ..app import load_config

console = Console()


@click.command()
@click.argument("identifiers", nargs=-1, required=True)
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Seconds to wait per task")
@click.pass_context
def generate(ctx: click.Context, identifiers: tuple, timeout: float) -> None:
    """Generate logs for one or more builds (by ID or exact name).

    All tasks are submitted first, then awaited, so they run concurrently.

    Examples:

        buildlog -s builds.yaml generate Castle

        buildlog -s builds.yaml generate 1 2 Tower
    """
    config = load_config(ctx)
    if ctx.obj.get("verbose"):
        config.log_level = "DEBUG"
        setup_logging(config)

    table = Table(title="Build Logs")
    table.add_column("Build", style="cyan")
    table.add_column("Task")
    table.add_column("Status")
    table.add_column("File / Error")

    failures = 0
    with create_services(config) as services:
        submitted = []
        for ident in identifiers:
            try:
                submitted.append((ident, services.service.initiate(ident)))
            except BuildLogError as exc:
                failures += 1
                table.add_row(ident, "-", "[red]REJECTED[/red]", str(exc))

        for ident, task_id in submitted:
            try:
                status = services.service.wait_for(task_id, timeout=timeout)
            except BuildLogError as exc:
                failures += 1
                table.add_row(ident, task_id, "[red]FAILED[/red]", str(exc))
                continue
            if status.status is TaskState.COMPLETED:
                table.add_row(ident, task_id, "[green]COMPLETED[/green]", status.file_path or "")
            elif status.status is TaskState.FAILED:
                failures += 1
                table.add_row(ident, task_id, "[red]FAILED[/red]", status.error_message or "")
            else:
                failures += 1
                table.add_row(ident, task_id, "[yellow]PENDING[/yellow]", f"still running after {timeout}s")

    console.print(table)
    if failures:
        ctx.exit(1)
