"""Build Log CLI application."""

import os
from pathlib import Path

import click
from rich.console import Console

from .. import __version__
from ..config import BuildLogConfig

console = Console()


def find_config() -> str | None:
    """
    Find config file using standard priority order:

    1. BUILDLOG_CONFIG environment variable
    2. buildlog.yaml in current directory

    Returns None if no config found.
    """
    env_config = os.environ.get("BUILDLOG_CONFIG")
    if env_config:
        path = Path(env_config)
        if path.exists():
            return str(path)

    project_config = Path.cwd() / "buildlog.yaml"
    if project_config.exists():
        return str(project_config)

    return None


def load_config(ctx: click.Context) -> BuildLogConfig:
    """Config for a subcommand, with --seed/--log-dir overrides applied."""
    path = ctx.obj.get("config")
    config = BuildLogConfig.load(path) if path else BuildLogConfig()
    if ctx.obj.get("seed"):
        config.seed_file = ctx.obj["seed"]
    if ctx.obj.get("log_dir"):
        config.log_dir = ctx.obj["log_dir"]
    return config


@click.group()
@click.version_option(version=__version__, prog_name="buildlog")
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
@click.option("--seed", "-s", type=click.Path(exists=True, dir_okay=False), help="YAML file with builds")
@click.option("--log-dir", type=click.Path(file_okay=False), help="Directory for generated logs")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, config: str, seed: str, log_dir: str, verbose: bool) -> None:
    """Build Log — generate text logs for builds.

    Examples:

        buildlog -s builds.yaml builds --theme medieval

        buildlog -s builds.yaml generate Castle
    """
    ctx.ensure_object(dict)

    if config is None:
        config = find_config()
        if config and verbose:
            console.print(f"[dim]Using config: {config}[/dim]")

    ctx.obj["config"] = config
    ctx.obj["seed"] = seed
    ctx.obj["log_dir"] = log_dir
    ctx.obj["verbose"] = verbose


# Import and register commands
from .commands import builds, generate, version

cli.add_command(builds.builds)
cli.add_command(generate.generate)
cli.add_command(version.version)
