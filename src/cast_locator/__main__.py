"""CLI entry point for Cast Locator."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from .config import Config
from .discovery.locator import DeviceLocator
from .exceptions import TransportError
from .logging_setup import configure_logging


@click.group()
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="CAST_LOCATOR_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the logging level (e.g., DEBUG, INFO).",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Override logging format.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str], log_format: Optional[str]) -> None:
    """Cast Locator - finds DIAL cast receivers on the local network."""
    try:
        if config_file:
            cfg = Config.from_file(Path(config_file))
        else:
            cfg = Config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if log_level:
        cfg.logging.level = log_level.upper()
    if log_format:
        cfg.logging.format = log_format.lower()

    configure_logging(cfg.logging)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command()
@click.option(
    "--timeout", "-t",
    type=float,
    default=None,
    help="Probe window in seconds. Zero or negative means 2 seconds. Defaults to the configured value."
)
@click.option("--json", "as_json", is_flag=True, help="Print the devices as a JSON array.")
@click.pass_context
def discover(ctx: click.Context, timeout: Optional[float], as_json: bool) -> None:
    """Probes the network and lists the DIAL receivers that answer."""
    config: Config = ctx.obj["config"]
    locator = DeviceLocator(app_config=config)

    try:
        devices = asyncio.run(locator.locate_devices(timeout))
    except TransportError as e:
        click.echo(f"Discovery failed: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nDiscovery interrupted by user.", err=True)
        sys.exit(130)

    if as_json:
        click.echo(json.dumps([device.model_dump() for device in devices], indent=2))
    elif not devices:
        click.echo("No devices found.")
    else:
        for device in devices:
            click.echo(f"{device.friendly_name}\t{device.device_uri}")


@cli.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    click.echo(f"Cast Locator v{__version__}")


@cli.command()
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config = ctx.obj["config"]
    click.echo(json.dumps(config.model_dump(), indent=2))


if __name__ == "__main__":
    cli()
