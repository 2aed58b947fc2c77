"""CLI entry point for the rpcval tool."""

import asyncio
import dataclasses
import logging
import sys

import click

from rpcval.config import ConfigError, load_config
from rpcval.output import render
from rpcval.pipeline import run_pipeline

logger = logging.getLogger(__name__)

FORMATS = ("table", "json")


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to YAML config file (default: ~/.rpcval/config.yaml).",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Where to write the validated host list (overrides the config).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default="table",
    type=click.Choice(FORMATS, case_sensitive=False),
    show_default=True,
    help="Summary report format.",
)
def main(config_path: str | None, output_path: str | None, output_format: str) -> None:
    """Discover Solana RPC endpoints via gossip and keep the ones that answer."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_path is not None:
        cfg = dataclasses.replace(cfg, output_path=output_path)

    logger.debug("Config loaded: %s", cfg)

    try:
        report = asyncio.run(run_pipeline(cfg))
    except Exception:
        logger.exception("RPC validation failed")
        sys.exit(1)

    render(report, output_format.lower())
