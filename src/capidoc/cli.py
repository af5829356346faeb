"""capidoc CLI entry point."""

from __future__ import annotations

import logging
import sys

import click

from capidoc import __version__
from capidoc.config import ConfigError, load_config, write_template
from capidoc.engine.pipeline import generate_docs
from capidoc.schema import ProjectManifest, Snapshot, export_json_schema

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_WARNINGS = 1  # Docs generated, audit found problems in the current revision
EXIT_ERROR = 2  # Something went wrong

_ARTIFACTS = {"manifest": ProjectManifest, "snapshot": Snapshot}


def _configure_logging(verbose: bool) -> None:
    """Send capidoc progress to stderr; DEBUG when *verbose*."""
    root = logging.getLogger("capidoc")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)


@click.group()
@click.version_option(__version__, "--version", "-v")
def main() -> None:
    """capidoc: versioned API documentation data for C header trees."""


@main.command()
@click.argument("config_file", type=click.Path(dir_okay=False))
@click.option("--verbose", is_flag=True, default=False, help="Log per-file detail.")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit with code 1 when the audit of the current revision finds problems.",
)
def doc(config_file: str, verbose: bool, strict: bool) -> None:
    """Generate documentation data for every tagged revision and HEAD.

    CONFIG_FILE: the project's JSON config; its directory is the project root.

    \b
    Exit codes:
      0: Docs generated
      1: Docs generated, audit findings (with --strict)
      2: Error
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        state = generate_docs(config)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)
    except Exception as exc:
        logger.debug("CLI error", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)

    if strict and state.audit is not None and not state.audit.clean:
        sys.exit(EXIT_WARNINGS)
    sys.exit(EXIT_SUCCESS)


@main.command()
@click.argument("file", type=click.Path(dir_okay=False), default="capidoc.json")
def gen(file: str) -> None:
    """Write a starter config file to FILE."""
    click.echo(f"Writing to {file}")
    try:
        write_template(file)
    except OSError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)


@main.command()
@click.option(
    "--artifact",
    type=click.Choice(sorted(_ARTIFACTS)),
    default="manifest",
    help="Which artifact's JSON schema to print (default: manifest).",
)
def schema(artifact: str) -> None:
    """Print the JSON schema of a generated artifact."""
    click.echo(export_json_schema(_ARTIFACTS[artifact]))
