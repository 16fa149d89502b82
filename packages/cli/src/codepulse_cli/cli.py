"""CLI entry point for codepulse.

Commands:
  serve   run the review/fix HTTP API
  review  review a diff once and print the issues
  fix     generate a dependency-aware fix for a local file
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from codepulse_cli.commands.fix import fix_cmd
from codepulse_cli.commands.review import review_cmd
from codepulse_cli.commands.serve import serve_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("codepulse"),
    prog_name="codepulse",
)
@click.option(
    "--config",
    "config_path",
    default=".codepulse.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODEPULSE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review with a content-addressed cache and dependency-aware fixes."""
    from codepulse_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


main.add_command(serve_cmd)
main.add_command(review_cmd)
main.add_command(fix_cmd)
