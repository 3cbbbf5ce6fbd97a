"""Click command group exposing package metadata and the job-log demo.

Contents
--------
* :func:`cli` – root group; prints the metadata banner without a subcommand.
* ``info`` – print the metadata banner.
* ``demo`` – render a sample job log to the terminal.
"""

from __future__ import annotations

import os

import click
from rich.console import Console

from . import __init__conf__
from . import config as config_module
from .runtime import joblog_demo, summary_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_TRUTHY = {"1", "true", "yes", "on"}


def _env_wants_dotenv() -> bool:
    value = os.getenv(config_module.DOTENV_ENV_VAR)
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(__init__conf__.version, "--version", "-V", prog_name=__init__conf__.shell_command)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before running (default: ${config_module.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Indentation-aware Markdown job logs."""

    wants_dotenv = _env_wants_dotenv() if use_dotenv is None else use_dotenv
    if wants_dotenv:
        config_module.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("demo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--title", default="Demo job", show_default=True, help="Job title shown in the header.")
@click.option("--indent-width", type=click.IntRange(min=0), default=4, show_default=True, help="Spaces per indentation level.")
@click.option("--no-stream", is_flag=True, help="Do not write to the terminal while logging.")
@click.option("--print-buffer", is_flag=True, help="Print the buffered log once the job finishes.")
def cli_demo(title: str, indent_width: int, no_stream: bool, print_buffer: bool) -> None:
    """Write a sample job log."""

    console = Console(highlight=False, soft_wrap=True)
    text = joblog_demo(title=title or None, indent_width=indent_width, console=console, disable_stream=no_stream)
    if print_buffer:
        click.echo(text, nl=False)


__all__ = ["cli"]
