"""Output format utilities for flowversion CLI commands.

This module provides a unified way to handle output formats across commands.
"""

from enum import Enum
from typing import Callable
import functools
import shutil
import sys
import click
from rich.console import Console
from rich.markdown import Markdown


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    ENV = "env"


def format_option(default: OutputFormat = OutputFormat.TEXT) -> Callable:
    """Create a Click option decorator for output format selection.

    Provides:
    - --format with choices: text, markdown, json, env
    - --md / --markdown aliases for markdown format
    - --json alias for json format

    The decorated command receives a single ``format`` argument; an alias
    flag takes precedence over --format.

    Args:
        default: The default output format.

    Returns:
        A decorator function that adds format options to a Click command.

    Example:
        @click.command()
        @format_option()
        def my_command(format: str):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, format=None, markdown_flag=False, json_flag=False, **kwargs):
            if json_flag:
                format = OutputFormat.JSON.value
            elif markdown_flag:
                format = OutputFormat.MARKDOWN.value
            return func(*args, format=format or default.value, **kwargs)

        wrapper = click.option(
            "--format",
            "format",
            type=click.Choice([f.value for f in OutputFormat]),
            default=None,
            help=f"Output format (default: {default.value}).",
        )(wrapper)

        wrapper = click.option(
            "--md",
            "--markdown",
            "markdown_flag",
            is_flag=True,
            help="Output in markdown format (alias for --format markdown).",
        )(wrapper)

        wrapper = click.option(
            "--json",
            "json_flag",
            is_flag=True,
            help="Output in JSON format (alias for --format json).",
        )(wrapper)

        return wrapper

    return decorator


def echo_output(text: str, format: str) -> None:
    """Print command output; markdown is rendered when writing to a terminal."""
    if format == OutputFormat.MARKDOWN.value and sys.stdout.isatty():
        console = Console(width=shutil.get_terminal_size((80, 20)).columns)
        console.print(Markdown(text, justify="left"))
        return
    click.echo(text, nl=False)
