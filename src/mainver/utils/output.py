"""Output format selection shared by the mainver CLI commands."""

from enum import Enum
from functools import wraps
from typing import Callable
import io
import shutil
import sys

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.theme import Theme


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


def format_option(default: OutputFormat = OutputFormat.TEXT) -> Callable:
    """Click decorator adding output format selection to a command.

    Adds --format (text, markdown, json) plus the --md/--markdown and --json
    shortcuts. The command receives the chosen format as `format`; a
    shortcut takes precedence over --format.

    Example:
        @click.command()
        @format_option()
        def calculate(format: str):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, format: str, as_markdown: bool, as_json: bool, **kwargs):
            if as_json:
                format = OutputFormat.JSON.value
            elif as_markdown:
                format = OutputFormat.MARKDOWN.value
            return func(*args, format=format, **kwargs)

        wrapper = click.option(
            "--json",
            "as_json",
            is_flag=True,
            default=False,
            help="Output in JSON format (alias for --format json).",
        )(wrapper)
        wrapper = click.option(
            "--md",
            "--markdown",
            "as_markdown",
            is_flag=True,
            default=False,
            help="Output in markdown format (alias for --format markdown).",
        )(wrapper)
        wrapper = click.option(
            "--format",
            "format",
            type=click.Choice([f.value for f in OutputFormat]),
            default=default.value,
            help=f"Output format (default: {default.value}).",
        )(wrapper)
        return wrapper

    return decorator


# Terminal styles for markdown output, close to how GitHub renders it.
MARKDOWN_STYLES = Theme(
    {
        "markdown.h1": "bold",
        "markdown.h2": "bold underline",
        "markdown.strong": "bold",
        "markdown.code": "cyan",
        "markdown.item.bullet": "dim",
        "markdown.table.border": "dim",
    }
)


def _terminal_markdown(text: str) -> str:
    buf = io.StringIO()
    columns = shutil.get_terminal_size((80, 20)).columns
    Console(
        file=buf,
        width=columns,
        theme=MARKDOWN_STYLES,
        force_terminal=True,
    ).print(Markdown(text, justify="left", inline_code_lexer="text"))
    return buf.getvalue()


def echo_output(text: str, format: str = OutputFormat.TEXT.value):
    """Write rendered command output to stdout.

    Markdown is styled with rich when stdout is a terminal and written
    raw otherwise, so it can be piped into files and PR comments.
    """
    if format == OutputFormat.MARKDOWN.value and sys.stdout.isatty():
        text = _terminal_markdown(text)
    click.echo(text, nl=False)
