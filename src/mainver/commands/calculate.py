import click
import git
import re
import yaml
from typing import Optional

from ..app import AppContext
from ..errors import CalculationError
from ..utils.output import echo_output, format_option
from ..utils.templates import render_to_format


@click.command()
@click.pass_obj
@click.argument("branch", required=False, default=None)
@format_option()
@click.option(
    "--show-warnings",
    is_flag=True,
    default=False,
    help="Include recoverable warnings (unattributed merges, missing sources) in the output.",
)
def calculate(
    app: AppContext,
    branch: Optional[str],
    format: str,
    show_warnings: bool,
):
    """Calculate the version of BRANCH (default: the checked-out branch).

    Walks the first-parent history of the branch, attributes every merge
    to the configured branch it brought in and accumulates the increments
    on top of the nearest version tag.
    """
    try:
        branch = branch or app.current_branch()
        if branch is None:
            click.echo("Error: HEAD is detached, pass a BRANCH name.", err=True)
            raise SystemExit(1)

        result = app.get_calculator().calculate(branch)
    except (
        CalculationError,
        ValueError,
        FileNotFoundError,
        yaml.YAMLError,
        re.error,
        git.InvalidGitRepositoryError,
    ) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    echo_output(
        render_to_format(format, "version", result, show_warnings=show_warnings),
        format,
    )
