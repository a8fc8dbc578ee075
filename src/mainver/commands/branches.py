import click
import git
import re
import yaml

from ..app import AppContext
from ..errors import CalculationError
from ..utils.output import echo_output, format_option
from ..utils.templates import render_to_format


@click.command()
@click.pass_obj
@format_option()
def branches(app: AppContext, format: str):
    """Show how every branch is configured and where it diverged.

    For each branch the matching configuration key, its increment, the
    source branch selected from the configured source list and the commit
    the branch diverged at are listed.
    """
    try:
        calculator = app.get_calculator()
        divergences = calculator.divergences()
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

    rows = []
    for divergence in divergences:
        resolved = calculator.configs.resolve(divergence.branch.name)
        rows.append(
            {
                "name": divergence.branch.name,
                "tip": divergence.branch.tip,
                "key": resolved.key if resolved else None,
                "increment": (
                    resolved or calculator.configs.resolve_or_default(divergence.branch.name)
                ).increment.value,
                "is_main_branch": divergence.branch.is_main_branch,
                "source": divergence.source.name if divergence.source else None,
                "point": divergence.point,
                "exclusive_commits": len(divergence.exclusive),
                "degraded": divergence.degraded,
            }
        )

    echo_output(render_to_format(format, "branches", rows), format)
