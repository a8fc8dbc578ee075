"""Config commands for inspecting the mainver configuration."""

import click
import json
import re
import yaml

from ..app import AppContext
from ..config import BranchConfigResolver


@click.group()
def config():
    """Inspect the mainver configuration."""
    pass


@config.command()
@click.pass_obj
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print JSON instead of YAML.",
)
def show(app: AppContext, as_json: bool):
    """Print the effective configuration, defaults included."""
    try:
        data = app.config.to_dict()
    except (ValueError, FileNotFoundError, yaml.YAMLError, re.error) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)


@config.command()
@click.pass_obj
@click.argument("branch_name")
def resolve(app: AppContext, branch_name: str):
    """Show which configuration BRANCH_NAME resolves to."""
    try:
        resolver = BranchConfigResolver(app.config)
    except (ValueError, FileNotFoundError, yaml.YAMLError, re.error) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    resolved = resolver.resolve(branch_name)
    if resolved is None:
        fallback = resolver.resolve_or_default(branch_name)
        click.echo(
            f"{branch_name}: no match, fallback increment {fallback.increment.value}, "
            f"sources {', '.join(fallback.source_branches) or '-'}"
        )
        return

    click.echo(
        f"{branch_name}: {resolved.key} (increment {resolved.increment.value}, "
        f"{'main line' if resolved.is_main_branch else 'sources ' + (', '.join(resolved.source_branches) or '-')}, "
        f"{resolved.commit_increments.value})"
    )
    label = resolver.resolve_label(branch_name, resolved)
    if label:
        click.echo(f"label: {label}")
