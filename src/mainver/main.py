import click
import logging
from typing import Optional

from .app import AppContext
from .config import CONFIG_PATH_ENV
from .version import get_version

LOG_FORMAT = "[%(levelname)s] %(message)s"

from dotenv import load_dotenv

load_dotenv()


def register_commands(cli):
    from .commands.calculate import calculate

    cli.add_command(calculate)

    from .commands.branches import branches

    cli.add_command(branches)

    from .commands.config_cmd import config

    cli.add_command(config)


def print_version(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"mainver {get_version()}")
    ctx.exit()


@click.group()
@click.pass_obj
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    default=".",
    help="Path to the git repository",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar=CONFIG_PATH_ENV,
    help="Path to the configuration file (default: .mainver.yaml in the repository root)",
)
@click.option(
    "--remotes",
    is_flag=True,
    default=False,
    help="Also consider remote-tracking branches",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.option(
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=print_version,
    help="Show the mainver version and exit.",
)
def cli(
    app: AppContext,
    repo_path: str = ".",
    config_path: Optional[str] = None,
    remotes: bool = False,
    verbose: bool = False,
):
    app.repo_path = repo_path
    app.config_path = config_path
    app.include_remotes = remotes
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
    )
    register_commands(cli)
    cli(obj=AppContext())


if __name__ == "__main__":
    main()
