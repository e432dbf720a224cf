import click
import logging
from .app import AppContext
from .config import load_config
from .errors import ConfigurationError
from .version import __version__

LOG_FORMAT = "[%(levelname)s] %(message)s"

from dotenv import load_dotenv

load_dotenv()


def register_commands(cli):
    from .commands.resolve import resolve, string

    cli.add_command(resolve)
    cli.add_command(string)

    from .commands.archive import export_record, init_archive

    cli.add_command(export_record)
    cli.add_command(init_archive)


@click.group()
@click.version_option(__version__, prog_name="flowversion")
@click.pass_obj
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the config file (default: .flowversion.yaml if present).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(app: AppContext, config_path: str, verbose: bool):
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        app.config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))


register_commands(cli)


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
    )
    cli(obj=AppContext())


if __name__ == "__main__":
    main()
