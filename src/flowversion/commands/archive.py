"""Commands preparing sources for builds from 'git archive' exports."""

import click
from pathlib import Path
from typing import Optional

from ..app import AppContext
from .. import archive


@click.command("export-record")
@click.pass_obj
@click.argument("target", required=False)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Record file to write (default: the target's archive record file).",
)
def export_record(app: AppContext, target: Optional[str], output: Optional[str]):
    """Write the resolved version of TARGET as an archive record.

    Run this before 'git archive' and add the record to the exported tree so
    builds from the export get the complete version information.
    """
    name = app.target_name(target)
    config = app.get_target_config(name)
    components = app.resolve((name,))[name]

    if not components.success:
        click.echo(
            click.style("WARNING: ", fg="yellow")
            + "Version information is incomplete; the record will be ignored by builds."
        )

    path = archive.write_archive_record(
        Path(output) if output else config.archive_record_path, components
    )
    click.echo(f"Wrote {components.version_string} to {path}")


@click.command("init-archive")
@click.pass_obj
@click.argument("target", required=False)
def init_archive(app: AppContext, target: Optional[str]):
    """Add the export-subst file used by builds from 'git archive' exports.

    The file and its .gitattributes entry have to be committed; 'git archive'
    then fills in the hashes and branch of the exported commit.
    """
    config = app.get_target_config(app.target_name(target))
    try:
        path = archive.write_export_info(config.directory, config.export_info_file)
    except OSError as e:
        raise click.ClickException(f"Cannot write export info: {e}")
    click.echo(f"Wrote {path}; commit it together with .gitattributes.")
