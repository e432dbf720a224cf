"""Commands that resolve and print version information."""

import click
from typing import Optional, Tuple

from ..app import AppContext
from ..config import FALLBACK_VERSION_TYPES
from ..output import echo_output, format_option
from ..templates import render_versions


def override_options(func):
    """Options layered on top of the config file for every resolved target."""
    func = click.option(
        "--fallback-branch",
        default=None,
        help="Branch name to use when HEAD is detached (default: $FALLBACK_BRANCH).",
    )(func)
    func = click.option(
        "--fallback-type",
        "fallback_version_type",
        type=click.Choice(FALLBACK_VERSION_TYPES),
        default=None,
        help="Version type when the branch cannot be determined at all.",
    )(func)
    func = click.option(
        "--custom-version",
        default=None,
        metavar="X.Y.Z",
        help="Minimum version, used when greater than the resolved one.",
    )(func)
    func = click.option(
        "-C",
        "--directory",
        type=click.Path(file_okay=False, dir_okay=True),
        default=None,
        help="Directory to read git information from.",
    )(func)
    return func


@click.command()
@click.pass_obj
@click.argument("targets", nargs=-1)
@override_options
@format_option()
def resolve(
    app: AppContext,
    targets: Tuple[str, ...],
    directory: Optional[str],
    custom_version: Optional[str],
    fallback_version_type: Optional[str],
    fallback_branch: Optional[str],
    format: str,
):
    """Resolve the version of TARGETS (default: all configured targets)."""
    versions = app.resolve(
        targets,
        directory=directory,
        custom_version=custom_version,
        fallback_version_type=fallback_version_type,
        fallback_branch=fallback_branch,
    )
    echo_output(render_versions(format, versions), format)


@click.command()
@click.pass_obj
@click.argument("target", required=False)
@override_options
def string(
    app: AppContext,
    target: Optional[str],
    directory: Optional[str],
    custom_version: Optional[str],
    fallback_version_type: Optional[str],
    fallback_branch: Optional[str],
):
    """Print only the version string of TARGET."""
    name = app.target_name(target)
    versions = app.resolve(
        (name,),
        directory=directory,
        custom_version=custom_version,
        fallback_version_type=fallback_version_type,
        fallback_branch=fallback_branch,
    )
    click.echo(versions[name].version_string)
