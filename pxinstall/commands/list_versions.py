import click
from packaging.version import parse as parse_version, InvalidVersion
from .. import config as config_module
from .. import resolver
from ..cli_logger import logger
from ..decorators import handle_exceptions


def _sort_key(tag):
    try:
        return (1, parse_version(tag))
    except InvalidVersion:
        return (0, parse_version("0"))


def describe(tag, min_buildable, min_binary):
    try:
        version = resolver.parse_version(tag)
    except resolver.MalformedVersion:
        return "unsupported tag format"
    if not resolver.classify_buildability(version, min_buildable):
        return "too old to build"
    if resolver.classify_binary_availability(version, min_binary):
        return "prebuilt binary"
    return "source build"


@click.command(name="list-versions")
@click.pass_context
@handle_exceptions
def list_versions(ctx):
    """List published Perple_X releases and how each would be installed."""
    settings = config_module.load_settings(path=ctx.obj["path"])
    min_buildable = resolver.parse_threshold(settings["versions"]["min_buildable"])
    min_binary = resolver.parse_threshold(settings["versions"]["min_binary"])
    catalog = resolver.catalog_fetcher_for(settings)()
    if not catalog:
        logger.info("No published releases found.")
        return

    for tag in sorted(catalog, key=_sort_key, reverse=True):
        click.echo(f"{tag:<12} {describe(tag, min_buildable, min_binary)}")
    click.echo(f"{resolver.HEAD:<12} source build (latest development state)")
