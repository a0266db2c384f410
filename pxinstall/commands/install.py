import click
import sys
from .. import config as config_module
from .. import installer
from .. import resolver
from ..cli_logger import logger
from ..decorators import handle_exceptions

@click.command()
@click.argument("version", default=resolver.HEAD)
@click.option("--force", is_flag=True, help="Replace an existing installation of the same version.")
@click.option("--verbose", "-v", is_flag=True, help="Show download, git and make output.")
@click.pass_context
@handle_exceptions
def install(ctx, version, force, verbose):
    """Install Perple_X VERSION ('head' or a release tag such as v7.1.15).

    Prebuilt binaries are used when the release publishes them; otherwise the
    source is downloaded and compiled with gfortran.
    """
    settings = config_module.load_settings(path=ctx.obj["path"])
    logger.info(f"Resolving Perple_X version '{version}'...")
    result = resolver.resolve_with_settings(version, settings)
    logger.success(f"{result.version.tag} is installable ({result.strategy} install).")

    summary = installer.install(result, settings, force=force, verbose=verbose)
    if not summary:
        logger.error(f"Installation of Perple_X {result.version.tag} failed. Please check the logs for details.")
        sys.exit(1)

    click.echo()
    click.echo("=" * 50)
    click.echo(f"Perple_X {summary.version.tag} setup complete!")
    click.echo("=" * 50)
    click.echo(f"Installation directory: {summary.install_dir}")
    click.echo(f"Executables:            {summary.install_dir}/bin/")
    click.echo(f"Installed from:         {summary.strategy}")
    for exe in summary.executables:
        click.echo(f"  ✅ {exe}")
    for exe in summary.missing:
        click.echo(f"  ❌ {exe}")
    click.echo()
    click.echo("To run Perple_X:")
    click.echo(f"   cd {summary.install_dir}")
    click.echo("   ./bin/werami")
