import click
from .. import config as config_module
from .. import installer
from ..cli_logger import logger
from ..decorators import handle_exceptions

@click.command(name="list")
@click.pass_context
@handle_exceptions
def list_installed(ctx):
    """List installed Perple_X versions."""
    settings = config_module.load_settings(path=ctx.obj["path"])
    versions = installer.list_installed_versions(settings)
    if not versions:
        logger.info("No Perple_X versions installed yet. Run 'pxinstall install' to begin.")
        return
    logger.info(f"Installed under {settings['perplex']['install_root']}:")
    for version in versions:
        click.echo(f"  - {version.tag}")
