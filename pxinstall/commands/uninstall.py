import click
import sys
from .. import config as config_module
from .. import installer
from ..decorators import handle_exceptions

@click.command()
@click.argument("version")
@click.pass_context
@handle_exceptions
def uninstall(ctx, version):
    """Remove an installed Perple_X VERSION."""
    settings = config_module.load_settings(path=ctx.obj["path"])
    if not installer.uninstall_version(version, settings):
        sys.exit(1)
