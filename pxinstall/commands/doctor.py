import click
from .. import config as config_module
from .. import installer
from ..decorators import handle_exceptions

@click.command()
@click.pass_context
@handle_exceptions
def doctor(ctx):
    """Check that Homebrew, gfortran, make and git are available."""
    settings = config_module.load_settings(path=ctx.obj["path"])
    installer.check_environment(settings)
