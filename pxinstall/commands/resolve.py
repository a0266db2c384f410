import click
from .. import config as config_module
from .. import resolver
from ..decorators import handle_exceptions

@click.command()
@click.argument("version")
@click.pass_context
@handle_exceptions
def resolve(ctx, version):
    """Check whether VERSION is installable and how, without installing it."""
    settings = config_module.load_settings(path=ctx.obj["path"])
    result = resolver.resolve_with_settings(version, settings)
    click.echo(f"version:          {result.version.tag}")
    click.echo(f"valid:            {str(result.valid).lower()}")
    click.echo(f"buildable:        {str(result.buildable).lower()}")
    click.echo(f"binary available: {str(result.binary_available).lower()}")
    click.echo(f"strategy:         {result.strategy}")
