import click
from .commands import *


@click.group()
@click.option("--path", "-p", default=".", help="Directory holding pxinstall.toml.")
@click.pass_context
def cli(ctx, path):
    """Install Perple_X on macOS from prebuilt binaries or source."""
    ctx.obj = {"path": path}

cli.add_command(install)
cli.add_command(resolve)
cli.add_command(list_versions)
cli.add_command(list_installed)
cli.add_command(uninstall)
cli.add_command(doctor)
cli.add_command(config)
cli.add_command(version)
cli.add_command(log)

if __name__ == '__main__':
    cli()
