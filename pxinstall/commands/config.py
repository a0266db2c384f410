import click
import os
import sys
import json
from .. import config as config_module
from ..cli_logger import logger

MISSING_CONFIG = "Error: No pxinstall.toml found. Run 'pxinstall config init' to create one."
UNREADABLE_CONFIG = "Error: pxinstall.toml could not be read. Fix it with 'pxinstall config edit' before changing settings."

@click.group()
@click.pass_context
def config(ctx):
    """View or edit the pxinstall.toml configuration file."""
    pass

@config.command()
@click.option("--force", is_flag=True, help="Overwrite an existing pxinstall.toml.")
@click.pass_context
def init(ctx, force):
    """Write a pxinstall.toml holding the default settings."""
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    if os.path.exists(config_file_path) and not force:
        logger.error(f"Error: {config_file_path} already exists. Use --force to overwrite it.")
        sys.exit(1)
    if not config_module.save_config(config_module.DEFAULT_CONFIG, path=ctx.obj["path"]):
        sys.exit(1)
    logger.success(f"Created {config_file_path}")

@config.command()
@click.pass_context
def view(ctx):
    """View the contents of the pxinstall.toml file."""
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    if not os.path.exists(config_file_path):
        logger.error(MISSING_CONFIG)
        return
    try:
        with open(config_file_path, 'r') as f:
            click.echo(f.read())
    except IOError as e:
        logger.error(f"Error reading pxinstall.toml at {config_file_path}: {e}")
        logger.info("Please check file permissions.")

@config.command()
@click.pass_context
def edit(ctx):
    """Edit the pxinstall.toml file in your default editor."""
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    if not os.path.exists(config_file_path):
        logger.error(MISSING_CONFIG)
        return
    try:
        click.edit(filename=config_file_path)
    except click.ClickException as e:
        logger.error(f"Click error editing pxinstall.toml: {e}")
        logger.info("This might indicate an issue with your editor configuration or environment variables.")

@config.command(name="list")
@click.option("--effective", is_flag=True, help="Show the settings in effect, defaults included.")
@click.pass_context
def list_config(ctx, effective):
    """List all configuration keys and values."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if conf is None:
        sys.exit(1)
    if effective:
        click.echo(json.dumps(config_module.get_settings(conf), indent=4))
        return
    if not conf:
        logger.error(MISSING_CONFIG)
        return
    click.echo(json.dumps(conf, indent=4))

@config.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Get a value from the settings in effect (e.g. versions.min_binary)."""
    value = config_module.load_settings(path=ctx.obj["path"])
    try:
        for k in key.split('.'):
            value = value[k]
        click.echo(value)
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in pxinstall.toml")

@config.command(name="set")
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_value(ctx, key, value):
    """Set a value in the pxinstall.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if conf is None:
        logger.error(UNREADABLE_CONFIG)
        sys.exit(1)

    keys = key.split('.')
    d = conf
    for k in keys[:-1]:
        d = d.setdefault(k, {})
    d[keys[-1]] = value

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Set '{key}' to '{value}'")

@config.command()
@click.argument('key')
@click.pass_context
def unset(ctx, key):
    """Remove a key from the pxinstall.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if conf is None:
        logger.error(UNREADABLE_CONFIG)
        sys.exit(1)
    if not conf:
        logger.error(MISSING_CONFIG)
        return

    keys = key.split('.')
    d = conf
    try:
        for k in keys[:-1]:
            d = d[k]
        del d[keys[-1]]
        if config_module.save_config(conf, path=ctx.obj["path"]):
            logger.info(f"Unset '{key}'")
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in pxinstall.toml")
