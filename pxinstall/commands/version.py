import click
import importlib.metadata
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of the pxinstall tool."""
    try:
        ver = importlib.metadata.version("pxinstall")
        logger.info(f"pxinstall version {ver}")
    except importlib.metadata.PackageNotFoundError:
        logger.error("Error: Could not determine the version of pxinstall. Is it installed correctly?")
