import functools
import click
import sys
from .cli_logger import logger
from .resolver import ResolutionError, UnknownVersion

def report_resolution_error(error):
    """Print a resolution failure with enough context for the user to fix the request."""
    logger.error(str(error))
    if isinstance(error, UnknownVersion):
        if error.catalog:
            logger.info("Available versions:")
            for tag in error.catalog:
                logger.step_info(f"- {tag}", indent=2)
        else:
            logger.info("The release list is empty.")
    if error.hint:
        logger.info(error.hint)

def handle_exceptions(func):
    """A decorator to handle common exceptions for CLI commands; every failure exits with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ResolutionError as e:
            report_resolution_error(e)
        except click.Abort:
            logger.warning("\nCommand aborted by user.")
        except click.ClickException:
            raise
        except Exception as e:
            logger.error(f"\nAn unexpected error occurred: {e}")
            logger.exception(*sys.exc_info())
        sys.exit(1)
    return wrapper
