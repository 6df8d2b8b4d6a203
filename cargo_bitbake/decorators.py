import functools
import sys
import click
from .cli_logger import logger
from .errors import BitbakeError


def handle_exceptions(func):
    """A decorator that reports errors of CLI commands and exits with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.Abort:
            logger.warning("\nCommand aborted by user.")
            sys.exit(1)
        except BitbakeError as e:
            logger.error(str(e))
            sys.exit(1)
        except OSError as e:
            logger.error(f"I/O error: {e}")
            sys.exit(1)
        except Exception as e:
            logger.error(f"An unexpected error occurred: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
    return wrapper
