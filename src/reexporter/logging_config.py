import os
import sys

from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False

_TRUTHY = ("1", "true", "yes")


def setup_logging(level=None, suppress_console=None, force=False):
    """
    Configures the global logger.

    Args:
        level: Logging level. If None, read REEXPORTER_LOG_LEVEL (default: INFO).
        suppress_console: If True, suppress console logging. If None, check
            the REEXPORTER_MACHINE_MODE env var.
        force: Reconfigure even if logging was already set up (used by the CLI
            once the command line flags are known).
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if level is None:
        level = os.getenv("REEXPORTER_LOG_LEVEL", "INFO").upper()

    if suppress_console is None:
        suppress_console = os.getenv("REEXPORTER_MACHINE_MODE", "").lower() in _TRUTHY

    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
