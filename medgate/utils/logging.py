"""
Logging switches for Medgate.

Medgate logs through loguru and stays silent until the host application
opts in.
"""

import sys

from loguru import logger

LOGGING_CONFIGURED = False
_handler_id = None


def disable_logging() -> None:
    global LOGGING_CONFIGURED
    if not LOGGING_CONFIGURED:
        logger.disable("medgate")
        LOGGING_CONFIGURED = True


def enable_logging(level: str = "INFO", sink=None) -> None:
    """
    Enable Medgate log output.

    Args:
        level: Minimum level for the Medgate handler
        sink: Where to write (defaults to stderr)
    """
    global LOGGING_CONFIGURED, _handler_id
    logger.enable("medgate")
    if _handler_id is not None:
        logger.remove(_handler_id)
    _handler_id = logger.add(
        sink or sys.stderr,
        level=level.upper(),
        filter="medgate",
    )
    LOGGING_CONFIGURED = True
