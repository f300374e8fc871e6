"""
Logging setup for applications embedding claimauthz.
"""

import logging
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[str, int] = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'claimauthz' logger hierarchy.

    Only the package logger is touched, so the host application's own
    logging configuration stays as it is.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    global _handler

    package_logger = logging.getLogger("claimauthz")
    package_logger.setLevel(level)

    # Calling again replaces the handler installed here, never foreign ones
    if _handler is not None:
        package_logger.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    package_logger.addHandler(_handler)

    return package_logger
