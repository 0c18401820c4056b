"""Simple logging utility.

All loggers handed out here live under the ``scanpeople`` package
logger, which gets one stream handler with a preset format the first
time any logger is requested.  Changing the level of the package
logger with `set_level` therefore affects every module at once.
"""

import logging

PACKAGE_LOGGER = "scanpeople"


def _package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package logger with a preset format."""
    _package_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_level(level) -> None:
    """Set the level for all package loggers, e.g. ``logging.DEBUG``."""
    _package_logger().setLevel(level)
