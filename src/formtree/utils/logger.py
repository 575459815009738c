"""Minimal logging utilities for formtree.

Provides a simple get_logger function that wraps the standard library logging.
The package never installs handlers; applications configure logging.

Example:
    >>> from formtree.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Converting raw tree")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "formtree." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'formtree.mymodule'
    """
    if not (name == "formtree" or name.startswith("formtree.")):
        name = f"formtree.{name}"
    return logging.getLogger(name)
