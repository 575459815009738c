"""Utility modules for formtree.

Provides:
- logger: get_logger for logging
"""

from formtree.utils.logger import get_logger

__all__ = [
    "get_logger",
]
