"""Utils package."""

from .logging import get_logger, init_logging

__all__ = [
    "get_logger",
    "init_logging",
]
