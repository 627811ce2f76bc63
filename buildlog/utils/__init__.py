"""Build Log utilities."""

from .logging import setup_logging
from .metrics import SimpleMetrics

__all__ = [
    "setup_logging",
    "SimpleMetrics",
]
