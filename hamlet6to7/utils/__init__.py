"""Utility modules for hamlet6to7"""

from .error_handler import handle_errors, safe_operation, safe_with_default
from .logger import LoggerMixin, get_logger, setup_logging

__all__ = [
    "LoggerMixin",
    "get_logger",
    "setup_logging",
    "handle_errors",
    "safe_operation",
    "safe_with_default",
]
