"""
Logging configuration utilities for Build Log.

Provides configurable logging with file rotation support.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from ..config import DEFAULT_LOG_FORMAT, BuildLogConfig


def setup_logging(config: Optional[BuildLogConfig] = None) -> None:
    """
    Configure the root logger from BuildLogConfig settings.

    Args:
        config: BuildLogConfig instance. If None, uses INFO to stdout.

    Example:
        config = BuildLogConfig.load("buildlog.yaml")
        setup_logging(config)
    """
    if config is None:
        level = logging.INFO
        log_format = DEFAULT_LOG_FORMAT
        log_file = None
        max_bytes = 10485760
        backup_count = 3
    else:
        level = getattr(logging, config.log_level.upper(), logging.INFO)
        log_format = config.log_format
        log_file = config.log_file or None
        max_bytes = config.log_max_bytes
        backup_count = config.log_backup_count

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
