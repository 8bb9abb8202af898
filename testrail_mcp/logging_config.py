"""
Logging configuration for the server process.

Everything goes to stderr (stdout carries the STDIO transport) and,
optionally, to a date-stamped log file. The requests/urllib3 loggers are held
at WARNING: at DEBUG they print full request details, including the
Authorization header.
"""

import logging
import os
from datetime import datetime
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers are attached to the package logger, not the root logger
PACKAGE_LOGGER = "testrail_mcp"


def dated_log_path(log_file: str, today: Optional[datetime] = None) -> str:
    """Insert the current date before the ``.log`` extension.

    testrail-mcp.log -> testrail-mcp.2025-01-27.log
    """
    log_date = (today or datetime.now()).strftime("%Y-%m-%d")
    log_dir = os.path.dirname(log_file)
    log_basename = os.path.basename(log_file)
    if log_basename.endswith(".log"):
        return os.path.join(log_dir, f"{log_basename[:-4]}.{log_date}.log")
    return f"{log_file}.{log_date}.log"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Set up console (and optional file) logging. Safe to call more than once."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        dated_log_file = dated_log_path(log_file)
        file_handler = logging.FileHandler(dated_log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"File logging enabled: {dated_log_file}")

    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger.info(f"Logging initialized at {level.upper()} level")
    return logger
