"""Logging setup for the directory client."""

import logging
import sys
from typing import Optional

from ..config.models import LoggingConfig


ROOT_LOGGER = "directory-client"


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the directory-client logger hierarchy.

    Args:
        config: Logging configuration, defaults apply when omitted

    Returns:
        The configured root logger of the package
    """
    config = config or LoggingConfig()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, config.level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.file:
        file_handler = logging.FileHandler(config.file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # ldap3 logs through its own logger; keep it quiet unless debugging
    logging.getLogger("ldap3").setLevel(max(logger.level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger of the package logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_operations_logger = get_logger("operations")


def log_ldap_operation(operation: str, target: str, success: bool, details: str = "") -> None:
    """
    Emit one diagnostic line for an LDAP operation.

    Args:
        operation: Operation name (bind, search, connect, ...)
        target: DN or server the operation was aimed at
        success: Whether the operation succeeded
        details: Free-form details, never credentials
    """
    status = "ok" if success else "failed"
    message = f"[ldap] [operation: {operation}] [target: {target}] [status: {status}]"
    if details:
        message += f" [details: {details}]"

    if success:
        _operations_logger.debug(message)
    else:
        _operations_logger.warning(message)
