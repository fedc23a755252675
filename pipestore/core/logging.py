"""Logging utilities for pipestore modules."""

import logging

PACKAGE_LOGGERS = (
    'pipestore',
    'pipestore.storage',
    'pipestore.registry',
    'pipestore.streams',
    'pipestore.pipeline',
    'pipestore.adapters',
    'pipestore.transforms',
    'pipestore.cli',
)


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    This ensures that loggers work with basicConfig() without needing
    explicit setup_logging() calls. The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically 'pipestore.<component>')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    # Only set default level if root logger has no handlers
    # (i.e., basicConfig hasn't been called yet)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


def configure_loggers(level: int = logging.INFO) -> None:
    """Set the level of every pipestore logger and keep propagation on."""
    existing = [
        name for name in logging.Logger.manager.loggerDict
        if name.startswith('pipestore.')
    ]
    for logger_name in set(PACKAGE_LOGGERS).union(existing):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True
