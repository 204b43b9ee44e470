import logging
import sys
from typing import Any, Dict

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Map string log levels to logging constants
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Modules that log once per token or per pass
# These will be set to WARNING by default unless verbose mode is enabled
TECHNICAL_MODULES = [
    "sqlpolish.tokenizer.lexer",
    "sqlpolish.formatter.passes",
    "sqlpolish.formatter.renderer",
    "sqlpolish.formatter.cache",
    "sqlpolish.formatter.scheduler",
]


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the specified name.

    Args:
        name: The name for the logger, typically __name__

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    # Only add a handler if it doesn't have one already
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(DEFAULT_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        # Don't propagate to root logger to avoid duplicate logging
        logger.propagate = False

    return logger


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure logging settings based on command line flags.

    Args:
        verbose: Whether to enable verbose mode (shows all debug logs)
        quiet: Whether to enable quiet mode (only shows warnings and errors)
    """
    if quiet:
        root_level = logging.WARNING
    elif verbose:
        root_level = logging.DEBUG
    else:
        root_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Clear existing handlers to avoid duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Formatted SQL goes to stdout, so diagnostics go to stderr
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(DEFAULT_FORMAT)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name, logger in _package_loggers().items():
        if name.startswith(tuple(TECHNICAL_MODULES)):
            logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
        else:
            logger.setLevel(root_level)

        # Replace the default handler attached by get_logger()
        for existing in logger.handlers[:]:
            logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.propagate = False


def _package_loggers() -> Dict[str, logging.Logger]:
    """Collect every logger that belongs to this package."""
    loggers = {}
    for name in list(logging.root.manager.loggerDict):
        if name == "sqlpolish" or name.startswith("sqlpolish."):
            loggers[name] = logging.getLogger(name)
    for name in TECHNICAL_MODULES:
        loggers.setdefault(name, logging.getLogger(name))
    return loggers


def get_logging_status() -> Dict[str, Any]:
    """Get the current logging status of the package loggers.

    Returns:
        Dictionary with logging status information
    """
    root_logger = logging.getLogger()
    root_level = logging.getLevelName(root_logger.level)

    modules = {}
    for name, logger in _package_loggers().items():
        modules[name] = {
            "level": logging.getLevelName(logger.level),
            "propagate": logger.propagate,
            "has_handlers": bool(logger.handlers),
        }

    return {"root_level": root_level, "modules": modules}
