"""
Logging configuration for PyV2B.

The package only creates module loggers; applications decide where records
go. ``setup_logging`` is a convenience for scripts and the validation suite.
"""
import logging
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "pyv2b"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Calling this more than once replaces the handlers installed by the
    previous call.

    Args:
        level: Logging level name or number
        log_file: Optional path of a log file to append to

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_pyv2b_handler", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(DEFAULT_FORMAT)
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._pyv2b_handler = True
        logger.addHandler(handler)

    return logger


def log_missing_sapling_model(logger: logging.Logger, key_description: str) -> None:
    """Record that the sapling adjustment is skipped for a key."""
    logger.info(
        "No parameter available for sapling tree model (%s). Set to zero.",
        key_description,
    )
