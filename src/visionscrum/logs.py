"""
Logging for the visionscrum package.

Importing the package attaches a console handler only. The log file is added
by `setup_logging`, which the CLI calls on start-up, so using the library never
creates a log directory by itself.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "visionscrum"
LOG_FILE = "visionscrum.log"

LEVEL_ENV = "VISIONSCRUM_LOG_LEVEL"
DEBUG_ENV = "VISIONSCRUM_DEBUG"
LOG_DIR_ENV = "VISIONSCRUM_LOG_DIR"
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "visionscrum" / "logs"

_CONSOLE = "console"
_FILE = "file"

def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, '').lower() in ('1', 'true', 'yes')

def console_level() -> int:
    """Console level from the environment: DEBUG when debugging, else the named level, else WARNING."""
    if debug_enabled():
        return logging.DEBUG
    name = os.getenv(LEVEL_ENV, '').upper()
    if not name:
        return logging.WARNING
    level = logging.getLevelName(name)
    # unknown names come back as "Level NAME"
    return level if isinstance(level, int) else logging.WARNING

def log_dir() -> Path:
    configured = os.getenv(LOG_DIR_ENV)
    return Path(configured).expanduser() if configured else DEFAULT_LOG_DIR

def _handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    return next((h for h in logger.handlers if h.get_name() == name), None)

def _set_console_level(logger: logging.Logger, level: int):
    handler = _handler(logger, _CONSOLE)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(levelname)-8s [%(name)s] %(message)s' if level <= logging.DEBUG
        else '%(levelname)s: %(message)s'
    ))

def _package_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # handlers filter
    logger.propagate = False
    if _handler(logger, _CONSOLE) is None:
        console = logging.StreamHandler(sys.stdout)
        console.set_name(_CONSOLE)
        logger.addHandler(console)
        _set_console_level(logger, console_level())
    return logger

def _drop_file_handler(logger: logging.Logger):
    handler = _handler(logger, _FILE)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()

def setup_logging(level: Optional[int] = None, directory: Union[Path, str, None] = None,
                  to_file: bool = True) -> logging.Logger:
    """
    Configure the package logger. Safe to call repeatedly.

    Args:
        level: Console level, resolved from the environment when None
        directory: Where visionscrum.log is written, resolved from the environment when None
        to_file: Whether to keep a detailed DEBUG log file

    Returns:
        The package logger
    """
    logger = _package_logger()
    _set_console_level(logger, console_level() if level is None else level)
    _drop_file_handler(logger)
    if not to_file:
        return logger

    directory = Path(directory) if directory is not None else log_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / LOG_FILE, encoding='utf-8')
    except OSError as e:
        logger.warning(f"Logging to console only, cannot write to {directory}: {e}")
        return logger

    file_handler.set_name(_FILE)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s',
        '%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(file_handler)
    return logger

_package_logger()

def get_logger(name: str = None):
    if name:
        return logging.getLogger(f'{LOGGER_NAME}.{name}')
    return logging.getLogger(LOGGER_NAME)
