import logging
import os
import sys
from pathlib import Path

DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "treedo" / "logs"
LOG_DIR = Path(os.getenv("TREEDO_LOG_DIR") or DEFAULT_LOG_DIR)


def _console_level():
    env_level = os.getenv('TREEDO_LOG_LEVEL', '').upper()
    is_debug = os.getenv('TREEDO_DEBUG', '').lower() in ('1', 'true', 'yes')

    if is_debug:
        return logging.DEBUG, True
    if env_level:
        return getattr(logging, env_level, logging.WARNING), False
    return logging.WARNING, False  # Default: production mode (warnings and errors only)


def setup_logging(console: bool = False):
    """Set up logging for the treedo package with environment-based levels.

    The file handler always records everything. A console handler is only
    attached on request, since the interactive UI owns the terminal.
    """
    level, is_debug = _console_level()

    log_format = '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    logger = logging.getLogger('treedo')
    logger.setLevel(logging.DEBUG)  # Logger accepts all, handlers filter
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / "treedo.log")
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
    except OSError:
        # Read-only home: keep running without a log file
        logger.addHandler(logging.NullHandler())

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(
            '%(levelname)-8s [%(name)s] %(message)s' if is_debug
            else '%(levelname)s: %(message)s'
        ))
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

    logger.propagate = False
    return logger

# Initialize logging when package is imported
setup_logging()

def get_logger(name: str = None):
    """Get a logger instance for a specific module."""
    if name:
        return logging.getLogger(f'treedo.{name}')
    return logging.getLogger('treedo')
