"""Logging configuration"""
from loguru import logger
import sys

from .config import config

STDERR_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def setup_logging(level: str = None, log_file: str = None):
    """
    (Re)configure loguru sinks.

    Args:
        level: stderr level; defaults to TOKENBUCKET_LOG_LEVEL, then logging.level, then INFO
        log_file: optional rotating file sink; defaults to logging.file
    """
    level = level or config.get_env("TOKENBUCKET_LOG_LEVEL") or config.get("logging.level", "INFO")
    log_file = log_file or config.get("logging.file")

    logger.remove()  # Remove default handler
    logger.add(sys.stderr, format=STDERR_FORMAT, level=level.upper())
    if log_file:
        logger.add(
            log_file,
            rotation="00:00",
            retention="30 days",
            format=FILE_FORMAT,
            level="DEBUG"
        )


setup_logging()

__all__ = ['logger', 'setup_logging']
