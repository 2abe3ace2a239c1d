"""
============================================================================
UPTIME PROBE - LOGGING UTILITY
============================================================================
Logging built on loguru: console sink, optional rotating file sink
(plain text or JSON) and a separate error log.
============================================================================
"""

import inspect
import sys
import time
from functools import wraps
from typing import Optional

from loguru import logger

from config.settings import Settings, get_settings


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure logging sinks from settings.
    Replaces loguru's default handler.
    """
    settings = settings or get_settings()
    log_settings = settings.logging

    logger.remove()

    log_level = log_settings.level.value

    # Console Handler
    if log_settings.to_console:
        logger.add(
            sys.stdout,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=log_level,
            colorize=log_settings.colorize,
            backtrace=True,
            diagnose=settings.debug,
        )

    # File Handler
    if log_settings.to_file:
        log_settings.directory.mkdir(parents=True, exist_ok=True)
        log_file_path = log_settings.directory / log_settings.file_name

        logger.add(
            log_file_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=log_level,
            rotation=log_settings.file_max_size,
            retention=log_settings.file_retention,
            compression="zip",
            serialize=log_settings.format == "json",
            backtrace=True,
            diagnose=False,
        )

        # Error log file (separate file for errors)
        logger.add(
            log_settings.directory / "errors.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}",
            level="ERROR",
            rotation="1 day",
            retention=log_settings.file_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.info("Logging system initialized")
    logger.info(f"Log level: {log_level}")
    logger.info(f"Console logging: {log_settings.to_console}")
    logger.info(f"File logging: {log_settings.to_file}")


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name (usually the component)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


# ============================================================================
# LOG DECORATORS
# ============================================================================

def log_execution_time(func):
    """
    Decorator to log coroutine execution time at debug level.
    Failures are logged with their elapsed time and re-raised.
    """

    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
            execution_time = time.perf_counter() - start_time
            logger.debug(
                f"Function {func.__name__} executed in {execution_time:.4f} seconds"
            )
            return result
        except Exception as e:
            execution_time = time.perf_counter() - start_time
            logger.error(
                f"Function {func.__name__} failed after {execution_time:.4f} seconds: {e}"
            )
            raise

    if not inspect.iscoroutinefunction(func):
        raise TypeError("log_execution_time only wraps coroutine functions")
    return async_wrapper
