"""
Centralized Logger Service for the preview service.

This module provides a unified logging interface on top of loguru that handles:
- Console output with emoji support
- File logging with rotation, retention and compression
- Structured context bound onto every record

Architecture:
- Type-safe enum-based configuration
- Per-service loggers created through get_service_logger()
"""

import sys
from typing import Any, Dict, Optional, Union

from loguru import logger

from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .constants import (
    CONSOLE_FORMAT,
    DEFAULT_EXTRA,
    FILE_FORMAT,
    LOG_FILE_COMPRESSION,
    LOG_FILE_RETENTION,
    LOG_FILE_ROTATION,
)


def configure_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    log_file: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Install the console sink (and optionally a rotating file sink).

    Safe to call more than once; previous sinks are replaced.

    Args:
        level: Minimum level written to every sink
        log_file: Optional path of a rotating log file
        serialize: Write JSON records instead of formatted text
    """
    level_name = getattr(level, "value", level)

    logger.remove()
    logger.configure(extra=dict(DEFAULT_EXTRA))
    logger.add(
        sys.stderr,
        level=level_name,
        format=CONSOLE_FORMAT,
        colorize=sys.stderr.isatty(),
        serialize=serialize,
        backtrace=False,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            level=level_name,
            format=FILE_FORMAT,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            compression=LOG_FILE_COMPRESSION,
            serialize=serialize,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )


def _emit(
    level: LogLevel,
    message: str,
    logger_name: LoggerName,
    source: LogSource,
    emoji: LogEmoji,
    context: Optional[Dict[str, Any]] = None,
    exception: Optional[BaseException] = None,
) -> None:
    bound = logger.bind(
        logger_name=logger_name.value,
        source=source.value,
        emoji=emoji.value,
        **(context or {}),
    )
    if exception is not None:
        bound = bound.opt(exception=exception)
    bound.log(level.value, message)


def get_service_logger(
    logger_name: LoggerName,
    source: LogSource = LogSource.SYSTEM,
    default_emoji: Optional[LogEmoji] = None,
):
    """
    Factory function to create a pre-configured logger for a specific service.

    Returns a logger with simplified methods that automatically include
    the correct source and logger_name.

    Emoji priority system (highest to lowest):
    1. Direct: Emoji passed directly to log method call
    2. Instance-set: Default emoji set when creating the service logger
    3. Fallback: Default emoji based on log level (ERROR, WARNING, INFO, DEBUG)

    Args:
        logger_name: The logger name enum to use for all calls
        source: The log source enum to use for all calls (defaults to SYSTEM)
        default_emoji: Instance-level default emoji that overrides level-based fallbacks

    Returns:
        ServiceLogger instance with error, warning, info, debug methods

    Example:
        logger = get_service_logger(LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE)
        logger.error("Something went wrong")  # Uses LogEmoji.ERROR (fallback)
        logger.info("Done", emoji=LogEmoji.SUCCESS)  # Uses LogEmoji.SUCCESS (direct)
    """

    def _resolve_emoji(
        method_emoji: Optional[LogEmoji], fallback_emoji: LogEmoji
    ) -> LogEmoji:
        if method_emoji is not None:
            return method_emoji
        if default_emoji is not None:
            return default_emoji
        return fallback_emoji

    class ServiceLogger:
        name = logger_name

        @staticmethod
        def error(
            message: str,
            exception: Optional[BaseException] = None,
            error_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log an error, attaching the traceback when an exception is given."""
            context = dict(error_context or {})
            context.update(kwargs.pop("extra_context", None) or {})
            if exception is not None:
                context.setdefault("error_type", type(exception).__name__)
            _emit(
                LogLevel.ERROR,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.ERROR),
                context,
                exception,
            )

        @staticmethod
        def warning(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log a warning with emoji priority system."""
            _emit(
                LogLevel.WARNING,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.WARNING),
                extra_context,
            )

        @staticmethod
        def info(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log an info message with emoji priority system."""
            _emit(
                LogLevel.INFO,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.INFO),
                extra_context,
            )

        @staticmethod
        def debug(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            **kwargs,
        ):
            """Log a debug message with emoji priority system."""
            _emit(
                LogLevel.DEBUG,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.DEBUG),
                extra_context,
            )

    return ServiceLogger()
