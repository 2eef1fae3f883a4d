"""
Centralized Logger Service Module.

A unified logging interface with a structured, type-safe logging system
backed by loguru.

Usage:
    from previewer.services.logger import get_service_logger
    from previewer.enums import LoggerName, LogSource

    logger = get_service_logger(LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE)
    logger.info("Transcode finished", extra_context={"bytes": 1024})
"""

# Re-export commonly used enums for convenience
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .logger_service import configure_logging, get_service_logger

__all__ = [
    "configure_logging",
    "get_service_logger",
    # Enums
    "LogLevel",
    "LogSource",
    "LoggerName",
    "LogEmoji",
]
