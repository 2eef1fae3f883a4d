# backend/previewer/services/logger/constants.py
"""Formatting and file-rotation constants for the logger service."""

# Defaults bound onto every record so the format strings never miss a key
DEFAULT_EXTRA = {
    "logger_name": "root",
    "source": "system",
    "emoji": "",
}

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> | "
    "{extra[emoji]} <level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} | {level: <8} | "
    "{extra[source]}:{extra[logger_name]} | {message} | {extra}"
)

LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = "14 days"
LOG_FILE_COMPRESSION = "gz"
