# backend/previewer/utils/file_helpers.py
"""
File Helper Functions

Filename handling for uploads and storage keys, and safe deletion of
working files.
"""

import re
from pathlib import Path, PurePosixPath
from typing import Union

from ..constants import DEFAULT_ORIGINAL_EXTENSION
from ..enums import LogEmoji, LoggerName
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.UTILITY)

_EXTENSION_PATTERN = re.compile(r"^[a-z0-9]{1,16}$")


def delete_file_safe(file_path: Union[str, Path]) -> bool:
    """
    Delete a file, logging (never raising) on failure.

    Returns:
        True if the file was deleted, False if it was absent or could not be removed
    """
    path = Path(file_path)
    try:
        if path.exists():
            path.unlink()
            logger.debug(
                f"Deleted file: {path}",
                emoji=LogEmoji.DELETE,
                extra_context={"operation": "file_delete", "file_path": str(path)},
            )
            return True
        return False
    except OSError as e:
        logger.warning(
            f"Failed to clean up file {path}: {e}",
            extra_context={"operation": "file_delete", "file_path": str(path)},
        )
        return False


def base_filename(filename: str) -> str:
    """Strip any client-supplied directory components from a filename."""
    return PurePosixPath((filename or "").replace("\\", "/")).name


def clean_filename(filename: str) -> str:
    """
    Clean a filename to be safe for storage keys.

    Args:
        filename: Original filename

    Returns:
        Cleaned filename
    """
    # Remove/replace problematic characters
    cleaned = "".join(c for c in filename if c.isalnum() or c in (" ", "-", "_", "."))

    # Replace spaces with underscores
    cleaned = cleaned.replace(" ", "_")

    # Remove multiple consecutive underscores
    while "__" in cleaned:
        cleaned = cleaned.replace("__", "_")

    # Strip leading/trailing underscores and dots
    cleaned = cleaned.strip("_.")

    return cleaned or "unknown"


def filename_stem(filename: str) -> str:
    """
    Name of the upload without directories or its final extension.

    "holiday photo.jpg" -> "holiday_photo"
    """
    name = base_filename(filename)
    stem = PurePosixPath(name).stem if name else ""
    return clean_filename(stem)


def filename_extension(
    filename: str, default: str = DEFAULT_ORIGINAL_EXTENSION
) -> str:
    """
    Lowercase extension without the dot, or the default when missing/odd.

    "clip.MOV" -> "mov", "README" -> "bin"
    """
    suffix = PurePosixPath(base_filename(filename)).suffix.lower().lstrip(".")
    if suffix and _EXTENSION_PATTERN.match(suffix):
        return suffix
    return default
