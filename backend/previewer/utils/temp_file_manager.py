# backend/previewer/utils/temp_file_manager.py
"""
Temporary File Management Utilities

Provides private, uniquely named working files for ffmpeg/ffprobe staging
and best-effort cleanup of them on every exit path.
"""

import tempfile
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from ..enums import LogEmoji, LoggerName
from ..services.logger import get_service_logger
from .file_helpers import delete_file_safe

logger = get_service_logger(LoggerName.SYSTEM)

WORK_DIRECTORY_NAME = "previewer_work"


class TempFileManager:
    """
    Manager for per-request working files.

    Each path embeds a uuid so concurrent requests never collide.
    """

    def __init__(self, base_temp_dir: Optional[str] = None, max_age_hours: int = 2):
        """
        Initialize temporary file manager.

        Args:
            base_temp_dir: Base directory for temporary files (defaults to system temp)
            max_age_hours: Age after which leftover files are swept by cleanup_old_files
        """
        self.base_temp_dir = (
            Path(base_temp_dir) if base_temp_dir else Path(tempfile.gettempdir())
        )
        self.max_age_hours = max_age_hours
        self.work_dir = self.base_temp_dir / WORK_DIRECTORY_NAME

    def ensure_work_dir(self) -> Path:
        self.work_dir.mkdir(parents=True, exist_ok=True)
        return self.work_dir

    def create_work_path(self, prefix: str, suffix: str = "") -> Path:
        """
        Create a unique (not yet existing) path in the work directory.

        Args:
            prefix: Role of the file, e.g. "input" or "output"
            suffix: File suffix including the dot
        """
        work_dir = self.ensure_work_dir()
        return work_dir / f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex}{suffix}"

    def write_work_file(self, data: bytes, prefix: str, suffix: str = "") -> Path:
        """Stage bytes into a fresh work file. OSError propagates to the caller."""
        path = self.create_work_path(prefix, suffix)
        path.write_bytes(data)
        return path

    def cleanup(self, *paths: Optional[Union[str, Path]]) -> None:
        """Remove working files; failures are logged and swallowed."""
        for path in paths:
            if path is not None:
                delete_file_safe(path)

    @contextmanager
    def staged(self, data: bytes, prefix: str, suffix: str = "") -> Iterator[Path]:
        """Write data to a work file for the duration of the block."""
        path = self.write_work_file(data, prefix, suffix)
        try:
            yield path
        finally:
            self.cleanup(path)

    def cleanup_old_files(self, max_age_hours: Optional[int] = None) -> int:
        """
        Clean up working files older than the specified age.

        Catches files orphaned by a killed process.

        Returns:
            Number of files cleaned up
        """
        if max_age_hours is None:
            max_age_hours = self.max_age_hours

        if not self.work_dir.exists():
            return 0

        cutoff_time = time.time() - (max_age_hours * 3600)
        cleaned_count = 0

        for file_path in self.work_dir.iterdir():
            if not file_path.is_file():
                continue
            try:
                if file_path.stat().st_mtime < cutoff_time:
                    file_path.unlink()
                    cleaned_count += 1
            except OSError as e:
                logger.warning(f"Failed to clean up temporary file {file_path}: {e}")

        if cleaned_count > 0:
            logger.info(
                f"Cleaned up {cleaned_count} old working files (older than {max_age_hours} hours)",
                emoji=LogEmoji.CLEANUP,
            )

        return cleaned_count
