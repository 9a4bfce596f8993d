"""
POSTURECOACH Upload Storage

Short-lived local storage for uploaded videos. Files are written under
settings.UPLOAD_DIR with a unique name and removed after analysis.
"""

import logging
import random
import time
from pathlib import Path
from typing import Optional

from core.config import settings

# Configure logging
logger = logging.getLogger(__name__)


class UploadRejected(ValueError):
    """Upload failed validation; the message is safe to return to the client."""


class UploadStore:
    """
    Local upload directory manager.

    Usage:
        store = get_upload_store()
        path = store.save_video(content, "squat.mp4", "video/mp4")
        try:
            ...
        finally:
            store.remove(path)
    """

    # Supported file types
    ALLOWED_VIDEO_TYPES = {"mp4", "avi", "mov", "wmv", "flv", "webm"}

    def __init__(self, base_path: str = None, max_size_mb: int = None):
        self.base_path = Path(base_path or settings.UPLOAD_DIR)
        self.max_size_bytes = (max_size_mb or settings.MAX_UPLOAD_SIZE_MB) * 1024 * 1024
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"📁 UploadStore initialized at: {self.base_path}")

    def _is_video(self, filename: str, content_type: str) -> bool:
        """Both the extension and the MIME type must name an allowed video format."""
        ext = Path(filename or "").suffix.lower().lstrip(".")
        mime = (content_type or "").lower()
        return ext in self.ALLOWED_VIDEO_TYPES and any(t in mime for t in self.ALLOWED_VIDEO_TYPES)

    def validate(self, filename: str, content_type: str, size: int) -> None:
        """
        Raises:
            UploadRejected: not a video, or larger than the size limit
        """
        if not self._is_video(filename, content_type):
            raise UploadRejected("Only video files are allowed!")
        if size > self.max_size_bytes:
            raise UploadRejected("File too large")

    def save_video(self, content: bytes, filename: str, content_type: str, field_name: str = "video") -> Path:
        """
        Validate and write an uploaded video.

        Returns:
            Path of the stored file
        """
        self.validate(filename, content_type, len(content))

        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        file_path = self.base_path / f"{field_name}-{unique_suffix}{Path(filename).suffix.lower()}"
        file_path.write_bytes(content)

        logger.info(f"✅ Saved upload: {filename} -> {file_path} ({len(content)} bytes)")
        return file_path

    def remove(self, path: Path) -> bool:
        """Delete a stored upload. Returns False if it was already gone."""
        try:
            Path(path).unlink()
            logger.debug(f"Removed upload: {path}")
            return True
        except FileNotFoundError:
            return False


_store_instance: Optional[UploadStore] = None


def get_upload_store() -> UploadStore:
    """Get or create the global upload store."""
    global _store_instance
    if _store_instance is None:
        _store_instance = UploadStore()
    return _store_instance
