"""
Target thumbnail storage for Marksman.

Thumbnails are display-only: they are keyed by StoredTargetPattern.id and
their absence is never an error. Images are opaque encoded bytes (JPEG
from the capture flow).
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Protocol

from marksman.utils.config import Config

logger = logging.getLogger(__name__)


class ThumbnailStore(Protocol):
    """Keyed image storage for target photos."""

    def get(self, pattern_id: str) -> Optional[bytes]: ...

    def put(self, pattern_id: str, image: bytes) -> None: ...

    def delete(self, pattern_id: str) -> None: ...


class DirectoryThumbnailStore:
    """Stores each thumbnail as <pattern_id>.jpg in one directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else Config.get_thumbnails_dir()
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, pattern_id: str) -> Path:
        """Resolve the file for a pattern id.

        Raises:
            ValueError: If pattern_id is not a UUID, so no id can name a
                        file outside the directory.
        """
        try:
            key = uuid.UUID(pattern_id)
        except (TypeError, ValueError, AttributeError):
            raise ValueError(f"Invalid pattern id: {pattern_id!r}")
        return self.directory / f"{key}.jpg"

    def get(self, pattern_id: str) -> Optional[bytes]:
        path = self._path(pattern_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def put(self, pattern_id: str, image: bytes):
        # Write then rename so readers never see a partial file
        path = self._path(pattern_id)
        tmp = path.with_name(f"{path.stem}.{uuid.uuid4().hex}.tmp")
        try:
            tmp.write_bytes(image)
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)
        logger.debug(f"Thumbnail saved for {pattern_id} ({len(image)} bytes)")

    def delete(self, pattern_id: str):
        self._path(pattern_id).unlink(missing_ok=True)
