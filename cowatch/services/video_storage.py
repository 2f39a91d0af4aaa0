"""
Local file store for uploaded videos. Files are kept flat under one storage root
and named `<owner>_<uuid><ext>`, so names never come from the client.
"""
import logging
import uuid
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO

from cowatch.config import get_settings
from cowatch.errors import (
    EmptyFileError,
    FileTooLargeError,
    InvalidFilenameError,
    StorageDeleteError,
    StorageInitError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB


def resolve_storage_location(location: str) -> Path:
    """Absolute, normalized storage directory; created with parents if missing."""
    root = Path(location).expanduser().resolve()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageInitError(f"Could not create storage directory {root}: {e}") from e
    if not root.is_dir():
        raise StorageInitError(f"Storage location is not a directory: {root}")
    return root


def file_extension(original_name: str | None) -> str:
    """
    Everything from the last '.' onward, or '' when the name has no dot.
    An extension containing a path separator is dropped so the stored name stays flat.
    """
    if not original_name or "." not in original_name:
        return ""
    ext = original_name[original_name.rindex("."):]
    if "/" in ext or "\\" in ext:
        return ""
    return ext


class VideoStorage:
    def __init__(self, root: Path | str, max_upload_bytes: int | None = None):
        self._root = resolve_storage_location(str(root))
        self._max_upload_bytes = max_upload_bytes or None

    @property
    def root(self) -> Path:
        return self._root

    def store(self, content: BinaryIO, original_name: str | None, owner: str) -> str:
        """Write content to a new file under root. Returns the generated filename."""
        first = content.read(CHUNK_SIZE)
        if not first:
            raise EmptyFileError("Failed to store empty file")

        filename = f"{owner}_{uuid.uuid4()}{file_extension(original_name)}"
        target = self.resolve(filename)
        written = 0
        try:
            with target.open("wb") as f:
                chunk = first
                while chunk:
                    written += len(chunk)
                    if self._max_upload_bytes and written > self._max_upload_bytes:
                        raise FileTooLargeError(
                            f"File size exceeds {self._max_upload_bytes} bytes"
                        )
                    f.write(chunk)
                    chunk = content.read(CHUNK_SIZE)
        except FileTooLargeError:
            self._discard(target)
            raise
        except OSError as e:
            self._discard(target)
            raise StorageWriteError(f"Failed to store file: {e}") from e

        logger.info("Stored %s (%d bytes)", filename, written)
        return filename

    def resolve(self, filename: str) -> Path:
        """Path of a stored file. Existence is not checked."""
        path = (self._root / filename).resolve()
        if path.parent != self._root:
            raise InvalidFilenameError(f"Invalid stored filename: {filename!r}")
        return path

    def delete(self, filename: str) -> None:
        path = self.resolve(filename)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageDeleteError(f"Failed to delete file: {e}") from e

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove partial file %s: %s", path, e)


@lru_cache
def get_video_storage() -> VideoStorage:
    """Process-wide store built from settings; overridden in tests."""
    settings = get_settings()
    return VideoStorage(settings.video_storage_location, settings.video_max_upload_bytes)
