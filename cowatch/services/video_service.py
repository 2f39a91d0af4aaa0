"""
Video orchestration: store bytes, then persist metadata; ownership-gated delete and stream;
DTO projection with an explicit owner lookup.
"""
import logging
import os
import stat
from pathlib import Path
from typing import BinaryIO

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cowatch.errors import (
    AccessDeniedError,
    DataConsistencyError,
    InvalidFilenameError,
    MetadataWriteError,
    NotFoundError,
    StorageDeleteError,
)
from cowatch.models.user import User
from cowatch.models.video import Video
from cowatch.repositories import user_repository, video_repository
from cowatch.schemas.video import VideoSummary
from cowatch.services.video_storage import VideoStorage, get_video_storage

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class VideoService:
    def __init__(self, storage: VideoStorage):
        self._storage = storage

    def upload(
        self,
        db: Session,
        content: BinaryIO,
        original_name: str | None,
        content_type: str | None,
        size: int | None,
        title: str,
        description: str | None,
        owner: User,
    ) -> Video:
        """
        Write the file first, then insert the row. Content type and size come from the
        upload metadata; size falls back to the stored file only when none was declared.
        """
        filename = self._storage.store(content, original_name, owner.username)
        path = self._storage.root / filename
        if size is None:
            size = os.path.getsize(path)

        video = Video(
            title=title,
            description=description,
            filename=filename,
            file_path=str(path),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            file_size=size,
            user_id=owner.id,
        )
        try:
            video = video_repository.create_video(db, video)
        except SQLAlchemyError as e:
            db.rollback()
            self._discard(filename)
            raise MetadataWriteError(f"Failed to save video record: {e}") from e

        logger.info("Video %s uploaded by %s: %s", video.id, owner.username, filename)
        return video

    def list_for_owner(self, db: Session, owner: User) -> list[VideoSummary]:
        videos = video_repository.list_videos_for_user(db, owner.id)
        return [self._to_summary(v, owner.username) for v in videos]

    def get_by_id(self, db: Session, video_id: int) -> Video:
        """No ownership check here; callers compare the owner to the requester."""
        video = video_repository.get_video(db, video_id)
        if not video:
            raise NotFoundError(f"Video not found with id: {video_id}")
        return video

    def summarize(self, db: Session, video: Video) -> VideoSummary:
        owner = user_repository.get_user_by_id(db, video.user_id)
        if not owner:
            raise DataConsistencyError(f"Video {video.id} references missing user {video.user_id}")
        return self._to_summary(video, owner.username)

    def resolve_file(self, video: Video) -> tuple[Path, int]:
        """Stored file and its size on disk; NotFoundError when missing or unreadable."""
        path = self._storage.resolve(video.filename)
        try:
            st = path.stat()
        except OSError:
            raise NotFoundError("Video file not found")
        if not stat.S_ISREG(st.st_mode) or not os.access(path, os.R_OK):
            raise NotFoundError("Video file not found")
        return path, st.st_size

    def delete(self, db: Session, video_id: int, requester: User) -> None:
        """
        File removal is attempted before the row is removed. A failed file removal is
        logged and the row is deleted anyway, which may leave an orphaned file.
        """
        video = self.get_by_id(db, video_id)
        if video.user_id != requester.id:
            raise AccessDeniedError("You don't have permission to delete this video")

        try:
            self._storage.delete(video.filename)
        except (StorageDeleteError, InvalidFilenameError) as e:
            logger.warning("Video %s: file %s not removed: %s", video.id, video.filename, e)

        video_repository.delete_video(db, video)
        logger.info("Video %s deleted by %s", video_id, requester.username)

    def _discard(self, filename: str) -> None:
        try:
            self._storage.delete(filename)
        except (StorageDeleteError, InvalidFilenameError) as e:
            logger.warning("Orphaned upload %s left on disk: %s", filename, e)

    @staticmethod
    def _to_summary(video: Video, uploader_username: str) -> VideoSummary:
        return VideoSummary(
            id=video.id,
            title=video.title,
            description=video.description,
            filename=video.filename,
            content_type=video.content_type,
            file_size=video.file_size,
            uploaded_at=video.uploaded_at,
            uploader_username=uploader_username,
        )


def get_video_service(storage: VideoStorage = Depends(get_video_storage)) -> VideoService:
    return VideoService(storage)
