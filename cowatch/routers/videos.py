"""
Personal videos: upload, list, info, stream and delete. Every route needs a Bearer token;
only the owner may read, stream or delete a video.
"""
import logging
from pathlib import Path
from urllib.parse import quote
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from cowatch.auth import get_request_context, require_user
from cowatch.database import get_db
from cowatch.errors import ErrorKind, VideoError
from cowatch.schemas.user import RequestContext
from cowatch.schemas.video import MessageResponse, VideoSummary, VideoUploadResponse
from cowatch.services.video_service import DEFAULT_CONTENT_TYPE, VideoService, get_video_service
from cowatch.services.video_storage import CHUNK_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])

MAX_DESCRIPTION_LENGTH = 1000

# Status per error kind, per route. Kinds missing from a table fall back to 500.
_INFO_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHORIZATION_DENIED: status.HTTP_403_FORBIDDEN,
}
_STREAM_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHORIZATION_DENIED: status.HTTP_403_FORBIDDEN,
}
# Not-found and permission denied are deliberately indistinguishable here
_DELETE_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHORIZATION_DENIED: status.HTTP_400_BAD_REQUEST,
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_for(exc: VideoError, table: dict, prefix: str = "") -> JSONResponse:
    status_code = table.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s: %s", exc.kind.value, exc.message)
    return _error(status_code, prefix + exc.message)


def _unexpected(exc: Exception, status_code: int, prefix: str = "") -> JSONResponse:
    """Failures outside the VideoError taxonomy (database, OS) still answer with a JSON error."""
    logger.exception("Unexpected failure: %s", exc)
    return _error(status_code, prefix + str(exc))


def _content_disposition(filename: str) -> str:
    # Header values are latin-1; non-ASCII names go in the RFC 5987 form
    quoted = quote(filename)
    if quoted != filename:
        return f"inline; filename*=utf-8''{quoted}"
    return f'inline; filename="{filename}"'


def _stream_file(path: Path):
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            yield chunk


@router.post(
    "/upload",
    response_model=VideoUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_video(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    description: str | None = Form(None),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    """Upload a video with a title and optional description."""
    title = (title or "").strip()
    if not title:
        return _error(status.HTTP_400_BAD_REQUEST, "Title is required")
    description = (description or "").strip() or None
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
        )

    try:
        user = require_user(db, ctx)
        video = service.upload(
            db,
            file.file,
            file.filename,
            file.content_type,
            file.size,
            title,
            description,
            user,
        )
    except VideoError as e:
        return _error_for(e, {}, prefix="Failed to upload video: ")
    except Exception as e:
        return _unexpected(e, status.HTTP_500_INTERNAL_SERVER_ERROR, prefix="Failed to upload video: ")

    return VideoUploadResponse(
        video_id=video.id,
        message="Video uploaded successfully",
        filename=video.filename,
        file_size=video.file_size,
    )


@router.get("/my-videos", response_model=list[VideoSummary])
def list_my_videos(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    """Caller's videos, newest first."""
    try:
        user = require_user(db, ctx)
        return service.list_for_owner(db, user)
    except VideoError as e:
        return _error_for(e, {}, prefix="Failed to retrieve videos: ")
    except Exception as e:
        return _unexpected(e, status.HTTP_500_INTERNAL_SERVER_ERROR, prefix="Failed to retrieve videos: ")


@router.get("/{video_id}", response_model=VideoSummary)
def get_video_info(
    video_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    try:
        video = service.get_by_id(db, video_id)
        summary = service.summarize(db, video)
    except VideoError as e:
        return _error_for(e, _INFO_STATUS)
    except Exception as e:
        return _unexpected(e, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if summary.uploader_username != ctx.username:
        return _error(status.HTTP_403_FORBIDDEN, "Access denied")
    return summary


@router.get("/{video_id}/stream")
def stream_video(
    video_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    """
    Whole-file stream with the stored content type. No Range support.
    Content-Disposition: inline (play, not download).
    """
    try:
        video = service.get_by_id(db, video_id)
        summary = service.summarize(db, video)
        if summary.uploader_username != ctx.username:
            return _error(status.HTTP_403_FORBIDDEN, "Access denied")
        path, file_size = service.resolve_file(video)
    except VideoError as e:
        return _error_for(e, _STREAM_STATUS)
    except Exception as e:
        return _unexpected(e, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return StreamingResponse(
        _stream_file(path),
        status_code=200,
        media_type=video.content_type or DEFAULT_CONTENT_TYPE,
        headers={
            "Content-Length": str(file_size),
            "Content-Disposition": _content_disposition(video.filename),
        },
    )


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(
    video_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    try:
        user = require_user(db, ctx)
        service.delete(db, video_id, user)
    except VideoError as e:
        return _error_for(e, _DELETE_STATUS)
    except Exception as e:
        return _unexpected(e, status.HTTP_400_BAD_REQUEST)
    return MessageResponse(message="Video deleted successfully")
