from datetime import datetime
from pydantic import BaseModel, Field


class VideoSummary(BaseModel):
    """Read-only projection of a Video; file_path stays server-side."""
    id: int
    title: str
    description: str | None = None
    filename: str
    content_type: str = Field(alias="contentType")
    file_size: int = Field(alias="fileSize")
    uploaded_at: datetime = Field(alias="uploadedAt")
    uploader_username: str = Field(alias="uploaderUsername")

    class Config:
        populate_by_name = True


class VideoUploadResponse(BaseModel):
    video_id: int = Field(alias="videoId")
    message: str
    filename: str
    file_size: int = Field(alias="fileSize")

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
