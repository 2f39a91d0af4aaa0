"""Uploaded video owned by one user. Bytes live under the storage root as `filename`."""
from datetime import datetime
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey
from cowatch.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    filename = Column(String(255), nullable=False, unique=True)  # <owner>_<uuid><ext>
    file_path = Column(String(1024), nullable=False)  # absolute path at upload time
    content_type = Column(String(100), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    uploaded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    # No relationship(): owner lookups go through user_repository
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
