"""
Video metadata persistence. Plain functions over a Session; callers own the transaction.
"""
from sqlalchemy import desc
from sqlalchemy.orm import Session

from cowatch.models.video import Video


def create_video(db: Session, video: Video) -> Video:
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


def get_video(db: Session, video_id: int) -> Video | None:
    return db.query(Video).filter(Video.id == video_id).first()


def list_videos_for_user(db: Session, user_id: int) -> list[Video]:
    """All videos owned by user, most recent upload first."""
    return (
        db.query(Video)
        .filter(Video.user_id == user_id)
        .order_by(desc(Video.uploaded_at), desc(Video.id))
        .all()
    )


def delete_video(db: Session, video: Video) -> None:
    db.delete(video)
    db.commit()
