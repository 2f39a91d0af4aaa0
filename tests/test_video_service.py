import io
import os
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from cowatch.errors import AccessDeniedError, EmptyFileError, MetadataWriteError, NotFoundError, StorageDeleteError
from cowatch.models.video import Video
from cowatch.repositories import user_repository, video_repository
from cowatch.services.video_service import VideoService


@pytest.fixture
def service(storage):
    return VideoService(storage)


@pytest.fixture
def alice(db):
    return user_repository.create_user(db, "alice", "alice@example.com", "hash")


@pytest.fixture
def bob(db):
    return user_repository.create_user(db, "bob", "bob@example.com", "hash")


def _upload(service, db, owner, content=b"0123456789ab", name="clip.mp4", title="trip", **kwargs):
    params = {
        "content_type": "video/mp4",
        "size": len(content),
        "description": None,
    }
    params.update(kwargs)
    return service.upload(
        db,
        io.BytesIO(content),
        name,
        params["content_type"],
        params["size"],
        title,
        params["description"],
        owner,
    )


def test_upload_persists_record_and_file(service, db, storage, alice):
    video = _upload(service, db, alice, description="holiday")

    assert video.id is not None
    assert video.uploaded_at is not None
    assert video.user_id == alice.id
    assert video.title == "trip"
    assert video.description == "holiday"
    assert video.content_type == "video/mp4"
    assert video.file_size == 12
    assert video.filename.startswith("alice_") and video.filename.endswith(".mp4")
    assert video.file_path == str(storage.root / video.filename)
    assert (storage.root / video.filename).read_bytes() == b"0123456789ab"


def test_upload_uses_declared_metadata(service, db, alice):
    """Content type and size come from the upload, not from the disk."""
    video = _upload(service, db, alice, content_type="video/webm", size=999)
    assert video.content_type == "video/webm"
    assert video.file_size == 999


def test_upload_falls_back_when_metadata_missing(service, db, alice):
    video = _upload(service, db, alice, content_type=None, size=None)
    assert video.content_type == "application/octet-stream"
    assert video.file_size == 12


def test_upload_empty_file_creates_nothing(service, db, storage, alice):
    with pytest.raises(EmptyFileError):
        _upload(service, db, alice, content=b"")
    assert db.query(Video).count() == 0
    assert os.listdir(storage.root) == []


def test_upload_db_failure_removes_stored_file(service, db, storage, alice):
    with patch(
        "cowatch.services.video_service.video_repository.create_video",
        side_effect=OperationalError("INSERT", {}, Exception("db down")),
    ):
        with pytest.raises(MetadataWriteError):
            _upload(service, db, alice)
    assert os.listdir(storage.root) == []


def test_list_for_owner_newest_first(service, db, alice, bob):
    first = _upload(service, db, alice, title="first")
    second = _upload(service, db, alice, title="second")
    _upload(service, db, bob, title="not mine")

    summaries = service.list_for_owner(db, alice)

    assert [s.id for s in summaries] == [second.id, first.id]
    assert all(s.uploader_username == "alice" for s in summaries)


def test_list_for_owner_empty(service, db, alice):
    assert service.list_for_owner(db, alice) == []


def test_get_by_id_missing(service, db):
    with pytest.raises(NotFoundError):
        service.get_by_id(db, 12345)


def test_summarize_looks_up_owner(service, db, alice):
    video = _upload(service, db, alice)
    summary = service.summarize(db, video)
    assert summary.uploader_username == "alice"
    assert summary.file_size == 12
    assert "file_path" not in summary.model_dump()


def test_delete_removes_file_then_row(service, db, storage, alice):
    video = _upload(service, db, alice)
    filename = video.filename
    video_id = video.id

    service.delete(db, video_id, alice)

    assert not (storage.root / filename).exists()
    assert video_repository.get_video(db, video_id) is None


def test_delete_by_other_user_denied(service, db, storage, alice, bob):
    video = _upload(service, db, alice)
    with pytest.raises(AccessDeniedError):
        service.delete(db, video.id, bob)
    assert (storage.root / video.filename).exists()
    assert video_repository.get_video(db, video.id) is not None


def test_delete_missing_video(service, db, alice):
    with pytest.raises(NotFoundError):
        service.delete(db, 999, alice)


def test_delete_row_removed_when_file_delete_fails(service, db, storage, alice):
    """A storage failure is logged; the row still goes away."""
    video = _upload(service, db, alice)
    video_id = video.id
    with patch.object(storage, "delete", side_effect=StorageDeleteError("disk busy")):
        service.delete(db, video_id, alice)
    assert video_repository.get_video(db, video_id) is None


def test_resolve_file_missing_on_disk(service, db, storage, alice):
    video = _upload(service, db, alice)
    (storage.root / video.filename).unlink()
    with pytest.raises(NotFoundError):
        service.resolve_file(video)


def test_resolve_file_returns_size_on_disk(service, db, storage, alice):
    video = _upload(service, db, alice, size=999)
    path, size = service.resolve_file(video)
    assert path == storage.root / video.filename
    assert size == 12
