import io

import pytest

from app.core.exceptions import ContentIOError, ContentNotFoundError, VideoNotFoundError
from app.domain.models.video import VideoMetadata, VideoState

BASE = "http://localhost:8080"


class FailingSource:
    def read(self, n=-1):
        raise OSError("disco cheio")


def test_intro_scenario(service):
    rec = service.submit_metadata(VideoMetadata(title="intro", duration=42), BASE)
    assert rec.id == 0
    assert rec.state is VideoState.PENDING

    payload = bytes(i % 251 for i in range(1024))
    status = service.upload_content(0, io.BytesIO(payload))
    assert status.state is VideoState.READY
    assert service.get_video(0).state is VideoState.READY

    sink = io.BytesIO()
    assert service.download_content(0, sink) == 1024
    assert sink.getvalue() == payload

    with pytest.raises(VideoNotFoundError):
        service.download_content(1, io.BytesIO())


def test_upload_unknown_id_stores_nothing(service):
    with pytest.raises(VideoNotFoundError):
        service.upload_content(3, io.BytesIO(b"abc"))
    assert not service.store.exists(3)


def test_download_pending_record_is_content_not_found(service):
    service.submit_metadata(VideoMetadata(title="sem dados"), BASE)
    with pytest.raises(ContentNotFoundError):
        service.download_content(0, io.BytesIO())


def test_leftover_payload_is_not_served_for_pending_record(service):
    # bytes gravados por um processo anterior com o mesmo id
    service.store.put(0, io.BytesIO(b"antigo"))
    service.submit_metadata(VideoMetadata(title="novo"), BASE)
    with pytest.raises(ContentNotFoundError):
        service.download_content(0, io.BytesIO())
    with pytest.raises(ContentNotFoundError):
        service.stream_content(0)


def test_failed_upload_keeps_record_pending(service):
    service.submit_metadata(VideoMetadata(title="x"), BASE)
    with pytest.raises(ContentIOError):
        service.upload_content(0, FailingSource())
    assert service.get_video(0).state is VideoState.PENDING


def test_reupload_to_ready_record_replaces_content(service):
    service.submit_metadata(VideoMetadata(title="x"), BASE)
    service.upload_content(0, io.BytesIO(b"v1"))
    assert service.upload_content(0, io.BytesIO(b"v2-longer")).state is VideoState.READY
    sink = io.BytesIO()
    service.download_content(0, sink)
    assert sink.getvalue() == b"v2-longer"


def test_stream_content_checks_catalog_then_store(service):
    with pytest.raises(VideoNotFoundError):
        service.stream_content(0)
    service.submit_metadata(VideoMetadata(title="x", content_type="video/mp4"), BASE)
    with pytest.raises(ContentNotFoundError):
        service.stream_content(0)

    service.upload_content(0, io.BytesIO(b"y" * 3000))
    record, chunks = service.stream_content(0)
    assert record.content_type == "video/mp4"
    assert b"".join(chunks) == b"y" * 3000


def test_list_and_ready_count(service):
    for t in ("a", "b", "c"):
        service.submit_metadata(VideoMetadata(title=t), BASE)
    service.upload_content(1, io.BytesIO(b"1"))
    assert [r.title for r in service.list_videos()] == ["a", "b", "c"]
    assert service.ready_count() == 1
