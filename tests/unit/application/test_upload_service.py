"""
Unit tests for UploadService.

Covers the happy path and the compensating deletes on partial failure.
"""

import io
from datetime import timedelta
from unittest.mock import patch

import pytest

from linkdrop.application import UploadRequest, UploadService
from linkdrop.application.upload_service import build_storage_key
from linkdrop.domain.blob_storage import SignedUrlService
from linkdrop.domain.errors import PersistenceError, UpstreamStorageError, ValidationError
from linkdrop.domain.events import (
    ArtifactDeletedEvent,
    ArtifactUploadedEvent,
    ShortLinkCreatedEvent,
)
from linkdrop.infrastructure.local_blob_storage import LocalBlobStorage

OWNER = "guest:visitor-0001"


class BrokenStream:
    """Yields one chunk, then fails like a dropped client connection."""

    def __init__(self):
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError("connection reset")
        return b"partial content"


def make_request(data=b"hello world", filename="report.pdf", **kwargs):
    return UploadRequest.build(
        stream=io.BytesIO(data), filename=filename, content_type="application/pdf", **kwargs
    )


class TestUpload:
    def test_upload_returns_short_link(self, upload_service, link_registry, artifact_store, blob_storage):
        result = upload_service.upload(make_request(), OWNER)

        assert result.link == f"https://api.linkdrop.test/s/{result.short_id}"
        assert result.long_url == f"https://app.linkdrop.test/download/{result.record.id}"
        assert result.to_dict() == {"success": True, "link": result.link, "fileId": result.record.id}

        assert link_registry.resolve_short_link(result.short_id) == result.long_url
        stored = artifact_store.get_record(result.record.id)
        assert stored.size == len(b"hello world")
        assert stored.original_name == "report.pdf"
        assert stored.content_type == "application/pdf"
        assert blob_storage.blobs[stored.storage_key] == b"hello world"

    def test_upload_with_options(self, upload_service, clock):
        result = upload_service.upload(
            make_request(password="secret1!", expires_in_hours="2", download_limit="3"), OWNER
        )
        record = result.record

        assert record.has_password
        assert record.download_limit == 3
        assert record.expires_at == clock() + timedelta(hours=2)

    def test_events_published(self, upload_service, published_events):
        result = upload_service.upload(make_request(password="secret1!"), OWNER)

        types = [type(e) for e in published_events]
        assert types == [ShortLinkCreatedEvent, ArtifactUploadedEvent]
        uploaded = published_events[1]
        assert uploaded.aggregate_id == result.record.id
        assert uploaded.has_password is True
        assert "secret1!" not in repr(published_events)

    def test_anonymous_upload(self, upload_service, artifact_repository, published_events):
        result = upload_service.upload(make_request(), None)

        assert result.record.owner_id is None
        assert artifact_repository.get(result.record.id) == result.record
        assert artifact_repository.list_by_owner(None) == []
        assert published_events[-1].owner_id is None

    def test_oversize_upload_rejected_and_blob_removed(self, upload_service, blob_storage, artifact_repository):
        with pytest.raises(ValidationError) as exc:
            upload_service.upload(make_request(data=b"x" * 2048), OWNER)

        assert exc.value.too_large is True
        assert blob_storage.blobs == {}
        assert len(artifact_repository) == 0

    def test_blob_failure_creates_nothing(self, upload_service, blob_storage, artifact_repository):
        blob_storage.fail_saves = True
        with pytest.raises(UpstreamStorageError):
            upload_service.upload(make_request(), OWNER)
        assert len(artifact_repository) == 0

    def test_failed_save_discards_partial_blob(self, upload_service, blob_storage, artifact_repository):
        with patch.object(blob_storage, "save", side_effect=UpstreamStorageError("disk full")):
            with patch.object(blob_storage, "delete", wraps=blob_storage.delete) as delete:
                with pytest.raises(UpstreamStorageError):
                    upload_service.upload(make_request(), OWNER)

        storage_key = delete.call_args.args[0]
        assert storage_key.startswith("uploads/")
        assert len(artifact_repository) == 0

    def test_interrupted_local_write_leaves_no_file(
        self, artifact_store, link_registry, event_publisher, artifact_repository, tmp_path
    ):
        base = tmp_path / "blobs"
        storage = LocalBlobStorage(str(base), SignedUrlService("secret", base_url="http://localhost/api/blobs"))
        service = UploadService(
            artifact_store,
            link_registry,
            storage,
            event_publisher,
            frontend_url="https://app.linkdrop.test",
            backend_url="https://api.linkdrop.test",
        )

        with pytest.raises(UpstreamStorageError):
            service.upload(UploadRequest.build(stream=BrokenStream(), filename="report.pdf"), OWNER)

        assert [p for p in base.rglob("*") if p.is_file()] == []
        assert len(artifact_repository) == 0

    def test_record_failure_removes_blob(self, upload_service, blob_storage, artifact_repository):
        with patch.object(artifact_repository, "save", side_effect=PersistenceError("down")):
            with pytest.raises(PersistenceError):
                upload_service.upload(make_request(), OWNER)
        assert blob_storage.blobs == {}

    def test_short_link_failure_rolls_back(
        self, upload_service, link_registry, blob_storage, artifact_repository, published_events
    ):
        with patch.object(link_registry, "create_short_link", side_effect=PersistenceError("no ids")):
            with pytest.raises(PersistenceError):
                upload_service.upload(make_request(), OWNER)

        assert len(artifact_repository) == 0
        assert blob_storage.blobs == {}
        assert len(published_events) == 1
        assert isinstance(published_events[0], ArtifactDeletedEvent)
        assert published_events[0].cause == "rollback"


class TestUploadRequest:
    def test_missing_file_rejected(self):
        with pytest.raises(ValidationError):
            UploadRequest.build(stream=None, filename=None)

    def test_blank_filename_rejected(self):
        with pytest.raises(ValidationError):
            UploadRequest.build(stream=io.BytesIO(b"x"), filename="   ")

    def test_empty_password_means_none(self):
        assert make_request(password="").password is None

    def test_bad_limit_rejected(self):
        with pytest.raises(ValidationError):
            make_request(download_limit="lots")


class TestStorageKey:
    def test_key_is_sanitized_and_unique(self):
        first = build_storage_key("../../etc/passwd")
        second = build_storage_key("../../etc/passwd")

        assert first.startswith("uploads/")
        assert ".." not in first
        assert first != second

    def test_unrepresentable_name_falls_back(self):
        assert build_storage_key("???").endswith("/file")
