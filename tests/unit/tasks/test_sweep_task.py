"""
Unit tests for the expiry sweep task

Tests that run_sweep removes artifacts expired by time or quota, purges
lapsed short links, reports counts, and keeps going when a step fails.
"""

import io
from unittest.mock import Mock

import pytest

from linkdrop.application import DownloadRequest, UploadRequest, UploadService
from linkdrop.domain.errors import PersistenceError, UpstreamStorageError
from linkdrop.domain.events import ArtifactDeletedEvent
from linkdrop.tasks import SWEEP_TASK_NAME, run_sweep


def upload(upload_service, **options):
    request = UploadRequest.build(
        stream=io.BytesIO(b"payload"), filename="report.pdf", content_type="text/plain", **options
    )
    return upload_service.upload(request, "guest:visitor-0001")


@pytest.fixture
def sweep(artifact_store, artifact_service, link_registry):
    return lambda: run_sweep(artifact_store, artifact_service, link_registry)


def test_nothing_to_sweep(sweep, upload_service):
    upload(upload_service)
    assert sweep() == {
        "artifacts_removed": 0,
        "blobs_removed": 0,
        "short_links_purged": 0,
        "errors": [],
    }


def test_removes_time_and_quota_expired(sweep, upload_service, artifact_service, artifact_store,
                                        blob_storage, clock, published_events):
    timed = upload(upload_service, expires_in_hours="1").record
    quota = upload(upload_service, download_limit="1").record
    alive = upload(upload_service, expires_in_hours="48").record
    artifact_service.request_download(quota.id, DownloadRequest())
    clock.advance(hours=2)

    stats = sweep()

    assert stats["artifacts_removed"] == 2
    assert stats["blobs_removed"] == 2
    assert artifact_store.find_record(timed.id) is None
    assert artifact_store.find_record(quota.id) is None
    assert artifact_store.find_record(alive.id) is not None
    assert set(blob_storage.blobs) == {alive.storage_key}

    causes = [e.cause for e in published_events if isinstance(e, ArtifactDeletedEvent)]
    assert causes == ["sweep", "sweep"]


def test_purges_short_links_after_retention(sweep, upload_service, link_registry, short_link_repository, clock):
    upload(upload_service)
    clock.advance(days=7, seconds=1)

    assert sweep()["short_links_purged"] == 1
    assert len(short_link_repository) == 0


def test_blob_failure_still_removes_record(sweep, upload_service, artifact_store, blob_storage, clock):
    record = upload(upload_service, expires_in_hours="1").record
    clock.advance(hours=2)
    blob_storage.delete = Mock(side_effect=UpstreamStorageError("bucket down"))

    stats = sweep()

    assert stats["artifacts_removed"] == 1
    assert stats["blobs_removed"] == 0
    assert stats["errors"] == []
    assert artifact_store.find_record(record.id) is None


def test_errors_are_collected(artifact_service, link_registry):
    failing_store = Mock()
    failing_store.find_expired.side_effect = PersistenceError("redis down")
    failing_links = Mock()
    failing_links.purge_expired.side_effect = PersistenceError("redis down")

    stats = run_sweep(failing_store, artifact_service, failing_links)

    assert stats["artifacts_removed"] == 0
    assert len(stats["errors"]) == 2
    assert stats["errors"][0].startswith("Error listing expired artifacts")


def test_one_failing_artifact_does_not_stop_the_sweep(upload_service, artifact_store, link_registry, clock):
    first = upload(upload_service, expires_in_hours="1").record
    second = upload(upload_service, expires_in_hours="1").record
    clock.advance(hours=2)

    service = Mock()
    service.remove.side_effect = [PersistenceError("write failed"), True]

    stats = run_sweep(artifact_store, service, link_registry)

    assert stats["artifacts_removed"] == 1
    assert len(stats["errors"]) == 1
    assert {c.args[0].id for c in service.remove.call_args_list} == {first.id, second.id}


def test_registered_celery_task_uses_app_services(app, clock, artifact_repository):
    upload(app.container.resolve(UploadService), expires_in_hours="1")
    clock.advance(hours=2)

    stats = app.celery.tasks[SWEEP_TASK_NAME]()

    assert stats["artifacts_removed"] == 1
    assert len(artifact_repository) == 0
