"""
Redis Repository Integration Tests

Runs the Redis-backed repositories against a real Redis server: the Lua
download counter under concurrency, short link SET NX and TTL, and email
uniqueness for accounts.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from linkdrop.domain.accounts import Account
from linkdrop.domain.artifacts import ArtifactRecord, ArtifactStore
from linkdrop.domain.errors import ArtifactNotFoundError
from linkdrop.domain.link_registry import LinkRegistry, ShortLink
from linkdrop.infrastructure.redis_account_repository import RedisAccountRepository
from linkdrop.infrastructure.redis_artifact_repository import RedisArtifactRepository
from linkdrop.infrastructure.redis_short_link_repository import RedisShortLinkRepository


def utc_now():
    return datetime.now(timezone.utc)


@pytest.fixture
def artifact_repository(redis_repo):
    return RedisArtifactRepository(redis_repo)


@pytest.fixture
def short_link_repository(redis_repo):
    return RedisShortLinkRepository(redis_repo)


def make_record(**overrides):
    options = {
        "storage_key": "uploads/abc/report.pdf",
        "original_name": "report.pdf",
        "size": 10,
        "owner_id": "guest:visitor-0001",
    }
    options.update(overrides)
    return ArtifactRecord.create(**options)


class TestArtifactRepository:
    def test_save_and_get(self, artifact_repository):
        record = make_record(password_plain="secret1!", expires_in_hours=2, download_limit=3)
        artifact_repository.save(record)
        assert artifact_repository.get(record.id) == record

    def test_increment_respects_limit(self, artifact_repository):
        record = make_record(download_limit=2)
        artifact_repository.save(record)

        assert artifact_repository.increment_download_count(record.id) == 1
        assert artifact_repository.increment_download_count(record.id) == 2
        assert artifact_repository.increment_download_count(record.id) is None
        assert artifact_repository.get(record.id).download_count == 2

    def test_increment_unlimited(self, artifact_repository):
        record = make_record()
        artifact_repository.save(record)
        for expected in range(1, 6):
            assert artifact_repository.increment_download_count(record.id) == expected

    def test_increment_missing(self, artifact_repository):
        with pytest.raises(ArtifactNotFoundError):
            artifact_repository.increment_download_count("missing")

    def test_concurrent_increments_never_exceed_limit(self, artifact_repository):
        record = make_record(download_limit=5)
        artifact_repository.save(record)
        results = []
        lock = threading.Lock()
        barrier = threading.Barrier(20)

        def attempt():
            barrier.wait()
            value = artifact_repository.increment_download_count(record.id)
            with lock:
                results.append(value)

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        granted = sorted(r for r in results if r is not None)
        assert granted == [1, 2, 3, 4, 5]
        assert results.count(None) == 15
        assert artifact_repository.get(record.id).download_count == 5

    def test_exhausted_record_is_found_by_sweep_scan(self, artifact_repository):
        record = make_record(download_limit=1)
        artifact_repository.save(record)
        artifact_repository.increment_download_count(record.id)

        expired = artifact_repository.find_expired(utc_now())
        assert [r.id for r in expired] == [record.id]

    def test_time_expired_records(self, artifact_repository):
        old = make_record(expires_in_hours=1, now=utc_now() - timedelta(hours=2))
        fresh = make_record(expires_in_hours=1)
        artifact_repository.save(old)
        artifact_repository.save(fresh)

        assert [r.id for r in artifact_repository.find_expired(utc_now())] == [old.id]

    def test_owner_listing_and_delete(self, artifact_repository):
        first = make_record(now=utc_now() - timedelta(minutes=5))
        second = make_record()
        other = make_record(owner_id="guest:someone-else")
        for record in (first, second, other):
            artifact_repository.save(record)

        listing = artifact_repository.list_by_owner("guest:visitor-0001")
        assert [r.id for r in listing] == [second.id, first.id]

        assert artifact_repository.delete(first.id) is True
        assert artifact_repository.delete(first.id) is False
        assert [r.id for r in artifact_repository.list_by_owner("guest:visitor-0001")] == [second.id]

    def test_store_records_downloads_atomically(self, artifact_repository):
        store = ArtifactStore(artifact_repository)
        record = store.create_record(
            storage_key="uploads/abc/report.pdf",
            original_name="report.pdf",
            size=10,
            owner_id="guest:visitor-0001",
        )
        assert store.record_successful_download(record.id) == 1


class TestShortLinkRepository:
    def test_set_nx_detects_collision(self, short_link_repository):
        link = ShortLink.create("https://app/download/1", ttl=timedelta(days=7), short_id="Ab3dE6gH")
        clash = ShortLink.create("https://app/download/2", ttl=timedelta(days=7), short_id="Ab3dE6gH")

        assert short_link_repository.save_if_absent(link) is True
        assert short_link_repository.save_if_absent(clash) is False
        assert short_link_repository.get("Ab3dE6gH").target_url == "https://app/download/1"

    def test_ttl_matches_retention(self, short_link_repository, redis_client):
        link = ShortLink.create("https://app/download/1", ttl=timedelta(days=7), short_id="Ab3dE6gH")
        short_link_repository.save_if_absent(link)

        ttl = redis_client.ttl("linkdrop_test:short_link:Ab3dE6gH")
        assert 7 * 24 * 3600 - 5 <= ttl <= 7 * 24 * 3600

    def test_registry_round_trip(self, short_link_repository):
        registry = LinkRegistry(short_link_repository, retention=timedelta(days=7))
        short_id = registry.create_short_link("https://app/download/abc")
        assert registry.resolve_short_link(short_id) == "https://app/download/abc"

    def test_purge_removes_keys_without_ttl(self, short_link_repository, redis_repo):
        lapsed = ShortLink.create(
            "https://app/download/1", ttl=timedelta(days=7), short_id="Zz9Zz9Zz",
            now=utc_now() - timedelta(days=8),
        )
        redis_repo.set_json("short_link:Zz9Zz9Zz", lapsed.to_dict())

        assert short_link_repository.purge_expired(utc_now()) == 1
        assert not redis_repo.exists("short_link:Zz9Zz9Zz")


class TestAccountRepository:
    def test_email_is_unique(self, redis_repo):
        repository = RedisAccountRepository(redis_repo)
        alice = Account.create("alice@example.com", "correct horse")
        impostor = Account.create("alice@example.com", "another password")

        assert repository.create(alice) is True
        assert repository.create(impostor) is False
        assert repository.get_by_email("alice@example.com").id == alice.id
        assert repository.get(impostor.id) is None
