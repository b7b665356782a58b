import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from uptimebot.monitor import Target
from uptimebot.schema import create_schema
from uptimebot.target_repository import (
    TargetNotFoundError,
    TargetRepository,
    TargetRepositoryError,
)
from uptimebot.user_target import UserTarget


@pytest.fixture
def repo():
    db = sqlite3.connect(":memory:")
    create_schema(db)
    yield TargetRepository(db)
    db.close()


def make(user_id, url="example.org", status="up", enabled=False, seconds=30, changed=None):
    return UserTarget(
        user_id=user_id,
        target=Target(
            url=url,
            status=status,
            enabled=enabled,
            interval=timedelta(seconds=seconds),
            status_changed_at=changed or datetime.now(timezone.utc),
        ),
    )


def test_create_valid_target(repo):
    original = make(1)
    changed = original.status_changed_at
    created = repo.create(original)
    assert created.id > 0
    assert created.user_id == 1
    assert created.url == "example.org"
    assert abs(created.status_changed_at - changed) < timedelta(seconds=1)


def test_create_empty_url_fails(repo):
    with pytest.raises(TargetRepositoryError, match="URL cannot be empty"):
        repo.create(make(1, url=""))


def test_create_invalid_user_id_fails(repo):
    with pytest.raises(TargetRepositoryError, match="invalid UserID: 0"):
        repo.create(make(0))


def test_create_invalid_url_fails(repo):
    with pytest.raises(TargetRepositoryError, match="invalid URL"):
        repo.create(make(1, url="http://[bad"))


def test_create_normalises_time_to_utc(repo):
    local = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    created = repo.create(make(1, changed=local))
    fetched = repo.get_by_id(created.id)
    assert fetched.status_changed_at == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


def test_update_status_and_enabled(repo):
    created = repo.create(make(1))
    created.status = "down"
    created.enabled = True
    created.status_changed_at = datetime.now(timezone.utc)
    updated = repo.update(created)

    fetched = repo.get_by_id(created.id)
    assert fetched.id == updated.id
    assert fetched.url == updated.url
    assert fetched.status == "down"
    assert fetched.enabled is True
    assert fetched.interval == updated.interval
    assert fetched.user_id == updated.user_id
    assert fetched.status_changed_at == updated.status_changed_at


def test_update_non_existent_target(repo):
    missing = make(1)
    missing.id = 999
    missing.status = "down"
    with pytest.raises(TargetNotFoundError):
        repo.update(missing)


def test_delete_existing_target(repo):
    created = repo.create(make(1))
    repo.delete(created.id)
    with pytest.raises(TargetNotFoundError):
        repo.get_by_id(created.id)


def test_delete_non_existent_target(repo):
    with pytest.raises(TargetNotFoundError):
        repo.delete(999)


def test_get_all(repo):
    specs = [
        ("example1.org", "up", True, 30),
        ("example2.org", "down", False, 60),
        ("example3.org", "up", True, 90),
    ]
    created = {
        url: repo.create(make(1, url=url, status=status, enabled=enabled, seconds=secs))
        for url, status, enabled, secs in specs
    }
    found = {t.id: t for t in repo.get_all()}
    assert len(found) == 3
    for url, status, enabled, secs in specs:
        item = found[created[url].id]
        assert item.url == url
        assert item.status == status
        assert item.enabled is enabled
        assert item.interval == timedelta(seconds=secs)


@pytest.mark.parametrize(
    "user_id, expected_urls",
    [
        (1, ["example1.org", "example2.org"]),
        (2, ["example3.org"]),
        (999, []),
    ],
)
def test_get_all_by_user_id(repo, user_id, expected_urls):
    repo.create(make(1, url="example1.org", enabled=True))
    repo.create(make(1, url="example2.org", status="down", seconds=60))
    repo.create(make(2, url="example3.org", enabled=True, seconds=90))
    urls = sorted(t.url for t in repo.get_all_by_user_id(user_id))
    assert urls == expected_urls


def test_update_status(repo):
    created = repo.create(make(1))
    created.target.status_changed_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
    repo.update_status(created.target, "error")
    fetched = repo.get_by_id(created.id)
    assert fetched.status == "error"
    assert fetched.status_changed_at == datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_update_status_missing_target(repo):
    with pytest.raises(TargetNotFoundError):
        repo.update_status(Target(id=42), "down")