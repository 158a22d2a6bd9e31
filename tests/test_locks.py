"""Tests for the per-design decision lock."""
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

from podshop import extensions
from podshop.errors import PersistenceError
from podshop.services import locks
from podshop.services.locks import design_lock


def test_local_lock_is_released(app):
    with design_lock(1):
        pass
    with design_lock(1):
        pass


def test_local_lock_is_exclusive(app):
    with design_lock(2):
        with pytest.raises(PersistenceError):
            with design_lock(2):
                pass


def test_local_locks_are_per_design(app):
    with design_lock(3):
        with design_lock(4):
            pass


def test_local_lock_registry_does_not_grow(app):
    for design_id in range(100, 150):
        with design_lock(design_id):
            assert design_id in locks._local_locks
    assert not any(100 <= key < 150 for key in locks._local_locks)


def test_local_lock_entry_kept_while_held(app):
    with design_lock(9):
        with pytest.raises(PersistenceError):
            with design_lock(9):
                pass
        assert 9 in locks._local_locks
    assert 9 not in locks._local_locks


def test_redis_lock_acquired_and_released(app, monkeypatch):
    client = MagicMock()
    lock = client.lock.return_value
    lock.acquire.return_value = True
    monkeypatch.setattr(extensions, "redis_client", client)

    with design_lock(5):
        lock.release.assert_not_called()

    client.lock.assert_called_once_with(
        "design_decision:5",
        timeout=app.config["DESIGN_LOCK_TIMEOUT"],
        blocking_timeout=app.config["DESIGN_LOCK_WAIT"],
    )
    lock.release.assert_called_once()


def test_redis_lock_busy(app, monkeypatch):
    client = MagicMock()
    client.lock.return_value.acquire.return_value = False
    monkeypatch.setattr(extensions, "redis_client", client)

    with pytest.raises(PersistenceError):
        with design_lock(6):
            pass


def test_redis_unavailable(app, monkeypatch):
    client = MagicMock()
    client.lock.return_value.acquire.side_effect = RedisConnectionError("down")
    monkeypatch.setattr(extensions, "redis_client", client)

    with pytest.raises(PersistenceError):
        with design_lock(7):
            pass


def test_expired_redis_lock_does_not_mask_result(app, monkeypatch):
    client = MagicMock()
    lock = client.lock.return_value
    lock.acquire.return_value = True
    lock.release.side_effect = LockError("expired")
    monkeypatch.setattr(extensions, "redis_client", client)

    with design_lock(8):
        result = "done"
    assert result == "done"
