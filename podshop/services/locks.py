"""Mutual exclusion for validation decisions on a single design."""
import logging
import threading
from contextlib import contextmanager

from flask import current_app
from redis.exceptions import LockError, RedisError

from podshop import extensions
from podshop.errors import PersistenceError

logger = logging.getLogger(__name__)

# Used only when Redis is not configured (development, tests).
# design_id -> [lock, users]; an entry lives only while someone holds or waits on it.
_local_locks = {}
_local_registry_lock = threading.Lock()


def _lock_key(design_id):
    return f"design_decision:{design_id}"


@contextmanager
def _local_design_lock(design_id, wait):
    with _local_registry_lock:
        entry = _local_locks.setdefault(design_id, [threading.Lock(), 0])
        entry[1] += 1
    try:
        if not entry[0].acquire(timeout=wait):
            raise PersistenceError(f"Design {design_id} is locked by another decision")
        try:
            yield
        finally:
            entry[0].release()
    finally:
        with _local_registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                del _local_locks[design_id]


@contextmanager
def design_lock(design_id):
    """Hold the decision lock for ``design_id`` for the duration of the block.

    Raises:
        PersistenceError if the lock cannot be acquired in DESIGN_LOCK_WAIT
    """
    timeout = current_app.config["DESIGN_LOCK_TIMEOUT"]
    wait = current_app.config["DESIGN_LOCK_WAIT"]

    if extensions.redis_client is None:
        with _local_design_lock(design_id, wait):
            yield
        return

    lock = extensions.redis_client.lock(
        _lock_key(design_id), timeout=timeout, blocking_timeout=wait
    )
    try:
        acquired = lock.acquire()
    except RedisError as e:
        raise PersistenceError(f"Could not lock design {design_id}: {e}") from e
    if not acquired:
        raise PersistenceError(f"Design {design_id} is locked by another decision")

    try:
        yield
    finally:
        try:
            lock.release()
        except LockError:
            logger.warning("Lock for design %s expired before release", design_id)
