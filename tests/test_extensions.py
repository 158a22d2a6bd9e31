"""Tests for Redis wiring: design-lock client, notification queue, health."""
import logging
from unittest.mock import MagicMock

import redis

from podshop import extensions


def test_no_redis_url_uses_local_fallbacks(app, monkeypatch):
    monkeypatch.setattr(extensions, "redis_client", MagicMock())
    monkeypatch.setattr(extensions, "task_queue", None)

    extensions.init_redis(app)

    assert extensions.redis_client is None
    assert isinstance(extensions.task_queue, extensions.DummyQueue)
    assert extensions.redis_status() == "not configured"


def test_unreachable_redis_falls_back(app, monkeypatch):
    client = MagicMock()
    client.ping.side_effect = redis.ConnectionError("refused")
    from_url = MagicMock(return_value=client)
    monkeypatch.setattr(extensions._redis, "from_url", from_url)
    monkeypatch.setitem(app.config, "REDIS_URL", "redis://cache.test:6379/0")
    monkeypatch.setattr(extensions, "redis_client", None)
    monkeypatch.setattr(extensions, "task_queue", None)

    extensions.init_redis(app)

    assert extensions.redis_client is None
    assert isinstance(extensions.task_queue, extensions.DummyQueue)
    assert from_url.call_args.kwargs["socket_timeout"] == app.config["REDIS_SOCKET_TIMEOUT"]


def test_connected_redis_backs_locks_and_queue(app, monkeypatch):
    client = MagicMock()
    queue_cls = MagicMock()
    monkeypatch.setattr(extensions, "Queue", queue_cls)
    monkeypatch.setattr(extensions._redis, "from_url", MagicMock(return_value=client))
    monkeypatch.setitem(app.config, "REDIS_URL", "redis://cache.test:6379/0")
    monkeypatch.setattr(extensions, "redis_client", None)
    monkeypatch.setattr(extensions, "task_queue", None)

    extensions.init_redis(app)

    assert extensions.redis_client is client
    assert extensions.task_queue is queue_cls.return_value
    queue_cls.assert_called_once_with(app.config["NOTIFICATION_QUEUE"], connection=client)
    assert extensions.redis_status() == "ok"

    client.ping.side_effect = redis.ConnectionError("gone")
    assert extensions.redis_status() == "error"


def test_dummy_queue_logs_dropped_notification(caplog):
    with caplog.at_level(logging.WARNING, logger="podshop.extensions"):
        result = extensions.DummyQueue().enqueue(
            "podshop.workers.notifications.deliver_notification",
            recipient_id=7,
            event_type="design.validated",
            payload={},
        )

    assert result is None
    assert "design.validated" in caplog.text
    assert "recipient 7" in caplog.text
