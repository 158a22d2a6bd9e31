import logging
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis
from rq import Queue

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Set by init_redis. None means design locks fall back to process-local ones.
redis_client: _redis.Redis = None  # type: ignore
task_queue: Queue = None  # type: ignore


class DummyQueue:
    """Stands in for the notification queue when Redis is absent."""

    def enqueue(self, func, *args, **kwargs):
        logger.warning(
            "Redis not available, dropping %s for recipient %s (%s)",
            kwargs.get("event_type"), kwargs.get("recipient_id"), func,
        )
        return None


def init_redis(app):
    """Connect the design-lock client and the notification queue."""
    global redis_client, task_queue
    redis_client = None
    task_queue = DummyQueue()

    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, notifications dropped and design locks process-local")
        return

    timeout = app.config.get("REDIS_SOCKET_TIMEOUT")
    try:
        client = _redis.from_url(
            redis_url,
            decode_responses=False,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        client.ping()
    except (_redis.RedisError, ValueError) as e:
        logger.warning("Redis connection failed (%s), falling back to local locks", e)
        return

    redis_client = client
    task_queue = Queue(app.config["NOTIFICATION_QUEUE"], connection=client)


def redis_status():
    """``ok``, ``not configured`` or ``error``, for the health endpoint."""
    if redis_client is None:
        return "not configured"
    try:
        redis_client.ping()
    except _redis.RedisError:
        logger.exception("Redis health check failed")
        return "error"
    return "ok"
