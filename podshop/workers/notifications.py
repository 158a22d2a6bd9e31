"""RQ worker job: deliver a queued notification."""
import logging
import httpx
from flask import current_app, has_app_context
from podshop import create_app
from podshop.extensions import db
from podshop.models.notification import Notification

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def deliver_notification(recipient_id, event_type, payload):
    """Store the notification in the recipient's inbox and push it out.

    The inbox row is the source of truth; the webhook push is optional and
    its failure is raised so RQ can retry the job. A retried job does not
    duplicate the inbox row.
    """
    app = _get_app()
    with app.app_context():
        job_key = _job_key()
        notification = None
        if job_key:
            notification = Notification.query.filter(
                Notification.recipient_id == recipient_id,
                Notification.event_type == event_type,
                Notification.payload["job_id"].as_string() == job_key,
            ).first()

        if notification is None:
            notification = Notification(
                recipient_id=recipient_id,
                event_type=event_type,
                payload=dict(payload or {}, job_id=job_key) if job_key else (payload or {}),
            )
            db.session.add(notification)
            db.session.commit()
            logger.info("Stored %s notification for %s", event_type, recipient_id)

        webhook_url = app.config.get("NOTIFY_WEBHOOK_URL")
        if not webhook_url:
            return notification.id

        try:
            resp = httpx.post(
                webhook_url,
                json={
                    "id": notification.id,
                    "recipient_id": recipient_id,
                    "event_type": event_type,
                    "payload": payload or {},
                },
                timeout=app.config["NOTIFY_WEBHOOK_TIMEOUT"],
            )
            resp.raise_for_status()
        except httpx.HTTPError:
            logger.exception(
                "Webhook delivery failed for notification %d", notification.id
            )
            raise  # let RQ handle retry

        return notification.id


def _job_key():
    from rq import get_current_job

    job = get_current_job()
    return job.id if job else None
