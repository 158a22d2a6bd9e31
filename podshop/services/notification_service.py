"""Outbound vendor/admin notifications.

``notify`` only enqueues; delivery happens in the notification worker.
Notifications are best-effort and never raise into the caller.
"""
import logging

from flask import current_app
from rq import Retry

from podshop import extensions

logger = logging.getLogger(__name__)

DESIGN_SUBMITTED = "design.submitted"
DESIGN_VALIDATED = "design.validated"
DESIGN_REJECTED = "design.rejected"
DESIGN_PRODUCTS_UPDATED = "design.products_updated"
PRODUCT_VALIDATED = "product.validated"
PRODUCT_REJECTED = "product.rejected"
PRODUCT_PUBLISHED = "product.published"

EVENT_TYPES = {
    DESIGN_SUBMITTED,
    DESIGN_VALIDATED,
    DESIGN_REJECTED,
    DESIGN_PRODUCTS_UPDATED,
    PRODUCT_VALIDATED,
    PRODUCT_REJECTED,
    PRODUCT_PUBLISHED,
}


def notify(recipient_id, event_type, payload):
    """Queue one notification. Failures are logged, never raised."""
    try:
        extensions.task_queue.enqueue(
            "podshop.workers.notifications.deliver_notification",
            recipient_id=recipient_id,
            event_type=event_type,
            payload=payload,
            retry=Retry(max=3, interval=[10, 60, 300]),
        )
    except Exception:
        logger.exception(
            "Failed to queue %s notification for %s", event_type, recipient_id
        )


def notify_admins(event_type, payload):
    for admin_id in current_app.config["ADMIN_IDS"]:
        notify(admin_id, event_type, payload)
