"""Design upload, deduplication and vendor-side lifecycle."""
import logging
from datetime import datetime, timedelta, timezone

from podshop.errors import (
    DuplicateContentError,
    IllegalStateTransitionError,
    PersistenceError,
)
from podshop.extensions import db
from podshop.models.audit_log import AuditLog
from podshop.models.design import Design
from podshop.models.states import DesignCategory, DesignEvent, DesignStatus, Lifecycle
from podshop.repositories import design_repository as design_repo
from podshop.services import (
    hashing,
    image_service,
    notification_service,
    storage_service,
)
from podshop.services.state_machine import apply_design_event

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = {DesignStatus.DRAFT, DesignStatus.REJECTED}
EDITABLE_FIELDS = {"name", "description", "category", "tags"}


def parse_tags(tags):
    """Accept a list or a comma-separated string; return a clean list."""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip().lower() for t in tags if t and t.strip()]


def parse_category(category):
    if isinstance(category, DesignCategory):
        return category
    try:
        return DesignCategory(str(category).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown design category: {category}")


def resolve_or_create_design(payload, metadata):
    """Return the design for an uploaded asset, creating it on first upload.

    Byte-identical uploads map to the same design regardless of who uploads
    them or under which URL; the existing row is returned untouched. When the
    uploader is not the owner, the reuse is recorded so the uploader may build
    products on the shared design.

    Args:
        payload: raw bytes or base64 / data-URL string
        metadata: dict with vendor_id, name, category, and optional
            description and tags

    Returns:
        (design, was_created)

    Raises:
        InvalidAssetError for empty or unreadable images
        PersistenceError if the asset store or database fails
        ValueError for bad metadata
    """
    data = hashing.decode_payload(payload)
    info = image_service.inspect_image(data)
    fingerprint = hashing.content_fingerprint(data)

    existing = design_repo.find_by_content_hash(fingerprint)
    if existing:
        logger.info(
            "Upload matches design %d (hash %s), reusing", existing.id, fingerprint[:12]
        )
        return design_repo.record_reuse(existing, metadata["vendor_id"]), False

    vendor_id = metadata["vendor_id"]
    name = (metadata.get("name") or "").strip()
    if not name:
        raise ValueError("Design name is required.")
    category = parse_category(metadata.get("category", DesignCategory.ILLUSTRATION))

    original = storage_service.store(data, content_type=info["content_type"])
    thumbnail = storage_service.store(
        image_service.create_thumbnail(data),
        content_type="image/jpeg",
        prefix="designs/thumbnails",
    )

    design = Design(
        vendor_id=vendor_id,
        name=name,
        description=metadata.get("description") or "",
        category=category,
        image_url=original["url"],
        storage_key=original["storage_key"],
        thumbnail_url=thumbnail["url"],
        content_hash=fingerprint,
        width=info["width"],
        height=info["height"],
        file_format=info["format"].lower(),
        file_size=info["size"],
        tags=parse_tags(metadata.get("tags")),
        status=DesignStatus.DRAFT,
        lifecycle=Lifecycle.ACTIVE,
        usage_count=0,
    )
    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="DESIGN_CREATED",
            design=design,
            payload={"content_hash": fingerprint, "name": name},
        )
    )

    try:
        design_repo.create(design)
    except DuplicateContentError:
        # Lost a race with a concurrent upload of the same bytes.
        winner = design_repo.find_by_content_hash(fingerprint)
        if winner is None:
            raise PersistenceError("Could not create design")
        logger.info("Concurrent upload resolved to design %d", winner.id)
        return design_repo.record_reuse(winner, vendor_id), False

    logger.info("Created design %d for vendor %s", design.id, vendor_id)
    return design, True


def _transition(design_id, vendor_id, event, action):
    design = design_repo.get(design_id, vendor_id=vendor_id)
    previous = design.status
    apply_design_event(design, event)
    db.session.add(
        AuditLog(
            actor_id=design.vendor_id,
            action=action,
            design_id=design.id,
            payload={"from": previous.value, "to": design.status.value},
        )
    )
    design_repo.save(design)
    logger.info("Design %d %s: %s -> %s", design.id, event.value, previous.value, design.status.value)
    notification_service.notify_admins(
        notification_service.DESIGN_SUBMITTED,
        {"design_id": design.id, "name": design.name, "vendor_id": design.vendor_id},
    )
    return design


def submit_design_for_validation(design_id, vendor_id=None):
    """DRAFT → PENDING."""
    return _transition(design_id, vendor_id, DesignEvent.SUBMIT, "DESIGN_SUBMITTED")


def resubmit_design(design_id, vendor_id=None):
    """REJECTED → PENDING, clearing the previous review."""
    return _transition(design_id, vendor_id, DesignEvent.RESUBMIT, "DESIGN_RESUBMITTED")


def update_design_metadata(design_id, vendor_id, fields):
    """Vendor edits to name, description, category and tags before review."""
    if not isinstance(fields, dict):
        raise ValueError("Expected an object of fields to update.")
    design = design_repo.get(design_id, vendor_id=vendor_id)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if design.status not in EDITABLE_STATUSES:
        raise IllegalStateTransitionError(
            "design", design.id, design.status, "edit", "only draft or rejected designs can be edited"
        )

    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise ValueError("Design name is required.")
        design.name = name
    if "description" in fields:
        design.description = fields["description"] or ""
    if "category" in fields:
        design.category = parse_category(fields["category"])
    if "tags" in fields:
        design.tags = parse_tags(fields["tags"])

    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="DESIGN_EDITED",
            design_id=design.id,
            payload={"fields": sorted(fields)},
        )
    )
    return design_repo.save(design)


def delete_design(design_id, vendor_id):
    """Soft-delete a design that no live product references."""
    design = design_repo.get(design_id, vendor_id=vendor_id)
    if design_repo.has_active_products(design.id):
        raise IllegalStateTransitionError(
            "design", design.id, design.lifecycle, "delete", "design is used by live products"
        )
    db.session.add(
        AuditLog(actor_id=vendor_id, action="DESIGN_DELETED", design_id=design.id)
    )
    design_repo.soft_delete(design)
    logger.info("Design %d deleted by vendor %s", design.id, vendor_id)
    return design


def collect_orphan_designs(max_age_days, actor_id=0, now=None):
    """Soft-delete stale DRAFT/REJECTED designs no live product uses.

    Returns the ids of collected designs. A failure on one design is logged
    and does not stop the sweep.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=max_age_days)
    collected = []
    for design in design_repo.list_orphans(cutoff):
        design_id = design.id
        db.session.add(
            AuditLog(
                actor_id=actor_id,
                action="DESIGN_COLLECTED",
                design_id=design_id,
                payload={"status": design.status.value},
            )
        )
        try:
            design_repo.soft_delete(design, now=now)
        except PersistenceError:
            logger.error("Could not collect orphan design %d", design_id)
            continue
        collected.append(design_id)
    logger.info("Collected %d orphan designs older than %s", len(collected), cutoff)
    return collected


def get_design_validation_status(design_id, vendor_id=None):
    design = design_repo.get(design_id, vendor_id=vendor_id)
    return {
        "id": design.id,
        "name": design.name,
        "status": design.status.value,
        "is_draft": design.is_draft,
        "is_pending": design.is_pending,
        "is_validated": design.is_validated,
        "rejection_reason": design.rejection_reason,
        "validated_at": design.validated_at.isoformat() if design.validated_at else None,
    }
