"""Persistence for Design rows."""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from podshop.errors import DuplicateContentError, NotFoundError, PersistenceError
from podshop.extensions import db
from podshop.models.audit_log import AuditLog
from podshop.models.design import Design
from podshop.models.states import DesignStatus, Lifecycle
from podshop.models.vendor_product import VendorProduct

logger = logging.getLogger(__name__)


def get(design_id, vendor_id=None, for_update=False):
    """Load a live design.

    Raises:
        NotFoundError if missing, soft-deleted, or owned by another vendor
    """
    design = db.session.get(Design, design_id, with_for_update=for_update)
    if design is None or design.is_deleted:
        raise NotFoundError("design", design_id)
    if vendor_id is not None and design.vendor_id != vendor_id:
        raise NotFoundError("design", design_id)
    return design


def get_usable_by(design_id, vendor_id):
    """Load a live design the vendor owns or has received through deduplication.

    Raises:
        NotFoundError otherwise
    """
    design = get(design_id)
    if design.vendor_id != vendor_id and not was_reused_by(design.id, vendor_id):
        raise NotFoundError("design", design_id)
    return design


def was_reused_by(design_id, vendor_id):
    return db.session.query(
        AuditLog.query.filter_by(
            design_id=design_id, actor_id=vendor_id, action="DESIGN_REUSED"
        ).exists()
    ).scalar()


def record_reuse(design, vendor_id):
    """Remember that ``vendor_id`` uploaded bytes already owned by ``design``."""
    if design.vendor_id == vendor_id or was_reused_by(design.id, vendor_id):
        return design
    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="DESIGN_REUSED",
            design_id=design.id,
            payload={"owner_id": design.vendor_id},
        )
    )
    return save(design)


def find_by_content_hash(content_hash):
    return Design.query.filter_by(
        content_hash=content_hash, lifecycle=Lifecycle.ACTIVE
    ).first()


def create(design):
    """Insert a design in its own transaction.

    Raises:
        DuplicateContentError if a live design already has the fingerprint
        PersistenceError on any other database failure
    """
    db.session.add(design)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning("Content hash conflict on design insert: %s", design.content_hash)
        raise DuplicateContentError(design.content_hash) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Design insert failed")
        raise PersistenceError("Could not create design") from e
    return design


def save(design):
    """Commit pending changes to a design (and anything else in the session)."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Design %s update failed", design.id)
        raise PersistenceError(f"Could not save design {design.id}") from e
    return design


def soft_delete(design, now=None):
    design.lifecycle = Lifecycle.DELETED
    design.deleted_at = now or datetime.now(timezone.utc)
    return save(design)


def has_active_products(design_id):
    return db.session.query(
        VendorProduct.query.filter_by(
            design_id=design_id, lifecycle=Lifecycle.ACTIVE
        ).exists()
    ).scalar()


def list_orphans(created_before):
    """DRAFT or REJECTED live designs older than ``created_before`` and unused."""
    live_refs = db.session.query(VendorProduct.design_id).filter(
        VendorProduct.design_id.isnot(None),
        VendorProduct.lifecycle == Lifecycle.ACTIVE,
    )
    return (
        Design.query.filter(
            Design.lifecycle == Lifecycle.ACTIVE,
            Design.status.in_([DesignStatus.DRAFT, DesignStatus.REJECTED]),
            Design.created_at < created_before,
            ~Design.id.in_(live_refs),
        )
        .order_by(Design.id.asc())
        .all()
    )
