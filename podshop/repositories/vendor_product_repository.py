"""Persistence for VendorProduct rows."""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from podshop.errors import NotFoundError, PersistenceError
from podshop.extensions import db
from podshop.models.design import Design
from podshop.models.states import DesignStatus, Lifecycle, ProductStatus
from podshop.models.vendor_product import VendorProduct

logger = logging.getLogger(__name__)

AWAITING_VALIDATION = (ProductStatus.DRAFT, ProductStatus.PENDING)


def get(product_id, vendor_id=None):
    """Load a live vendor product.

    Raises:
        NotFoundError if missing, soft-deleted, or owned by another vendor
    """
    product = db.session.get(VendorProduct, product_id)
    if product is None or product.is_deleted:
        raise NotFoundError("vendor_product", product_id)
    if vendor_id is not None and product.vendor_id != vendor_id:
        raise NotFoundError("vendor_product", product_id)
    return product


def list_for_design(design_id):
    """Live products referencing a design, in ascending id order."""
    return (
        VendorProduct.query.filter_by(design_id=design_id, lifecycle=Lifecycle.ACTIVE)
        .order_by(VendorProduct.id.asc())
        .all()
    )


def create(product):
    db.session.add(product)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Vendor product insert failed")
        raise PersistenceError("Could not create vendor product") from e
    return product


def save(product):
    """Commit pending changes to a product (and anything else in the session)."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Vendor product %s update failed", product.id)
        raise PersistenceError(f"Could not save vendor product {product.id}") from e
    return product


def soft_delete(product, now=None):
    product.lifecycle = Lifecycle.DELETED
    product.deleted_at = now or datetime.now(timezone.utc)
    return save(product)


def list_unvalidated_for_design(design_id):
    """Live, not yet validated products on a design, in ascending id order."""
    return (
        VendorProduct.query.filter_by(
            design_id=design_id, lifecycle=Lifecycle.ACTIVE, is_validated=False
        )
        .filter(VendorProduct.status.in_(AWAITING_VALIDATION))
        .order_by(VendorProduct.id.asc())
        .all()
    )


def list_designs_awaiting_auto_validation():
    """Ids of validated live designs that still have unvalidated live products."""
    rows = (
        db.session.query(VendorProduct.design_id)
        .join(Design, Design.id == VendorProduct.design_id)
        .filter(
            VendorProduct.lifecycle == Lifecycle.ACTIVE,
            VendorProduct.is_validated.is_(False),
            VendorProduct.status.in_(AWAITING_VALIDATION),
            Design.lifecycle == Lifecycle.ACTIVE,
            Design.status == DesignStatus.VALIDATED,
        )
        .distinct()
        .order_by(VendorProduct.design_id.asc())
        .all()
    )
    return [design_id for (design_id,) in rows]
