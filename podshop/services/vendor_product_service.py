"""Vendor product creation, editing, and the vendor/admin publication paths.

Design-driven transitions live in ``publication_service``; this module
covers what vendors and admins do to a single product.
"""
import logging

from podshop.errors import IllegalStateTransitionError
from podshop.extensions import db
from podshop.models.audit_log import AuditLog
from podshop.models.position import DesignPosition
from podshop.models.states import (
    Lifecycle,
    PostValidationAction,
    ProductEvent,
    ProductStatus,
)
from podshop.models.vendor_product import VendorProduct
from podshop.repositories import design_repository as design_repo
from podshop.repositories import vendor_product_repository as product_repo
from podshop.services import notification_service
from podshop.services.state_machine import apply_product_event, approval_event_for

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"name", "description", "price", "stock", "colors", "sizes"}
POSITION_FIELDS = ("x", "y", "scale", "rotation")


def parse_action(action):
    if isinstance(action, PostValidationAction):
        return action
    try:
        return PostValidationAction(str(action).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown post-validation action: {action}")


def _parse_id_list(values, label):
    if values is None:
        return []
    try:
        return sorted({int(v) for v in values})
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a list of ids")


def _parse_price(value):
    try:
        price = int(value)
    except (TypeError, ValueError):
        raise ValueError("Price must be an integer amount in minor units.")
    if price < 0:
        raise ValueError("Price cannot be negative.")
    return price


def _parse_stock(value):
    try:
        stock = int(value)
    except (TypeError, ValueError):
        raise ValueError("Stock must be an integer.")
    if stock < 0:
        raise ValueError("Stock cannot be negative.")
    return stock


def create_vendor_product(vendor_id, design_id, base_product_id, data):
    """Create a DRAFT product built on ``design_id``.

    ``design_id`` may be None for legacy wizard products. The design must
    belong to the vendor, or have been handed to them by deduplication.

    ``data`` keys: name, price, and optional description, stock, colors,
    sizes, post_validation_action, position.
    """
    design = design_repo.get_usable_by(design_id, vendor_id) if design_id is not None else None

    name = (data.get("name") or "").strip()
    if not name:
        raise ValueError("Product name is required.")

    product = VendorProduct(
        vendor_id=vendor_id,
        design=design,
        base_product_id=int(base_product_id),
        name=name,
        description=data.get("description") or "",
        price=_parse_price(data.get("price")),
        stock=_parse_stock(data.get("stock", 0)),
        colors=_parse_id_list(data.get("colors"), "colors"),
        sizes=_parse_id_list(data.get("sizes"), "sizes"),
        post_validation_action=parse_action(
            data.get("post_validation_action", PostValidationAction.AUTO_PUBLISH)
        ),
        status=ProductStatus.DRAFT,
        is_validated=False,
        lifecycle=Lifecycle.ACTIVE,
    )
    if design is not None:
        design.usage_count = (design.usage_count or 0) + 1
        if data.get("position"):
            product.positions.append(_build_position(design, data["position"]))

    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="PRODUCT_CREATED",
            vendor_product=product,
            design_id=design.id if design else None,
            payload={"base_product_id": product.base_product_id},
        )
    )
    product_repo.create(product)
    logger.info(
        "Created vendor product %d for vendor %s on design %s",
        product.id, vendor_id, design_id,
    )
    return product


def update_vendor_product(product_id, vendor_id, fields):
    """Vendor edits before validation."""
    if not isinstance(fields, dict):
        raise ValueError("Expected an object of fields to update.")
    product = product_repo.get(product_id, vendor_id=vendor_id)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if product.is_validated or product.status == ProductStatus.PUBLISHED:
        raise IllegalStateTransitionError(
            "vendor_product", product.id, product.status, "edit",
            "validated products cannot be edited",
        )

    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise ValueError("Product name is required.")
        product.name = name
    if "description" in fields:
        product.description = fields["description"] or ""
    if "price" in fields:
        product.price = _parse_price(fields["price"])
    if "stock" in fields:
        product.stock = _parse_stock(fields["stock"])
    if "colors" in fields:
        product.colors = _parse_id_list(fields["colors"], "colors")
    if "sizes" in fields:
        product.sizes = _parse_id_list(fields["sizes"], "sizes")

    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="PRODUCT_EDITED",
            vendor_product_id=product.id,
            payload={"fields": sorted(fields)},
        )
    )
    return product_repo.save(product)


def update_post_validation_action(product_id, vendor_id, action):
    """Change what happens to the product once its design is validated."""
    product = product_repo.get(product_id, vendor_id=vendor_id)
    action = parse_action(action)
    if product.is_validated:
        raise IllegalStateTransitionError(
            "vendor_product", product.id, product.status, "change_action",
            "product already validated",
        )
    previous = product.post_validation_action
    product.post_validation_action = action
    db.session.add(
        AuditLog(
            actor_id=vendor_id,
            action="PRODUCT_ACTION_CHANGED",
            vendor_product_id=product.id,
            payload={"from": previous.value, "to": action.value},
        )
    )
    product_repo.save(product)
    logger.info("Product %d post-validation action -> %s", product.id, action.value)
    return product


def _apply(product, event, audit_action, actor_id, reason=None):
    previous = product.status
    apply_product_event(product, event, actor_id=actor_id, reason=reason)
    db.session.add(
        AuditLog(
            actor_id=actor_id,
            action=audit_action,
            vendor_product_id=product.id,
            design_id=product.design_id,
            payload={"from": previous.value, "to": product.status.value, "reason": reason},
        )
    )
    product_repo.save(product)
    logger.info(
        "Vendor product %d %s: %s -> %s",
        product.id, event.value, previous.value, product.status.value,
    )
    return product


def submit_vendor_product(product_id, vendor_id):
    """DRAFT → PENDING."""
    product = product_repo.get(product_id, vendor_id=vendor_id)
    return _apply(product, ProductEvent.SUBMIT, "PRODUCT_SUBMITTED", vendor_id)


def resubmit_vendor_product(product_id, vendor_id):
    """REJECTED → PENDING."""
    product = product_repo.get(product_id, vendor_id=vendor_id)
    return _apply(product, ProductEvent.RESUBMIT, "PRODUCT_RESUBMITTED", vendor_id)


def publish_validated_product(product_id, vendor_id):
    """Vendor publishes a validated DRAFT product by hand."""
    product = product_repo.get(product_id, vendor_id=vendor_id)
    _apply(product, ProductEvent.PUBLISH, "PRODUCT_PUBLISHED", vendor_id)
    notification_service.notify(
        product.vendor_id,
        notification_service.PRODUCT_PUBLISHED,
        {"product_id": product.id, "name": product.name},
    )
    return product


def validate_vendor_product(product_id, admin_id, approve, reason=None):
    """Admin decision on a single PENDING product.

    Used when a product reuses an already validated design, so no design
    cascade will ever reach it.
    """
    product = product_repo.get(product_id)
    if approve:
        event = approval_event_for(product.post_validation_action)
        _apply(product, event, "PRODUCT_VALIDATED", admin_id)
        notification_service.notify(
            product.vendor_id,
            notification_service.PRODUCT_VALIDATED,
            {
                "product_id": product.id,
                "name": product.name,
                "status": product.status.value,
            },
        )
    else:
        _apply(product, ProductEvent.REJECT, "PRODUCT_REJECTED", admin_id, reason=reason)
        notification_service.notify(
            product.vendor_id,
            notification_service.PRODUCT_REJECTED,
            {"product_id": product.id, "name": product.name, "reason": product.rejection_reason},
        )
    return product


def _build_position(design, position):
    try:
        values = {k: float(position[k]) for k in POSITION_FIELDS if k in position}
    except (TypeError, ValueError):
        raise ValueError("Position values must be numbers.")
    # Camel and snake case both arrive from clients.
    width = position.get("design_width", position.get("designWidth"))
    height = position.get("design_height", position.get("designHeight"))
    return DesignPosition(
        design_id=design.id,
        design_width=int(width) if width is not None else design.width,
        design_height=int(height) if height is not None else design.height,
        constraints=position.get("constraints") or {},
        **values,
    )


def save_design_position(product_id, vendor_id, design_id, position):
    """Create or replace the placement of a design on a product."""
    product = product_repo.get(product_id, vendor_id=vendor_id)
    design = design_repo.get(design_id)
    if product.design_id != design.id:
        raise ValueError(f"Design {design.id} is not used by product {product.id}")

    fresh = _build_position(design, position)
    existing = DesignPosition.query.filter_by(
        vendor_product_id=product.id, design_id=design.id
    ).first()
    if existing:
        for attr in POSITION_FIELDS + ("design_width", "design_height", "constraints"):
            value = getattr(fresh, attr)
            if value is not None:
                setattr(existing, attr, value)
        saved = existing
    else:
        product.positions.append(fresh)
        saved = fresh
    product_repo.save(product)
    return saved


def soft_delete_vendor_product(product_id, actor_id, is_admin=False):
    product = product_repo.get(product_id, vendor_id=None if is_admin else actor_id)
    db.session.add(
        AuditLog(
            actor_id=actor_id,
            action="PRODUCT_DELETED",
            vendor_product_id=product.id,
            design_id=product.design_id,
        )
    )
    product_repo.soft_delete(product)
    logger.info("Vendor product %d deleted by %s", product.id, actor_id)
    return product
