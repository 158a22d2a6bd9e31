"""Legal states and transitions for designs and vendor products.

Each ``apply_*`` function checks the transition table and every guard
before touching the entity, so a rejected transition leaves it unchanged.
Committing the result is the caller's job.
"""
from datetime import datetime, timezone

from podshop.errors import IllegalStateTransitionError
from podshop.models.states import (
    DesignEvent,
    DesignStatus,
    PostValidationAction,
    ProductEvent,
    ProductStatus,
)

DESIGN_TRANSITIONS = {
    (DesignStatus.DRAFT, DesignEvent.SUBMIT): DesignStatus.PENDING,
    (DesignStatus.PENDING, DesignEvent.APPROVE): DesignStatus.VALIDATED,
    (DesignStatus.PENDING, DesignEvent.REJECT): DesignStatus.REJECTED,
    (DesignStatus.REJECTED, DesignEvent.RESUBMIT): DesignStatus.PENDING,
}

PRODUCT_TRANSITIONS = {
    (ProductStatus.DRAFT, ProductEvent.SUBMIT): ProductStatus.PENDING,
    (ProductStatus.REJECTED, ProductEvent.RESUBMIT): ProductStatus.PENDING,
    (ProductStatus.PENDING, ProductEvent.APPROVE_PUBLISH): ProductStatus.PUBLISHED,
    (ProductStatus.PENDING, ProductEvent.APPROVE_DRAFT): ProductStatus.DRAFT,
    (ProductStatus.PENDING, ProductEvent.REJECT): ProductStatus.REJECTED,
    (ProductStatus.DRAFT, ProductEvent.PUBLISH): ProductStatus.PUBLISHED,
    (ProductStatus.DRAFT, ProductEvent.CASCADE_PUBLISH): ProductStatus.PUBLISHED,
    (ProductStatus.PENDING, ProductEvent.CASCADE_PUBLISH): ProductStatus.PUBLISHED,
    (ProductStatus.DRAFT, ProductEvent.CASCADE_DRAFT): ProductStatus.DRAFT,
    (ProductStatus.PENDING, ProductEvent.CASCADE_DRAFT): ProductStatus.DRAFT,
    # Only the cascade may take a published product back to draft.
    (ProductStatus.PUBLISHED, ProductEvent.CASCADE_DRAFT): ProductStatus.DRAFT,
}

_VALIDATING_EVENTS = {
    ProductEvent.APPROVE_PUBLISH,
    ProductEvent.APPROVE_DRAFT,
    ProductEvent.CASCADE_PUBLISH,
    ProductEvent.CASCADE_DRAFT,
}


def _now():
    return datetime.now(timezone.utc)


def cascade_event_for(action):
    """Product event the cascade applies for a post-validation action."""
    if PostValidationAction(action) is PostValidationAction.AUTO_PUBLISH:
        return ProductEvent.CASCADE_PUBLISH
    return ProductEvent.CASCADE_DRAFT


def approval_event_for(action):
    """Product event for an admin approving a product directly."""
    if PostValidationAction(action) is PostValidationAction.AUTO_PUBLISH:
        return ProductEvent.APPROVE_PUBLISH
    return ProductEvent.APPROVE_DRAFT


def design_target(status, event):
    """Return the target status, or None if the edge does not exist."""
    return DESIGN_TRANSITIONS.get((DesignStatus(status), DesignEvent(event)))


def product_target(status, event):
    return PRODUCT_TRANSITIONS.get((ProductStatus(status), ProductEvent(event)))


def apply_design_event(design, event, actor_id=None, reason=None, now=None):
    """Move a design along one edge of the moderation state machine.

    Raises:
        IllegalStateTransitionError for an unknown edge or failed guard
    """
    event = DesignEvent(event)
    current = DesignStatus(design.status)
    target = design_target(current, event)

    def illegal(detail=None):
        return IllegalStateTransitionError("design", design.id, current, event, detail)

    if target is None:
        raise illegal()
    if event in (DesignEvent.APPROVE, DesignEvent.REJECT) and actor_id is None:
        raise illegal("validator identity required")
    if event is DesignEvent.REJECT and not (reason and reason.strip()):
        raise illegal("rejection reason required")

    now = now or _now()
    design.status = target
    if event is DesignEvent.SUBMIT:
        design.submitted_at = now
        design.rejection_reason = None
    elif event is DesignEvent.APPROVE:
        design.validated_at = now
        design.validated_by = actor_id
        design.rejection_reason = None
        design.published_at = now
    elif event is DesignEvent.REJECT:
        design.validated_at = now
        design.validated_by = actor_id
        design.rejection_reason = reason.strip()
        design.published_at = None
    elif event is DesignEvent.RESUBMIT:
        design.submitted_at = now
        design.rejection_reason = None
        design.validated_at = None
        design.validated_by = None
    return target


def apply_product_event(product, event, design=None, actor_id=None, reason=None, now=None):
    """Move a vendor product along one edge of the publication state machine.

    ``design`` defaults to ``product.design``. A product can never enter
    PUBLISHED, nor be validated, while its design is not validated.

    Raises:
        IllegalStateTransitionError for an unknown edge or failed guard
    """
    event = ProductEvent(event)
    current = ProductStatus(product.status)
    target = product_target(current, event)
    if design is None:
        design = product.design

    def illegal(detail=None):
        return IllegalStateTransitionError(
            "vendor_product", product.id, current, event, detail
        )

    if target is None:
        raise illegal()
    design_ok = design is None or design.status == DesignStatus.VALIDATED
    if (target is ProductStatus.PUBLISHED or event in _VALIDATING_EVENTS) and not design_ok:
        raise illegal("design is not validated")
    if event in _VALIDATING_EVENTS and actor_id is None:
        raise illegal("validator identity required")
    if event is ProductEvent.REJECT:
        if actor_id is None:
            raise illegal("validator identity required")
        if not (reason and reason.strip()):
            raise illegal("rejection reason required")
    if event is ProductEvent.PUBLISH and not product.is_validated:
        raise illegal("product must be validated before publishing")

    now = now or _now()
    product.status = target
    if event in (ProductEvent.SUBMIT, ProductEvent.RESUBMIT):
        product.submitted_at = now
        product.rejection_reason = None
    elif event in _VALIDATING_EVENTS:
        product.is_validated = True
        product.validated_at = now
        product.validated_by = actor_id
        product.rejection_reason = None
    elif event is ProductEvent.REJECT:
        product.is_validated = False
        product.validated_at = now
        product.validated_by = actor_id
        product.rejection_reason = reason.strip()

    if target is ProductStatus.PUBLISHED and current is not ProductStatus.PUBLISHED:
        product.published_at = now
    elif target is not ProductStatus.PUBLISHED:
        product.published_at = None
    return target
