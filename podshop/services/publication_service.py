"""Admin validation decisions on designs and their cascade to products.

Steps, per decision:

1. Take the per-design lock and load the design.
2. Apply approve/reject through the state machine and commit. This part is
   all-or-nothing: an illegal transition or a failed commit leaves the
   design exactly as it was.
3. On approval, apply each linked product's post-validation action, one
   commit per product in ascending id order. A failing product is rolled
   back, recorded as FAILED and the loop moves on.
4. After everything is durable, notify every affected vendor once.

Products created on a design after it was validated are picked up by
``auto_validate_products_for_design`` and the sweep over all designs.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

from podshop.errors import IllegalStateTransitionError, PodshopError
from podshop.extensions import db
from podshop.models.audit_log import AuditLog
from podshop.models.design import Design
from podshop.models.states import Decision, DesignEvent, ProductEvent
from podshop.repositories import design_repository as design_repo
from podshop.repositories import vendor_product_repository as product_repo
from podshop.services import notification_service
from podshop.services.locks import design_lock
from podshop.services.state_machine import apply_design_event, apply_product_event, cascade_event_for

logger = logging.getLogger(__name__)

OK = "OK"
FAILED = "FAILED"

_CASCADE_AUDIT_ACTIONS = {
    ProductEvent.CASCADE_PUBLISH: "PRODUCT_CASCADE_PUBLISHED",
    ProductEvent.CASCADE_DRAFT: "PRODUCT_CASCADE_DRAFT",
}

_AUTO_AUDIT_ACTIONS = {
    ProductEvent.CASCADE_PUBLISH: "PRODUCT_AUTO_PUBLISHED",
    ProductEvent.CASCADE_DRAFT: "PRODUCT_AUTO_DRAFT",
}


@dataclass
class ProductResult:
    product_id: int
    vendor_id: int
    outcome: str
    status: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self):
        data = {
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "outcome": self.outcome,
            "status": self.status,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class DecisionResult:
    design: Design
    decision: Decision
    product_results: List[ProductResult] = field(default_factory=list)

    @property
    def failed(self):
        return [r for r in self.product_results if r.outcome == FAILED]

    @property
    def warnings(self):
        """Human-readable cascade failures; empty when everything applied."""
        failed = self.failed
        if not failed:
            return []
        summary = (
            f"Design validated, but {len(failed)} of {len(self.product_results)} "
            f"products could not be updated"
        )
        return [summary] + [f"Product {r.product_id}: {r.error}" for r in failed]

    def to_dict(self):
        return {
            "design": self.design.to_dict(),
            "decision": self.decision.value,
            "product_results": [r.to_dict() for r in self.product_results],
            "warnings": self.warnings,
        }


def parse_decision(decision):
    if isinstance(decision, Decision):
        return decision
    value = str(decision).strip().upper()
    if value in ("VALIDATE", "APPROVED"):
        value = Decision.APPROVE.value
    try:
        return Decision(value)
    except ValueError:
        raise ValueError(f"Unknown decision: {decision}")


def apply_design_validation_decision(design_id, decision, validator_id, reason=None):
    """Approve or reject a PENDING design and cascade an approval to products.

    Returns:
        DecisionResult; per-product failures are reported in
        ``product_results`` rather than raised

    Raises:
        NotFoundError if the design does not exist or is deleted
        IllegalStateTransitionError if the design is not PENDING or a guard
            fails (missing validator, empty rejection reason)
        PersistenceError if the design lock or the design commit fails
    """
    decision = parse_decision(decision)
    event = DesignEvent.APPROVE if decision is Decision.APPROVE else DesignEvent.REJECT

    with design_lock(design_id):
        design = design_repo.get(design_id, for_update=True)
        previous = design.status
        try:
            apply_design_event(design, event, actor_id=validator_id, reason=reason)
        except IllegalStateTransitionError:
            db.session.rollback()
            logger.warning(
                "Rejected %s decision on design %s in state %s",
                decision.value, design_id, previous.value,
            )
            raise

        db.session.add(
            AuditLog(
                actor_id=validator_id,
                action="DESIGN_VALIDATED" if decision is Decision.APPROVE else "DESIGN_REJECTED",
                design_id=design.id,
                payload={"from": previous.value, "reason": design.rejection_reason},
            )
        )
        design_repo.save(design)
        logger.info(
            "Design %d %s by %s", design.id, design.status.value, validator_id
        )

        products = product_repo.list_for_design(design.id)
        affected_owners = {p.vendor_id for p in products}
        results = []
        # Rejection leaves products as they are; they stay unpublishable.
        if decision is Decision.APPROVE:
            results = _cascade(design, products, validator_id)

    result = DecisionResult(design=design, decision=decision, product_results=results)
    _notify(result, affected_owners)

    if result.failed:
        logger.warning(
            "Design %d validated with %d/%d product failures",
            design.id, len(result.failed), len(results),
        )
    return result


def _cascade(design, products, validator_id, audit_actions=None, label="approve"):
    audit_actions = audit_actions or _CASCADE_AUDIT_ACTIONS
    results = []
    for product in products:
        product_id = product.id
        vendor_id = product.vendor_id
        event = cascade_event_for(product.post_validation_action)
        try:
            previous = product.status
            apply_product_event(product, event, design=design, actor_id=validator_id)
            db.session.add(
                AuditLog(
                    actor_id=validator_id,
                    action=audit_actions[event],
                    design_id=design.id,
                    vendor_product_id=product_id,
                    payload={"from": previous.value, "to": product.status.value},
                )
            )
            product_repo.save(product)
        except Exception as e:
            db.session.rollback()
            logger.exception(
                "Cascade failed for product %d of design %d (%s)",
                product_id, design.id, label,
            )
            results.append(
                ProductResult(product_id, vendor_id, FAILED, error=str(e))
            )
            continue
        results.append(
            ProductResult(product_id, vendor_id, OK, status=product.status.value)
        )
    return results


def auto_validate_products_for_design(design_id, admin_id):
    """Apply post-validation actions to products added after approval.

    Products linked to an already VALIDATED design are never reached by the
    approval cascade. This sweeps the live DRAFT/PENDING ones that are still
    unvalidated, with the same per-product isolation.

    Raises:
        NotFoundError if the design does not exist or is deleted
        IllegalStateTransitionError if the design is not VALIDATED
        PersistenceError if the design lock cannot be taken
    """
    with design_lock(design_id):
        design = design_repo.get(design_id, for_update=True)
        if not design.is_validated:
            db.session.rollback()
            raise IllegalStateTransitionError(
                "design", design_id, design.status, "auto_validate",
                "design is not validated",
            )
        products = product_repo.list_unvalidated_for_design(design.id)
        results = _cascade(
            design, products, admin_id,
            audit_actions=_AUTO_AUDIT_ACTIONS, label="auto-validate",
        )

    by_owner = OrderedDict()
    for r in results:
        if r.outcome == OK:
            by_owner.setdefault(r.vendor_id, []).append(r.to_dict())
    for owner, updated in by_owner.items():
        notification_service.notify(
            owner,
            notification_service.PRODUCT_VALIDATED,
            {"design_id": design.id, "design_name": design.name, "products": updated},
        )

    failed = [r for r in results if r.outcome == FAILED]
    logger.info(
        "Auto-validated %d products of design %d (%d failed)",
        len(results) - len(failed), design.id, len(failed),
    )
    return results


def auto_validate_all_eligible_products(admin_id):
    """Run ``auto_validate_products_for_design`` over every eligible design.

    A design that fails as a whole (lock busy, state changed under us) is
    logged and skipped. Returns ``{design_id: [ProductResult, ...]}``.
    """
    outcomes = OrderedDict()
    for design_id in product_repo.list_designs_awaiting_auto_validation():
        try:
            outcomes[design_id] = auto_validate_products_for_design(design_id, admin_id)
        except PodshopError as e:
            db.session.rollback()
            logger.warning("Skipped auto-validation of design %d: %s", design_id, e)
    return outcomes


def _notify(result, affected_owners):
    """One event per affected vendor: the design owner, then product owners."""
    design = result.design
    approved = result.decision is Decision.APPROVE
    by_owner = OrderedDict()
    by_owner[design.vendor_id] = []
    for owner in sorted(affected_owners):
        by_owner.setdefault(owner, [])
    for r in result.product_results:
        by_owner[r.vendor_id].append(r.to_dict())

    base = {
        "design_id": design.id,
        "design_name": design.name,
        "decision": result.decision.value,
    }
    if not approved:
        base["reason"] = design.rejection_reason

    for owner, products in by_owner.items():
        if not approved:
            event_type = notification_service.DESIGN_REJECTED
        elif owner == design.vendor_id:
            event_type = notification_service.DESIGN_VALIDATED
        else:
            event_type = notification_service.DESIGN_PRODUCTS_UPDATED
        notification_service.notify(owner, event_type, dict(base, products=products))
