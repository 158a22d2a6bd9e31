from datetime import datetime, timezone
from podshop.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.BigInteger, nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    vendor_product_id = db.Column(
        db.Integer,
        db.ForeignKey("vendor_products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    design = db.relationship("Design")
    vendor_product = db.relationship("VendorProduct")

    ACTIONS = {
        "DESIGN_CREATED",
        "DESIGN_REUSED",
        "DESIGN_EDITED",
        "DESIGN_SUBMITTED",
        "DESIGN_RESUBMITTED",
        "DESIGN_VALIDATED",
        "DESIGN_REJECTED",
        "DESIGN_DELETED",
        "DESIGN_COLLECTED",
        "PRODUCT_CREATED",
        "PRODUCT_EDITED",
        "PRODUCT_SUBMITTED",
        "PRODUCT_RESUBMITTED",
        "PRODUCT_ACTION_CHANGED",
        "PRODUCT_CASCADE_PUBLISHED",
        "PRODUCT_CASCADE_DRAFT",
        "PRODUCT_AUTO_PUBLISHED",
        "PRODUCT_AUTO_DRAFT",
        "PRODUCT_VALIDATED",
        "PRODUCT_REJECTED",
        "PRODUCT_PUBLISHED",
        "PRODUCT_DELETED",
    }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.actor_id}>"
