from datetime import datetime, timezone
from podshop.extensions import db


class DesignPosition(db.Model):
    """Placement of a design on a vendor product image."""

    __tablename__ = "design_positions"

    id = db.Column(db.Integer, primary_key=True)
    vendor_product_id = db.Column(
        db.Integer,
        db.ForeignKey("vendor_products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="CASCADE"),
        nullable=False,
    )
    x = db.Column(db.Float, nullable=False, default=0.0)
    y = db.Column(db.Float, nullable=False, default=0.0)
    scale = db.Column(db.Float, nullable=False, default=1.0)
    rotation = db.Column(db.Float, nullable=False, default=0.0)
    # Natural size of the design captured when it was placed
    design_width = db.Column(db.Integer)
    design_height = db.Column(db.Integer)
    constraints = db.Column(db.JSON, default=dict)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "vendor_product_id", "design_id", name="uq_design_position"
        ),
    )

    def to_dict(self):
        return {
            "design_id": self.design_id,
            "x": self.x,
            "y": self.y,
            "scale": self.scale,
            "rotation": self.rotation,
            "design_width": self.design_width,
            "design_height": self.design_height,
            "constraints": self.constraints or {},
        }

    def __repr__(self):
        return f"<DesignPosition product={self.vendor_product_id} design={self.design_id}>"
