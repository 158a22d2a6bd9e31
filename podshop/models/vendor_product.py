from datetime import datetime, timezone
from podshop.extensions import db
from podshop.models.design import isoformat
from podshop.models.states import Lifecycle, PostValidationAction, ProductStatus


class VendorProduct(db.Model):
    __tablename__ = "vendor_products"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.BigInteger, nullable=False, index=True)
    # Null only for legacy wizard products that carry no design.
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    base_product_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    price = db.Column(db.Integer, nullable=False)  # minor units
    stock = db.Column(db.Integer, nullable=False, default=0)
    colors = db.Column(db.JSON, default=list)  # base catalog color ids
    sizes = db.Column(db.JSON, default=list)  # base catalog size ids
    post_validation_action = db.Column(
        db.Enum(PostValidationAction, native_enum=False, length=20),
        nullable=False,
        default=PostValidationAction.AUTO_PUBLISH,
    )
    status = db.Column(
        db.Enum(ProductStatus, native_enum=False, length=20),
        nullable=False,
        default=ProductStatus.DRAFT,
        index=True,
    )
    is_validated = db.Column(db.Boolean, nullable=False, default=False)
    submitted_at = db.Column(db.DateTime(timezone=True))
    validated_at = db.Column(db.DateTime(timezone=True))
    validated_by = db.Column(db.BigInteger)
    rejection_reason = db.Column(db.Text)
    published_at = db.Column(db.DateTime(timezone=True))
    lifecycle = db.Column(
        db.Enum(Lifecycle, native_enum=False, length=10),
        nullable=False,
        default=Lifecycle.ACTIVE,
        index=True,
    )
    deleted_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    design = db.relationship("Design", back_populates="vendor_products")
    positions = db.relationship(
        "DesignPosition",
        backref="vendor_product",
        lazy="select",
        cascade="all, delete-orphan",
    )

    @property
    def is_published(self):
        return self.status == ProductStatus.PUBLISHED

    @property
    def is_deleted(self):
        return self.lifecycle == Lifecycle.DELETED

    @property
    def price_display(self):
        """Price in major currency units."""
        return self.price / 100

    def to_dict(self):
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "design_id": self.design_id,
            "base_product_id": self.base_product_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "colors": self.colors or [],
            "sizes": self.sizes or [],
            "post_validation_action": self.post_validation_action.value,
            "status": self.status.value,
            "is_validated": self.is_validated,
            "rejection_reason": self.rejection_reason,
            "validated_at": isoformat(self.validated_at),
            "validated_by": self.validated_by,
            "published_at": isoformat(self.published_at),
            "positions": [p.to_dict() for p in self.positions],
        }

    def __repr__(self):
        status = getattr(self.status, "value", self.status)
        return f"<VendorProduct {self.id}: {self.name} [{status}]>"
