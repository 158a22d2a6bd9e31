from datetime import datetime, timezone
from podshop.extensions import db
from podshop.models.states import DesignCategory, DesignStatus, Lifecycle


class Design(db.Model):
    __tablename__ = "designs"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.BigInteger, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    category = db.Column(
        db.Enum(DesignCategory, native_enum=False, length=20),
        nullable=False,
        default=DesignCategory.ILLUSTRATION,
    )
    image_url = db.Column(db.String(1024), nullable=False)
    storage_key = db.Column(db.String(512), nullable=False)
    thumbnail_url = db.Column(db.String(1024))
    content_hash = db.Column(db.String(64), nullable=False)
    width = db.Column(db.Integer, nullable=False)
    height = db.Column(db.Integer, nullable=False)
    file_format = db.Column(db.String(10), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    tags = db.Column(db.JSON, default=list)  # ["retro", "cat"]
    status = db.Column(
        db.Enum(DesignStatus, native_enum=False, length=20),
        nullable=False,
        default=DesignStatus.DRAFT,
        index=True,
    )
    submitted_at = db.Column(db.DateTime(timezone=True))
    validated_at = db.Column(db.DateTime(timezone=True))
    validated_by = db.Column(db.BigInteger)
    rejection_reason = db.Column(db.Text)
    published_at = db.Column(db.DateTime(timezone=True))
    usage_count = db.Column(db.Integer, nullable=False, default=0)
    lifecycle = db.Column(
        db.Enum(Lifecycle, native_enum=False, length=10),
        nullable=False,
        default=Lifecycle.ACTIVE,
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

    vendor_products = db.relationship(
        "VendorProduct",
        back_populates="design",
        lazy="dynamic",
        order_by="VendorProduct.id",
    )

    # One live design per fingerprint; deleted rows keep their hash.
    __table_args__ = (
        db.Index(
            "uq_designs_live_content_hash",
            "content_hash",
            unique=True,
            sqlite_where=db.text("lifecycle = 'ACTIVE'"),
            postgresql_where=db.text("lifecycle = 'ACTIVE'"),
        ),
    )

    @property
    def is_draft(self):
        return self.status == DesignStatus.DRAFT

    @property
    def is_pending(self):
        return self.status == DesignStatus.PENDING

    @property
    def is_validated(self):
        return self.status == DesignStatus.VALIDATED

    @property
    def is_rejected(self):
        return self.status == DesignStatus.REJECTED

    @property
    def is_published(self):
        """Designs are published exactly when validated."""
        return self.is_validated

    @property
    def is_deleted(self):
        return self.lifecycle == Lifecycle.DELETED

    def active_products(self):
        from podshop.models.vendor_product import VendorProduct

        return self.vendor_products.filter(
            VendorProduct.lifecycle == Lifecycle.ACTIVE
        )

    def to_dict(self):
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value if self.category else None,
            "image_url": self.image_url,
            "thumbnail_url": self.thumbnail_url,
            "content_hash": self.content_hash,
            "dimensions": {"width": self.width, "height": self.height},
            "format": self.file_format,
            "tags": self.tags or [],
            "status": self.status.value,
            "is_validated": self.is_validated,
            "rejection_reason": self.rejection_reason,
            "submitted_at": isoformat(self.submitted_at),
            "validated_at": isoformat(self.validated_at),
            "validated_by": self.validated_by,
            "usage_count": self.usage_count,
        }

    def __repr__(self):
        status = getattr(self.status, "value", self.status)
        return f"<Design {self.id}: {self.name} [{status}]>"


def isoformat(value):
    return value.isoformat() if value else None
