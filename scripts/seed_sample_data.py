#!/usr/bin/env python3
"""Seed sample designs and vendor products for local development.

Rows are written directly with placeholder image URLs, so no object
storage is needed. Designs are left PENDING with a mix of AUTO_PUBLISH and
TO_DRAFT products, ready for `flask validate-design <id>`.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timezone

from podshop import create_app
from podshop.extensions import db
from podshop.models.design import Design
from podshop.models.states import (
    DesignCategory,
    DesignStatus,
    PostValidationAction,
    ProductStatus,
)
from podshop.models.vendor_product import VendorProduct
from podshop.services.hashing import content_fingerprint

app = create_app()

SAMPLE_DESIGNS = [
    {
        "vendor_id": 101,
        "name": "Neon Skull",
        "category": DesignCategory.ILLUSTRATION,
        "tags": ["skull", "neon", "cyberpunk"],
        "products": [
            ("Neon Skull Tee", 1, 2500, PostValidationAction.AUTO_PUBLISH),
            ("Neon Skull Hoodie", 2, 4500, PostValidationAction.TO_DRAFT),
        ],
    },
    {
        "vendor_id": 101,
        "name": "Retro Sun",
        "category": DesignCategory.LOGO,
        "tags": ["retro", "sun", "80s"],
        "products": [
            ("Retro Sun Mug", 3, 1200, PostValidationAction.AUTO_PUBLISH),
        ],
    },
    {
        "vendor_id": 102,
        "name": "Wave Pattern",
        "category": DesignCategory.PATTERN,
        "tags": ["wave", "ocean"],
        "products": [
            ("Wave Tote Bag", 4, 1800, PostValidationAction.TO_DRAFT),
            ("Wave Phone Case", 5, 1500, PostValidationAction.AUTO_PUBLISH),
        ],
    },
]

COLORS = ["c0392b", "f39c12", "2980b9"]


def seed():
    with app.app_context():
        if Design.query.first():
            print("Designs already exist, skipping seed.")
            return

        now = datetime.now(timezone.utc)
        for i, item in enumerate(SAMPLE_DESIGNS):
            color = COLORS[i % len(COLORS)]
            fake_bytes = f"sample-design-{item['name']}".encode()
            design = Design(
                vendor_id=item["vendor_id"],
                name=item["name"],
                category=item["category"],
                tags=item["tags"],
                image_url=f"https://placehold.co/600x600/{color}/fff?text={item['name']}",
                storage_key=f"designs/sample-{i + 1}.png",
                content_hash=content_fingerprint(fake_bytes),
                width=600,
                height=600,
                file_format="png",
                file_size=len(fake_bytes),
                status=DesignStatus.PENDING,
                submitted_at=now,
                usage_count=len(item["products"]),
            )
            db.session.add(design)

            for name, base_product_id, price, action in item["products"]:
                db.session.add(
                    VendorProduct(
                        vendor_id=item["vendor_id"],
                        design=design,
                        base_product_id=base_product_id,
                        name=name,
                        price=price,
                        stock=25,
                        colors=[1, 2],
                        sizes=[1, 2, 3],
                        post_validation_action=action,
                        status=ProductStatus.PENDING,
                        submitted_at=now,
                    )
                )

            db.session.flush()
            print(f"  Created design {design.id}: {item['name']} ({len(item['products'])} products)")

        db.session.commit()
        print(f"\nSeeded {len(SAMPLE_DESIGNS)} pending designs.")


if __name__ == "__main__":
    seed()
