import io
from datetime import datetime, timezone

import pytest
from PIL import Image as PILImage

from podshop import create_app, extensions
from podshop.extensions import db as _db
from podshop.models.design import Design
from podshop.models.states import (
    DesignCategory,
    DesignStatus,
    Lifecycle,
    PostValidationAction,
    ProductStatus,
)
from podshop.models.vendor_product import VendorProduct
from podshop.services import storage_service
from podshop.services.hashing import content_fingerprint


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def db(app):
    """Fresh schema per test."""
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def client(app, db):
    return app.test_client()


class RecordingQueue:
    """Stands in for the RQ queue and keeps every enqueued job."""

    def __init__(self):
        self.jobs = []

    def enqueue(self, func, *args, **kwargs):
        self.jobs.append((func, kwargs))
        return None

    def notifications(self):
        return [
            (kw["recipient_id"], kw["event_type"], kw["payload"])
            for _, kw in self.jobs
        ]


@pytest.fixture(autouse=True)
def queue(monkeypatch):
    recording = RecordingQueue()
    monkeypatch.setattr(extensions, "task_queue", recording)
    return recording


@pytest.fixture(autouse=True)
def asset_store(monkeypatch):
    """Replace S3 with an in-memory content-addressed store."""
    stored = {}

    def fake_store(data, content_type="image/png", prefix="designs"):
        content_id, key = storage_service.storage_key_for(data, content_type, prefix)
        stored[key] = data
        return {
            "url": f"https://cdn.test/{key}",
            "content_id": content_id,
            "storage_key": key,
        }

    monkeypatch.setattr(storage_service, "store", fake_store)
    return stored


@pytest.fixture
def make_png():
    def _make(color=(200, 40, 40), size=(64, 48), fmt="PNG"):
        buffer = io.BytesIO()
        PILImage.new("RGB", size, color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def design_factory(db):
    """Insert a design row directly, bypassing upload and storage."""
    counter = {"n": 0}

    def _make(vendor_id=1, status=DesignStatus.PENDING, name=None, created_at=None):
        counter["n"] += 1
        n = counter["n"]
        design = Design(
            vendor_id=vendor_id,
            name=name or f"Design {n}",
            category=DesignCategory.ILLUSTRATION,
            image_url=f"https://cdn.test/designs/{n}.png",
            storage_key=f"designs/{n}.png",
            content_hash=content_fingerprint(f"design-bytes-{n}".encode()),
            width=600,
            height=400,
            file_format="png",
            file_size=1024,
            tags=[],
            status=status,
            lifecycle=Lifecycle.ACTIVE,
            usage_count=0,
            submitted_at=datetime.now(timezone.utc) if status != DesignStatus.DRAFT else None,
        )
        if created_at is not None:
            design.created_at = created_at
        db.session.add(design)
        db.session.commit()
        return design

    return _make


@pytest.fixture
def product_factory(db):
    def _make(
        design,
        vendor_id=None,
        action=PostValidationAction.AUTO_PUBLISH,
        status=ProductStatus.PENDING,
        name="Tee",
    ):
        product = VendorProduct(
            vendor_id=vendor_id if vendor_id is not None else design.vendor_id,
            design=design,
            base_product_id=1,
            name=name,
            price=2500,
            stock=10,
            colors=[1],
            sizes=[2],
            post_validation_action=action,
            status=status,
            is_validated=False,
            lifecycle=Lifecycle.ACTIVE,
        )
        db.session.add(product)
        db.session.commit()
        return product

    return _make
