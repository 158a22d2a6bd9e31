"""Tests for the JSON API blueprint."""
import io

from podshop.errors import PersistenceError
from podshop.models.states import DesignStatus, ProductStatus
from podshop.services import design_service

VENDOR = {"X-Actor-Id": "7"}
OTHER_VENDOR = {"X-Actor-Id": "8"}
ADMIN = {"X-Actor-Id": "9001"}


def _upload(client, png, headers=VENDOR, name="Retro Cat"):
    return client.post(
        "/api/designs",
        data={"file": (io.BytesIO(png), "cat.png"), "name": name, "category": "logo"},
        headers=headers,
        content_type="multipart/form-data",
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["db"] == "ok"
    assert data["redis"] == "not configured"


def test_upload_requires_actor(client, make_png):
    resp = _upload(client, make_png(), headers={})
    assert resp.status_code == 401


def test_upload_and_reuse(client, make_png):
    png = make_png()
    first = _upload(client, png)
    assert first.status_code == 201
    body = first.get_json()
    assert body["was_created"] is True
    assert body["design"]["status"] == "DRAFT"
    assert body["design"]["category"] == "LOGO"

    second = _upload(client, png, headers=OTHER_VENDOR)
    assert second.status_code == 200
    assert second.get_json()["was_created"] is False
    assert second.get_json()["design"]["id"] == body["design"]["id"]


def test_upload_base64_json(client, make_png):
    import base64

    payload = "data:image/png;base64," + base64.b64encode(make_png()).decode()
    resp = client.post(
        "/api/designs",
        json={"image_base64": payload, "name": "Inline"},
        headers=VENDOR,
    )
    assert resp.status_code == 201


def test_upload_invalid_image(client):
    resp = _upload(client, b"not an image")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_asset"


def test_upload_persistence_failure_is_503(client, make_png, monkeypatch):
    def broken(*args, **kwargs):
        raise PersistenceError("bucket exploded: secret-host:9000")

    monkeypatch.setattr(design_service.storage_service, "store", broken)
    resp = _upload(client, make_png())
    assert resp.status_code == 503
    assert "secret-host" not in resp.get_json()["message"]


def test_design_not_found(client):
    resp = client.post("/api/designs/999/submit", headers=VENDOR)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_full_validation_flow(client, make_png, queue):
    design_id = _upload(client, make_png()).get_json()["design"]["id"]

    resp = client.post(
        "/api/vendor-products",
        json={
            "design_id": design_id,
            "base_product_id": 3,
            "name": "Retro Tee",
            "price": 2599,
            "post_validation_action": "AUTO_PUBLISH",
            "position": {"x": 10, "y": 20},
        },
        headers=VENDOR,
    )
    assert resp.status_code == 201
    product = resp.get_json()["product"]
    assert product["positions"][0]["x"] == 10.0

    assert client.post(f"/api/vendor-products/{product['id']}/submit", headers=VENDOR).status_code == 200
    resp = client.post(f"/api/designs/{design_id}/submit", headers=VENDOR)
    assert resp.get_json()["design"]["status"] == DesignStatus.PENDING.value

    resp = client.post(
        f"/api/admin/designs/{design_id}/validation",
        json={"decision": "APPROVE"},
        headers=ADMIN,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["design"]["status"] == "VALIDATED"
    assert body["product_results"] == [{
        "product_id": product["id"],
        "vendor_id": 7,
        "outcome": "OK",
        "status": ProductStatus.PUBLISHED.value,
    }]
    assert body["warnings"] == []

    status = client.get(f"/api/designs/{design_id}/status", headers=VENDOR).get_json()
    assert status["is_validated"] is True


def test_validation_requires_admin(client, design_factory):
    design = design_factory(vendor_id=7)
    resp = client.post(
        f"/api/admin/designs/{design.id}/validation",
        json={"decision": "APPROVE"},
        headers=VENDOR,
    )
    assert resp.status_code == 403


def test_illegal_transition_is_409(client, design_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.DRAFT)
    resp = client.post(
        f"/api/admin/designs/{design.id}/validation",
        json={"decision": "APPROVE"},
        headers=ADMIN,
    )
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["error"] == "illegal_transition"
    assert body["entity"] == "design"
    assert body["from_state"] == "DRAFT"
    assert body["event"] == "approve"


def test_unknown_decision_is_400(client, design_factory):
    design = design_factory(vendor_id=7)
    resp = client.post(
        f"/api/admin/designs/{design.id}/validation",
        json={"decision": "SHRUG"},
        headers=ADMIN,
    )
    assert resp.status_code == 400


def test_reject_with_reason(client, design_factory, queue):
    design = design_factory(vendor_id=7)
    resp = client.post(
        f"/api/admin/designs/{design.id}/validation",
        json={"decision": "REJECT", "reason": "Watermarked"},
        headers=ADMIN,
    )
    assert resp.status_code == 200
    assert resp.get_json()["design"]["rejection_reason"] == "Watermarked"

    resp = client.post(f"/api/designs/{design.id}/resubmit", headers=VENDOR)
    assert resp.get_json()["design"]["status"] == "PENDING"


def test_edit_and_delete_design(client, design_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.DRAFT)

    resp = client.patch(f"/api/designs/{design.id}", json={"name": "Renamed"}, headers=VENDOR)
    assert resp.get_json()["design"]["name"] == "Renamed"

    assert client.delete(f"/api/designs/{design.id}", headers=VENDOR).status_code == 204
    assert client.get(f"/api/designs/{design.id}/status", headers=VENDOR).status_code == 404


def test_vendor_product_endpoints(client, design_factory, product_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.DRAFT)
    product = product_factory(design, status=ProductStatus.DRAFT)
    url = f"/api/vendor-products/{product.id}"

    resp = client.patch(url, json={"price": 3100}, headers=VENDOR)
    assert resp.get_json()["product"]["price"] == 3100

    resp = client.patch(f"{url}/post-validation-action", json={"action": "TO_DRAFT"}, headers=VENDOR)
    assert resp.get_json()["product"]["post_validation_action"] == "TO_DRAFT"

    resp = client.put(
        f"{url}/position",
        json={"design_id": design.id, "position": {"x": 4, "y": 8}},
        headers=VENDOR,
    )
    assert resp.get_json()["position"]["y"] == 8.0

    resp = client.post(f"{url}/publish", headers=VENDOR)
    assert resp.status_code == 409

    assert client.delete(url, headers=OTHER_VENDOR).status_code == 404
    assert client.delete(url, headers=VENDOR).status_code == 204


def test_admin_product_validation(client, design_factory, product_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.VALIDATED)
    product = product_factory(design, vendor_id=8)

    resp = client.post(
        f"/api/admin/vendor-products/{product.id}/validation",
        json={"decision": "APPROVE"},
        headers=ADMIN,
    )
    assert resp.status_code == 200
    assert resp.get_json()["product"]["status"] == "PUBLISHED"


def test_edit_design_with_reserved_keys_is_400(client, design_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.DRAFT)

    for body in ({"vendor_id": 2}, {"design_id": 3}, ["name"]):
        resp = client.patch(f"/api/designs/{design.id}", json=body, headers=VENDOR)
        assert resp.status_code == 400, body


def test_edit_vendor_product_with_reserved_keys_is_400(client, design_factory, product_factory):
    product = product_factory(design_factory(vendor_id=7), status=ProductStatus.DRAFT)

    for body in ({"vendor_id": 2}, {"product_id": 3, "price": 10}):
        resp = client.patch(f"/api/vendor-products/{product.id}", json=body, headers=VENDOR)
        assert resp.status_code == 400, body


def test_auto_validate_endpoints(client, design_factory, product_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.VALIDATED)
    first = product_factory(design, vendor_id=8)
    second = product_factory(design_factory(vendor_id=7, status=DesignStatus.VALIDATED))

    resp = client.post(f"/api/admin/designs/{design.id}/auto-validate-products", headers=VENDOR)
    assert resp.status_code == 403

    resp = client.post(f"/api/admin/designs/{design.id}/auto-validate-products", headers=ADMIN)
    assert resp.status_code == 200
    assert resp.get_json()["product_results"] == [
        {"product_id": first.id, "vendor_id": 8, "outcome": "OK", "status": "PUBLISHED"}
    ]

    resp = client.post("/api/admin/vendor-products/auto-validate", headers=ADMIN)
    designs = resp.get_json()["designs"]
    assert [d["design_id"] for d in designs] == [second.design_id]


def test_auto_validate_unvalidated_design_is_409(client, design_factory):
    design = design_factory(vendor_id=7, status=DesignStatus.PENDING)
    resp = client.post(f"/api/admin/designs/{design.id}/auto-validate-products", headers=ADMIN)
    assert resp.status_code == 409
