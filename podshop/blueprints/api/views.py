"""JSON endpoints for vendors and admins.

Authentication is handled upstream; the authenticated user id arrives in
the ``X-Actor-Id`` header.
"""
from flask import abort, current_app, request
from podshop.blueprints.api import api_bp
from podshop.models.states import Decision
from podshop.services import design_service, publication_service, vendor_product_service


def _actor_id():
    raw = request.headers.get("X-Actor-Id", "")
    try:
        return int(raw)
    except ValueError:
        abort(401)


def _admin_id():
    actor_id = _actor_id()
    if actor_id not in current_app.config["ADMIN_IDS"]:
        abort(403)
    return actor_id


def _json():
    return request.get_json(silent=True) or {}


# ---------------------------------------------------------------------------
# Designs
# ---------------------------------------------------------------------------

@api_bp.route("/designs", methods=["POST"])
def upload_design():
    """Upload a design as multipart ``file`` or JSON ``image_base64``."""
    vendor_id = _actor_id()
    if "file" in request.files:
        payload = request.files["file"].read()
        fields = request.form
    else:
        fields = _json()
        payload = fields.get("image_base64")

    metadata = {
        "vendor_id": vendor_id,
        "name": fields.get("name"),
        "description": fields.get("description"),
        "category": fields.get("category", "ILLUSTRATION"),
        "tags": fields.get("tags"),
    }
    design, was_created = design_service.resolve_or_create_design(payload, metadata)
    return {"design": design.to_dict(), "was_created": was_created}, (
        201 if was_created else 200
    )


@api_bp.route("/designs/<int:design_id>/submit", methods=["POST"])
def submit_design(design_id):
    design = design_service.submit_design_for_validation(design_id, vendor_id=_actor_id())
    return {"design": design.to_dict()}


@api_bp.route("/designs/<int:design_id>/resubmit", methods=["POST"])
def resubmit_design(design_id):
    design = design_service.resubmit_design(design_id, vendor_id=_actor_id())
    return {"design": design.to_dict()}


@api_bp.route("/designs/<int:design_id>", methods=["PATCH"])
def edit_design(design_id):
    design = design_service.update_design_metadata(design_id, _actor_id(), _json())
    return {"design": design.to_dict()}


@api_bp.route("/designs/<int:design_id>/status")
def design_status(design_id):
    return design_service.get_design_validation_status(design_id, vendor_id=_actor_id())


@api_bp.route("/designs/<int:design_id>", methods=["DELETE"])
def delete_design(design_id):
    design_service.delete_design(design_id, _actor_id())
    return "", 204


@api_bp.route("/admin/designs/<int:design_id>/validation", methods=["POST"])
def validate_design(design_id):
    """Approve or reject a design. Cascade failures come back as warnings."""
    admin_id = _admin_id()
    body = _json()
    result = publication_service.apply_design_validation_decision(
        design_id,
        body.get("decision", ""),
        validator_id=admin_id,
        reason=body.get("reason"),
    )
    return result.to_dict()


@api_bp.route("/admin/designs/<int:design_id>/auto-validate-products", methods=["POST"])
def auto_validate_design_products(design_id):
    results = publication_service.auto_validate_products_for_design(design_id, _admin_id())
    return {"design_id": design_id, "product_results": [r.to_dict() for r in results]}


@api_bp.route("/admin/vendor-products/auto-validate", methods=["POST"])
def auto_validate_all_products():
    outcomes = publication_service.auto_validate_all_eligible_products(_admin_id())
    return {
        "designs": [
            {"design_id": design_id, "product_results": [r.to_dict() for r in results]}
            for design_id, results in outcomes.items()
        ]
    }


# ---------------------------------------------------------------------------
# Vendor products
# ---------------------------------------------------------------------------

@api_bp.route("/vendor-products", methods=["POST"])
def create_vendor_product():
    body = _json()
    if "base_product_id" not in body:
        raise ValueError("base_product_id is required.")
    product = vendor_product_service.create_vendor_product(
        _actor_id(), body.get("design_id"), body["base_product_id"], body
    )
    return {"product": product.to_dict()}, 201


@api_bp.route("/vendor-products/<int:product_id>", methods=["PATCH"])
def edit_vendor_product(product_id):
    product = vendor_product_service.update_vendor_product(
        product_id, _actor_id(), _json()
    )
    return {"product": product.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>/submit", methods=["POST"])
def submit_vendor_product(product_id):
    product = vendor_product_service.submit_vendor_product(product_id, _actor_id())
    return {"product": product.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>/resubmit", methods=["POST"])
def resubmit_vendor_product(product_id):
    product = vendor_product_service.resubmit_vendor_product(product_id, _actor_id())
    return {"product": product.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>/publish", methods=["POST"])
def publish_vendor_product(product_id):
    product = vendor_product_service.publish_validated_product(product_id, _actor_id())
    return {"product": product.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>/post-validation-action", methods=["PATCH"])
def change_post_validation_action(product_id):
    product = vendor_product_service.update_post_validation_action(
        product_id, _actor_id(), _json().get("action", "")
    )
    return {"product": product.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>/position", methods=["PUT"])
def save_position(product_id):
    body = _json()
    if "design_id" not in body or not isinstance(body.get("position"), dict):
        raise ValueError("design_id and position are required.")
    position = vendor_product_service.save_design_position(
        product_id, _actor_id(), body["design_id"], body["position"]
    )
    return {"position": position.to_dict()}


@api_bp.route("/vendor-products/<int:product_id>", methods=["DELETE"])
def delete_vendor_product(product_id):
    actor_id = _actor_id()
    vendor_product_service.soft_delete_vendor_product(
        product_id, actor_id, is_admin=actor_id in current_app.config["ADMIN_IDS"]
    )
    return "", 204


@api_bp.route("/admin/vendor-products/<int:product_id>/validation", methods=["POST"])
def validate_vendor_product(product_id):
    admin_id = _admin_id()
    body = _json()
    decision = publication_service.parse_decision(body.get("decision", ""))
    product = vendor_product_service.validate_vendor_product(
        product_id,
        admin_id,
        approve=decision is Decision.APPROVE,
        reason=body.get("reason"),
    )
    return {"product": product.to_dict()}
