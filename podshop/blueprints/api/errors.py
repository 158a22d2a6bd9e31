"""JSON error mapping for the API blueprint."""
import logging
from podshop.blueprints.api import api_bp
from podshop.errors import (
    IllegalStateTransitionError,
    InvalidAssetError,
    NotFoundError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


@api_bp.errorhandler(InvalidAssetError)
def invalid_asset(e):
    return {"error": "invalid_asset", "message": str(e)}, 400


@api_bp.errorhandler(ValueError)
def bad_request(e):
    return {"error": "bad_request", "message": str(e)}, 400


@api_bp.errorhandler(NotFoundError)
def not_found(e):
    return {"error": "not_found", "message": str(e)}, 404


@api_bp.errorhandler(IllegalStateTransitionError)
def illegal_transition(e):
    return {
        "error": "illegal_transition",
        "message": str(e),
        "entity": e.entity,
        "from_state": e.from_state,
        "event": e.event,
    }, 409


@api_bp.errorhandler(PersistenceError)
def persistence_failure(e):
    # Details stay in the log; the client only learns to retry.
    logger.error("Persistence failure on API request: %s", e)
    return {"error": "unavailable", "message": "Storage temporarily unavailable, retry later."}, 503
