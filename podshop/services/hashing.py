"""Content fingerprints for uploaded design assets.

Fingerprints are computed over the decoded image bytes only. Delivery URLs
change every time the same art is re-uploaded or re-processed, so they are
never hashed.
"""
import base64
import binascii
import hashlib
import re

from podshop.errors import InvalidAssetError

_DATA_URL_RE = re.compile(r"^data:image/[A-Za-z0-9.+-]+;base64,", re.IGNORECASE)


def decode_payload(payload):
    """Return raw bytes for an uploaded payload.

    Accepts raw bytes, or a base64 string optionally prefixed with a
    ``data:image/...;base64,`` header (legacy upload format).

    Raises:
        InvalidAssetError if the payload is empty or not decodable
    """
    if payload is None:
        raise InvalidAssetError("Empty design payload")

    if isinstance(payload, (bytes, bytearray, memoryview)):
        data = bytes(payload)
    elif isinstance(payload, str):
        encoded = _DATA_URL_RE.sub("", payload.strip(), count=1)
        encoded = "".join(encoded.split())
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidAssetError("Design payload is not valid base64")
    else:
        raise InvalidAssetError(
            f"Unsupported design payload type: {type(payload).__name__}"
        )

    if not data:
        raise InvalidAssetError("Empty design payload")
    return data


def content_fingerprint(data):
    """SHA-256 hex digest of decoded asset bytes."""
    if not data:
        raise InvalidAssetError("Cannot fingerprint an empty payload")
    return hashlib.sha256(data).hexdigest()
