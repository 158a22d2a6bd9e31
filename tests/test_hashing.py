"""Tests for payload decoding and content fingerprints."""
import base64
import hashlib

import pytest

from podshop.errors import InvalidAssetError
from podshop.services.hashing import content_fingerprint, decode_payload


def test_fingerprint_is_sha256_of_bytes():
    data = b"\x89PNG fake image bytes"
    assert content_fingerprint(data) == hashlib.sha256(data).hexdigest()


def test_fingerprint_is_stable():
    data = b"same bytes"
    assert content_fingerprint(data) == content_fingerprint(bytes(data))


def test_different_bytes_different_fingerprint():
    assert content_fingerprint(b"one") != content_fingerprint(b"two")


def test_raw_base64_and_data_url_decode_to_same_bytes():
    data = b"\x89PNG\r\n\x1a\nimage"
    encoded = base64.b64encode(data).decode()

    assert decode_payload(data) == data
    assert decode_payload(encoded) == data
    assert decode_payload(f"data:image/png;base64,{encoded}") == data


def test_data_url_with_whitespace():
    data = b"wrapped base64 payload" * 10
    encoded = base64.encodebytes(data).decode()  # contains newlines
    assert decode_payload(f"data:image/jpeg;base64,{encoded}") == data


@pytest.mark.parametrize("payload", [None, b"", "", "data:image/png;base64,"])
def test_empty_payload_rejected(payload):
    with pytest.raises(InvalidAssetError):
        decode_payload(payload)


def test_invalid_base64_rejected():
    with pytest.raises(InvalidAssetError):
        decode_payload("not*base64!")


def test_unsupported_payload_type_rejected():
    with pytest.raises(InvalidAssetError):
        decode_payload(12345)


def test_empty_fingerprint_rejected():
    with pytest.raises(InvalidAssetError):
        content_fingerprint(b"")
