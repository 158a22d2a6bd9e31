"""Content-addressed asset store on an S3-compatible bucket.

Objects are keyed by the SHA-256 of their bytes, so storing identical bytes
twice is a no-op that returns the same URL.
"""
import hashlib
import logging

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from podshop.errors import PersistenceError

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def storage_key_for(data, content_type, prefix="designs"):
    digest = hashlib.sha256(data).hexdigest()
    ext = EXTENSIONS.get(content_type, "bin")
    return digest, f"{prefix}/{digest}.{ext}"


def get_public_url(storage_key):
    """Return the public CDN URL for a storage key."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    return f"{base}/{storage_key}"


def _exists(client, bucket, storage_key):
    try:
        client.head_object(Bucket=bucket, Key=storage_key)
        return True
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        if code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise


def store(data, content_type="image/png", prefix="designs"):
    """Upload bytes under their content address.

    Returns:
        dict with url, content_id (sha256 hex) and storage_key

    Raises:
        PersistenceError if the bucket cannot be reached or written
    """
    content_id, storage_key = storage_key_for(data, content_type, prefix)
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        client = _get_client()
        if _exists(client, bucket, storage_key):
            logger.info("Asset %s already stored, reusing", storage_key)
        else:
            client.put_object(
                Bucket=bucket,
                Key=storage_key,
                Body=data,
                ContentType=content_type,
                ACL="public-read",
            )
    except (BotoCoreError, ClientError) as e:
        logger.exception("Asset upload failed for %s", storage_key)
        raise PersistenceError(f"Asset store unavailable: {e}") from e

    return {
        "url": get_public_url(storage_key),
        "content_id": content_id,
        "storage_key": storage_key,
    }
