"""
Blob storage gateway (S3 or any S3-compatible store such as MinIO).

Object keys look like:
- places/2024-05-01T10:22:31.123456+00:00-<uuid4>.jpeg
- users/2024-05-01T10:22:31.123456+00:00-<uuid4>.png

Every call returns a sentinel instead of raising: a key/URL or None,
True/False for deletes. Callers decide how a failure surfaces.
boto3 is blocking, so calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from functools import lru_cache
from uuid import uuid4

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from core.config import env_str

SIGNED_URL_TTL_S = 10 * 60

logger = logging.getLogger(__name__)


def bucket_name() -> str:
    return env_str("S3_BUCKET_NAME", "marketplace-images")


@lru_cache(maxsize=1)
def client():
    return boto3.client(
        "s3",
        endpoint_url=env_str("S3_ENDPOINT_URL") or None,
        aws_access_key_id=env_str("S3_ACCESS_KEY") or None,
        aws_secret_access_key=env_str("S3_SECRET_KEY") or None,
        region_name=env_str("S3_REGION", "us-east-1"),
        config=BotoConfig(signature_version="s3v4"),
    )


def _extension(content_type: str) -> str:
    # "image/jpeg" -> "jpeg", "image/svg+xml" -> "svg+xml"
    return (content_type or "").split("/", 1)[-1].split(";", 1)[0].strip() or "bin"


def build_key(folder: str, content_type: str) -> str:
    stamp = datetime.now(timezone.utc).isoformat()
    return f"{folder}/{stamp}-{uuid4()}.{_extension(content_type)}"


async def upload(data: bytes, content_type: str, folder: str) -> str | None:
    """
    Store `data` under a fresh key in `folder`. Returns the key, or None.
    """
    if not data:
        logger.warning("upload_skipped reason=empty folder=%s", folder)
        return None

    key = build_key(folder, content_type)
    try:
        await asyncio.to_thread(
            client().put_object,
            Bucket=bucket_name(),
            Key=key,
            Body=data,
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError):
        logger.exception("upload_failed key=%s", key)
        return None

    logger.info("upload_complete key=%s size_bytes=%s", key, len(data))
    return key


async def get_signed_url(path: str) -> str | None:
    """
    Time-boxed (10 minute) read URL for a stored object, or None.
    """
    try:
        return await asyncio.to_thread(
            client().generate_presigned_url,
            "get_object",
            Params={"Bucket": bucket_name(), "Key": path},
            ExpiresIn=SIGNED_URL_TTL_S,
        )
    except (BotoCoreError, ClientError):
        logger.exception("signed_url_failed key=%s", path)
        return None


async def delete(path: str) -> bool:
    try:
        await asyncio.to_thread(
            client().delete_object,
            Bucket=bucket_name(),
            Key=path,
        )
    except (BotoCoreError, ClientError):
        logger.exception("delete_failed key=%s", path)
        return False
    return True
