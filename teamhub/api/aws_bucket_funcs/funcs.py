"""
Object Storage Utilities — Client Init • Image Upload • Image Delete
====================================================================

Purpose
-------
Small helper module for the S3-compatible object storage (DigitalOcean
Spaces) that holds chat images:
- Initialize an S3 client pointed at the Spaces endpoint
- Upload an image buffer under ``{folder}/{file_name}`` with public-read ACL
- Delete an uploaded image by key
- Decode the base64 payloads clients send with chat messages

Configuration (from `teamhub.database.config.config.settings`)
----------------------------------------------------------------
- SPACES_ENDPOINT   : Endpoint URL (e.g., "https://nyc3.digitaloceanspaces.com")
- SPACES_ACCESS_KEY : Access key ID
- SPACES_SECRET_KEY : Secret access key
- REGION            : Region name (e.g., "nyc3")
- BUCKET_NAME       : Target Space

Errors
------
Storage failures are logged and surfaced as `UploadFailed`; malformed base64
input is a `BadRequest`.
"""

import base64
import binascii
import logging
import random
import time

import boto3
import botocore
from botocore.exceptions import BotoCoreError, ClientError

from teamhub.api.errors import BadRequest, UploadFailed
from teamhub.database.config.config import settings

logger = logging.getLogger(__name__)

CHAT_IMAGES_FOLDER = "chat-images"


def get_client():
    """
    Initialize and return a low-level S3 client for the Spaces endpoint.

    Returns:
        botocore.client.S3: A client ready for object operations.
    """
    return boto3.client(
        "s3",
        endpoint_url=settings.SPACES_ENDPOINT or None,
        aws_access_key_id=settings.SPACES_ACCESS_KEY,
        aws_secret_access_key=settings.SPACES_SECRET_KEY,
        region_name=settings.REGION,
        config=botocore.config.Config(signature_version="s3v4"),
    )


def object_url(key: str) -> str:
    return f"{settings.SPACES_ENDPOINT.rstrip('/')}/{settings.BUCKET_NAME}/{key}"


def upload_image(buffer: bytes, file_name: str, folder: str | None = CHAT_IMAGES_FOLDER, s3_client=None) -> dict:
    """
    Upload an image buffer to the configured Space.

    Args:
        buffer (bytes): Raw image bytes.
        file_name (str): Object name inside `folder`.
        folder (str | None): Key prefix; ``None`` stores the object at the root.
        s3_client (botocore.client.S3, optional): Client to use; created on demand.

    Returns:
        dict: ``{"url": <public URL>, "key": <object key>}``.

    Raises:
        UploadFailed: If the storage call fails.
    """
    key = f"{folder}/{file_name}" if folder else file_name
    client = s3_client or get_client()
    try:
        client.put_object(
            Bucket=settings.BUCKET_NAME,
            Key=key,
            Body=buffer,
            ACL="public-read",
            ContentType="image/jpeg",
        )
    except (BotoCoreError, ClientError) as e:
        logger.error("storage.upload_failed key=%s error=%s", key, e)
        raise UploadFailed() from e
    return {"url": object_url(key), "key": key}


def delete_image(key: str, s3_client=None) -> None:
    client = s3_client or get_client()
    try:
        client.delete_object(Bucket=settings.BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error("storage.delete_failed key=%s error=%s", key, e)
        raise UploadFailed("Failed to delete image") from e


def decode_image(image_file: str) -> bytes:
    """
    Decode a base64 image, with or without a ``data:image/...;base64,`` prefix.

    Raises:
        BadRequest: If the payload is not valid base64.
    """
    payload = image_file.split(",", 1)[1] if image_file.startswith("data:") else image_file
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BadRequest("Invalid image data") from e


def new_image_name() -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}.jpg"


class SpacesUploader:
    """
    Uploads base64 chat images and removes them again when the message that
    would reference them is not stored. Injected into `ChatFanout`.
    """

    def __init__(self, s3_client=None):
        self._client = s3_client

    def upload(self, image_file: str, folder: str = CHAT_IMAGES_FOLDER) -> dict:
        buffer = decode_image(image_file)
        if self._client is None:
            self._client = get_client()
        return upload_image(buffer, new_image_name(), folder, s3_client=self._client)

    def delete(self, key: str) -> None:
        if self._client is None:
            self._client = get_client()
        delete_image(key, s3_client=self._client)
