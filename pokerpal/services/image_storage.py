"""
Image storage for uploaded club, player and tournament pictures.

Uses S3-compatible object storage (Cloudflare R2) when it is enabled and fully
configured, local disk under ``Config.UPLOAD_DIR`` otherwise.
"""

import asyncio
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from pokerpal.config import Config
from pokerpal.constants import UploadConstants
from pokerpal.utils.exceptions import InvalidDataError, StorageError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

_ENTITY_TYPE = re.compile(r'^[a-z0-9_-]+$')


@dataclass(frozen=True)
class StoredImage:
    url: str
    key: str


def validate_image(content: bytes, content_type: Optional[str]) -> None:
    """Reject anything that is not a small JPEG, PNG, GIF or WebP image"""
    if content_type not in UploadConstants.ALLOWED_MIME_TYPES:
        raise InvalidDataError(
            f"Rejected upload with content type {content_type}",
            "Invalid file type. Only JPEG, PNG, GIF and WebP images are allowed."
        )
    if not content:
        raise InvalidDataError("Empty upload", "No file uploaded")
    if len(content) > UploadConstants.MAX_FILE_SIZE:
        raise InvalidDataError(
            f"Upload of {len(content)} bytes exceeds limit",
            "File too large. Maximum size is 5MB."
        )


def normalize_entity_type(entity_type: Optional[str]) -> str:
    entity_type = (entity_type or UploadConstants.DEFAULT_ENTITY_TYPE).strip().lower()
    if not _ENTITY_TYPE.match(entity_type):
        raise InvalidDataError(f"Invalid entity type {entity_type!r}", "Invalid entity type")
    return entity_type


class ImageStorage:
    """Stores uploaded images and returns their public URL."""

    def __init__(self, upload_dir: Optional[str] = None, use_cloud: Optional[bool] = None, s3_client=None):
        self.upload_dir = Path(upload_dir or Config.UPLOAD_DIR)
        self.use_cloud = Config.is_cloud_storage_enabled() if use_cloud is None else use_cloud
        self._s3_client = s3_client

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client(
                's3',
                region_name='auto',
                endpoint_url=f"https://{Config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
                aws_access_key_id=Config.R2_ACCESS_KEY_ID,
                aws_secret_access_key=Config.R2_SECRET_ACCESS_KEY,
            )
        return self._s3_client

    async def store(self, content: bytes, filename: str, content_type: str,
                    entity_type: Optional[str] = None) -> StoredImage:
        validate_image(content, content_type)
        entity_type = normalize_entity_type(entity_type)

        if self.use_cloud:
            return await self._store_in_cloud(content, filename, content_type, entity_type)
        return await self._store_locally(content, filename, entity_type)

    async def _store_in_cloud(self, content: bytes, filename: str, content_type: str,
                              entity_type: str) -> StoredImage:
        if not Config.R2_BUCKET_NAME:
            raise StorageError("Cloud storage not configured", "Failed to upload to cloud storage")

        safe_name = Path(filename or 'upload').name
        key = f"{entity_type}/{int(time.time() * 1000)}-{safe_name}"

        try:
            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=Config.R2_BUCKET_NAME,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Cloud upload of {key} failed: {e}")
            raise StorageError(f"Cloud upload failed: {e}", "Failed to upload to cloud storage")

        if Config.R2_PUBLIC_URL:
            url = f"{Config.R2_PUBLIC_URL.rstrip('/')}/{key}"
        else:
            url = f"https://{Config.R2_BUCKET_NAME}.{Config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com/{key}"

        logger.info(f"Uploaded image to cloud storage: {key}")
        return StoredImage(url=url, key=key)

    async def _store_locally(self, content: bytes, filename: str, entity_type: str) -> StoredImage:
        entity_dir = self.upload_dir / entity_type
        suffix = Path(filename or '').suffix.lower()
        stored_name = (
            f"{UploadConstants.FIELD_NAME}-{int(time.time() * 1000)}-"
            f"{secrets.randbelow(10 ** 9)}{suffix}"
        )

        try:
            entity_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread((entity_dir / stored_name).write_bytes, content)
        except OSError as e:
            logger.error(f"Local upload to {entity_dir} failed: {e}")
            raise StorageError(f"Local upload failed: {e}", "Failed to upload image")

        key = f"{entity_type}/{stored_name}"
        logger.info(f"Stored image locally: {key}")
        return StoredImage(url=f"{UploadConstants.URL_PREFIX}/{key}", key=key)
