"""
Object storage for uploaded files (any S3-compatible provider).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Settings


class StorageError(Exception):
    pass


class StorageClient(Protocol):
    """Operations the upload use cases need from object storage."""

    bucket: str

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        ...


@dataclass
class S3StorageClient:
    bucket: str
    access_key_id: str
    secret_access_key: str
    region: str | None = None
    endpoint: str | None = None
    public_base_url: str | None = None

    def __post_init__(self):
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{key}"
        region = self.region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Upload failed: {exc}") from exc
        return self.public_url(key)


def build_storage(config: Settings) -> StorageClient | None:
    """Return a storage client, or None when credentials are missing."""
    if not config.storage_configured:
        return None
    return S3StorageClient(
        bucket=config.STORAGE_BUCKET,
        access_key_id=config.STORAGE_ACCESS_KEY_ID,
        secret_access_key=config.STORAGE_SECRET_ACCESS_KEY,
        region=config.STORAGE_REGION,
        endpoint=config.STORAGE_ENDPOINT,
        public_base_url=config.STORAGE_PUBLIC_BASE_URL,
    )
