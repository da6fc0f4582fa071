"""Object storage for product images."""

from __future__ import annotations

import logging
import os
import uuid
from typing import BinaryIO

import boto3

logger = logging.getLogger(__name__)


class S3BlobStore:
    """Stores blobs in an S3-compatible bucket and hands back the object key."""

    def __init__(self, bucket: str, *, prefix: str = "products/", client=None) -> None:
        self.bucket = bucket
        self.prefix = prefix
        self._client = client

    @classmethod
    def from_env(cls) -> "S3BlobStore":
        bucket = os.environ.get("AWS_S3_BUCKET")
        if not bucket:
            raise KeyError("AWS_S3_BUCKET")
        return cls(bucket, prefix=os.environ.get("AWS_S3_PREFIX", "products/"))

    @property
    def client(self):
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client(
                "s3",
                endpoint_url=os.environ.get("AWS_S3_ENDPOINT"),
                aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
                aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            )
        return self._client

    def store(self, stream: BinaryIO, filename: str, content_type: str) -> str:
        key = f"{self.prefix}{uuid.uuid4().hex}/{filename}"
        self.client.upload_fileobj(
            stream,
            self.bucket,
            key,
            ExtraArgs={"ContentType": content_type},
        )
        logger.info("Stored %s as s3://%s/%s", filename, self.bucket, key)
        return key
