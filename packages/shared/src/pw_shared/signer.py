"""Presigned S3 upload URLs for photo uploads."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

import boto3

from .constants import UPLOAD_KEY_PATTERN


def build_upload_key(
    user_id: str,
    file_name: str,
    now: Optional[datetime] = None,
    token: Optional[str] = None,
) -> str:
    """
    Create a unique S3 key for an upload.

    Format: user/{user_id}/{YYYY}/{MM}/{uuid}_{file_name}. Year and month come
    from the current UTC date, never from the client.
    """
    now = now or datetime.now(timezone.utc)
    token = token or str(uuid.uuid4())
    return UPLOAD_KEY_PATTERN.format(
        user_id=user_id,
        year=now.year,
        month=now.month,
        token=token,
        file_name=file_name,
    )


class UploadUrlSigner:
    """Issues time-limited PUT URLs for one bucket."""

    def __init__(self, bucket_name: str, expires_in: int, client=None, region_name: Optional[str] = None):
        self.bucket_name = bucket_name
        self.expires_in = expires_in
        self.client = client or boto3.client("s3", region_name=region_name)

    async def sign_upload(self, key: str, content_type: str) -> str:
        """Return a presigned ``put_object`` URL scoped to ``key`` and ``content_type``."""
        return await asyncio.to_thread(
            self.client.generate_presigned_url,
            "put_object",
            Params={
                "Bucket": self.bucket_name,
                "Key": key,
                "ContentType": content_type,
            },
            ExpiresIn=self.expires_in,
        )
