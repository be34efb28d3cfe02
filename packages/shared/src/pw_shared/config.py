"""Handler configuration.

Each handler receives an explicitly constructed, immutable config object.
``from_env()`` reads the process environment once and fails fast when a
required variable is absent, so a misconfigured Lambda dies at cold start
instead of on the first request.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, PositiveInt

from .constants import (
    CDN_DOMAIN_URL,
    MEDIA_METADATA_GSI,
    MEDIA_METADATA_TABLE,
    S3_BUCKET_NAME,
    S3_URL_TTL,
    STACK_METADATA_GSI,
    STACK_METADATA_TABLE,
)
from .errors import ConfigurationError


def get_required_env(key: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return a required environment variable or raise ConfigurationError."""
    source = os.environ if environ is None else environ
    value = source.get(key)
    if not value:
        raise ConfigurationError(f"{key} environment variable is missing.")
    return value


def get_aws_region(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """AWS region for boto3 clients, or None to let boto3 resolve it."""
    source = os.environ if environ is None else environ
    return source.get("AWS_REGION") or None


class _FrozenConfig(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReadConfig(_FrozenConfig):
    """Tables and indexes the read handler queries."""

    stack_table: str
    stack_index: str
    media_table: str
    media_index: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReadConfig":
        return cls(
            stack_table=get_required_env(STACK_METADATA_TABLE, environ),
            stack_index=get_required_env(STACK_METADATA_GSI, environ),
            media_table=get_required_env(MEDIA_METADATA_TABLE, environ),
            media_index=get_required_env(MEDIA_METADATA_GSI, environ),
        )


class WriteConfig(_FrozenConfig):
    """Tables the write handler inserts into."""

    stack_table: str
    media_table: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WriteConfig":
        return cls(
            stack_table=get_required_env(STACK_METADATA_TABLE, environ),
            media_table=get_required_env(MEDIA_METADATA_TABLE, environ),
        )


class UploadConfig(_FrozenConfig):
    """Bucket, signed URL lifetime and CDN domain for uploads."""

    bucket_name: str
    url_ttl_seconds: PositiveInt
    cdn_domain_url: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UploadConfig":
        bucket_name = get_required_env(S3_BUCKET_NAME, environ)
        raw_ttl = get_required_env(S3_URL_TTL, environ)
        try:
            ttl = int(raw_ttl)
        except ValueError:
            raise ConfigurationError(f"{S3_URL_TTL} environment variable is not a valid number") from None
        if ttl <= 0:
            raise ConfigurationError(f"{S3_URL_TTL} environment variable must be a positive number")
        return cls(
            bucket_name=bucket_name,
            url_ttl_seconds=ttl,
            cdn_domain_url=get_required_env(CDN_DOMAIN_URL, environ),
        )
