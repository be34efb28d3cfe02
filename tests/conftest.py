"""Pytest configuration shared by all test modules."""

import os
import time

import pytest

# Handler modules read their configuration at import time.
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("STACK_METADATA_TABLE", "StackMetadataTable")
os.environ.setdefault("STACK_METADATA_GSI", "UploadTimestampIndex")
os.environ.setdefault("MEDIA_METADATA_TABLE", "MediaMetadataTable")
os.environ.setdefault("MEDIA_METADATA_GSI", "StackIdIndex")
os.environ.setdefault("S3_BUCKET_NAME", "personal-website-photos-page-media-bucket")
os.environ.setdefault("S3_URL_TTL", "300")
os.environ.setdefault("CDN_DOMAIN_URL", "random.cloudfront.net")


class LambdaContext:
    aws_request_id = "req-test-0001"
    function_name = "test-function"


@pytest.fixture
def context() -> LambdaContext:
    return LambdaContext()


@pytest.fixture
def now_ms() -> int:
    return int(time.time() * 1000)
