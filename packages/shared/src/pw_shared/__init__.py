"""Photos page shared library.

This library provides:
- Pydantic models for stacks and media, and request schemas
- Async DynamoDB store with conditional inserts
- Presigned S3 upload URL signer
- Handler configuration, the tagged error type and API responses
- Structured logging and observability utilities
"""

from .config import ReadConfig, UploadConfig, WriteConfig
from .constants import ErrorKind, PutOutcome
from .errors import ApiError, ConfigurationError
from .models import ImageSrc, Media, Stack
from .observability import (
    ObservabilityContext,
    get_aws_request_id,
    lambda_handler,
    log_error,
    log_event,
    log_metrics,
    set_aws_request_id,
    setup_logging,
)
from .responses import json_response, message_response
from .signer import UploadUrlSigner, build_upload_key
from .store import MetadataStore, PutResult
from .validation import (
    FileMetadata,
    MediaInput,
    ReadRequest,
    SignedUrlRequest,
    WriteRequest,
    current_timestamp_ms,
    parse_request_body,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "Stack",
    "Media",
    "ImageSrc",
    # Request schemas
    "ReadRequest",
    "WriteRequest",
    "MediaInput",
    "SignedUrlRequest",
    "FileMetadata",
    "parse_request_body",
    "current_timestamp_ms",
    # Clients
    "MetadataStore",
    "PutResult",
    "UploadUrlSigner",
    "build_upload_key",
    # Config
    "ReadConfig",
    "WriteConfig",
    "UploadConfig",
    # Errors and responses
    "ApiError",
    "ConfigurationError",
    "ErrorKind",
    "PutOutcome",
    "json_response",
    "message_response",
    # Observability
    "setup_logging",
    "log_event",
    "log_error",
    "log_metrics",
    "ObservabilityContext",
    "lambda_handler",
    "set_aws_request_id",
    "get_aws_request_id",
]
