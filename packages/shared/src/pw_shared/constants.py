"""Constants and enums for the photos page backend."""

from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    """Kind of failure a handler can report to its caller."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATA_INTEGRITY = "data_integrity"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


class PutOutcome(str, Enum):
    """Result of a conditional (insert-if-absent) write."""

    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


# HTTP status per error kind
STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DATA_INTEGRITY: 500,
    ErrorKind.DEPENDENCY: 500,
    ErrorKind.INTERNAL: 500,
}

# Environment variable names
STACK_METADATA_TABLE = "STACK_METADATA_TABLE"
STACK_METADATA_GSI = "STACK_METADATA_GSI"
MEDIA_METADATA_TABLE = "MEDIA_METADATA_TABLE"
MEDIA_METADATA_GSI = "MEDIA_METADATA_GSI"
S3_BUCKET_NAME = "S3_BUCKET_NAME"
S3_URL_TTL = "S3_URL_TTL"
CDN_DOMAIN_URL = "CDN_DOMAIN_URL"

# Key attributes used for conditional inserts
STACK_KEY_ATTRIBUTE = "stackId"
MEDIA_KEY_ATTRIBUTE = "mediaId"

# Response messages
MSG_BODY_MISSING = "Request body is missing."
MSG_INVALID_JSON = "Invalid JSON format."
MSG_INVALID_REQUEST_PREFIX = "Invalid request: "
MSG_NO_STACKS = "No stacks found!"
MSG_INTERNAL_ERROR = "Internal server error."
MSG_WRITE_SUCCESS = "Media metadata saved successfully!"
MSG_WRITE_FAILED = "Failed to save metadata."

# S3 key layout for uploads: user/{user_id}/{year}/{month}/{token}_{file_name}
UPLOAD_KEY_PATTERN = "user/{user_id}/{year:04d}/{month:02d}/{token}_{file_name}"

JSON_HEADERS = {"Content-Type": "application/json"}
