"""Request body parsing and schema validation.

Every handler goes through ``parse_request_body``: the raw API Gateway body is
decoded, parsed as JSON and validated against a pydantic schema. Any failure
becomes an ``ApiError`` of kind ``VALIDATION`` whose message names the first
failing rule, e.g. ``Invalid request: stackLimit must be greater than 0``.
"""

import base64
import binascii
import json
import time
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .constants import MSG_BODY_MISSING, MSG_INVALID_JSON, MSG_INVALID_REQUEST_PREFIX
from .errors import ApiError
from .models import ImageSrc

T = TypeVar("T", bound=BaseModel)

CURRENT_TIMESTAMP = "current_timestamp"


def current_timestamp_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def _reject_bool(value: Any, info: ValidationInfo) -> Any:
    # JSON true/false would otherwise be read as 1/0
    if isinstance(value, bool):
        raise ValueError(f"{to_camel(info.field_name)} must be a number")
    return value


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ReadRequest(RequestSchema):
    """Body of the read request."""

    stack_limit: int = Field(gt=0)
    start_timestamp: int = Field(default=0, ge=0)
    end_timestamp: int = Field(default_factory=current_timestamp_ms)

    _numbers_only = field_validator("stack_limit", "start_timestamp", "end_timestamp", mode="before")(_reject_bool)

    @model_validator(mode="after")
    def _end_after_start(self) -> "ReadRequest":
        if self.end_timestamp <= self.start_timestamp:
            raise ValueError("endTimestamp must be greater than startTimestamp")
        return self


class MediaInput(RequestSchema):
    media_id: str
    alternative_text: Optional[str] = None
    image_src: ImageSrc
    media_type: str


class WriteRequest(RequestSchema):
    """Body of the write request.

    ``uploadTimestamp`` is checked against ``context["current_timestamp"]``,
    the time validation runs, falling back to the wall clock.
    """

    stack_id: str
    caption: str
    upload_timestamp: int = Field(ge=0)
    location: Optional[str] = None
    media: List[MediaInput] = Field(min_length=1)

    _numbers_only = field_validator("upload_timestamp", mode="before")(_reject_bool)

    @field_validator("upload_timestamp")
    @classmethod
    def _not_in_future(cls, value: int, info: ValidationInfo) -> int:
        context = info.context or {}
        now = context.get(CURRENT_TIMESTAMP) or current_timestamp_ms()
        if value > now:
            raise ValueError("uploadTimestamp must be in the past")
        return value


class FileMetadata(RequestSchema):
    file_name: str
    content_type: str
    user_id: str

    @field_validator("content_type")
    @classmethod
    def _mime_shape(cls, value: str) -> str:
        if "/" not in value:
            raise ValueError("contentType must be a valid MIME type")
        return value


class SignedUrlRequest(RequestSchema):
    """Body of the signed upload URL request."""

    files_metadata: List[FileMetadata] = Field(min_length=1)


def describe_error(error: Dict[str, Any]) -> str:
    """Turn one pydantic error into a client-facing rule description."""
    names = [part for part in error["loc"] if isinstance(part, str)]
    name = names[-1] if names else ""
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if not name:
        return "request body must be an object"
    if error_type == "missing":
        return f"{name} is required"
    if error_type == "extra_forbidden":
        return f'"{name}" is not allowed'
    if error_type == "string_type":
        return f"{name} must be a string"
    if error_type in ("int_type", "int_parsing"):
        return f"{name} must be a number"
    if error_type == "int_from_float":
        return f"{name} must be an integer"
    if error_type == "greater_than":
        return f"{name} must be greater than {ctx.get('gt')}"
    if error_type == "greater_than_equal":
        if ctx.get("ge") == 0:
            return f"{name} must be a non-negative number"
        return f"{name} must be greater than or equal to {ctx.get('ge')}"
    if error_type == "list_type":
        return f"{name} must be an array"
    if error_type == "too_short":
        return f"{name} must contain at least one item"
    if error_type in ("model_type", "model_attributes_type", "dict_type"):
        return f"{name} must be an object"
    return f"{name} {error['msg']}"


def decode_body(event: Dict[str, Any]) -> Any:
    """Extract and JSON-decode the body of an API Gateway event."""
    body = event.get("body")
    if not body:
        raise ApiError.validation(MSG_BODY_MISSING)
    if isinstance(body, (dict, list)):
        return body

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ApiError.validation(MSG_INVALID_JSON) from None

    try:
        return json.loads(body)
    except json.JSONDecodeError:
        raise ApiError.validation(MSG_INVALID_JSON) from None


def parse_request_body(
    event: Dict[str, Any],
    schema: Type[T],
    context: Optional[Dict[str, Any]] = None,
) -> T:
    """Parse and validate the request body of ``event`` against ``schema``.

    Raises:
        ApiError: kind VALIDATION when the body is missing, not JSON, or
            fails the schema.
    """
    payload = decode_body(event)
    try:
        return schema.model_validate(payload, context=context)
    except ValidationError as e:
        first = e.errors()[0]
        raise ApiError.validation(MSG_INVALID_REQUEST_PREFIX + describe_error(first)) from None
