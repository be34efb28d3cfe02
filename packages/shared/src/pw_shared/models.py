"""Pydantic models for stacks and media with DynamoDB serialization."""

from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base model whose wire/storage names are camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_dynamo(self) -> dict:
        """Convert to DynamoDB item format (absent optionals are omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)


def is_https_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme == "https" and bool(parsed.netloc)


class ImageSrc(_CamelModel):
    """Source URLs for one media item."""

    thumbnail: str = Field(description="HTTPS URL of the thumbnail image")
    full: str = Field(description="HTTPS URL of the full-size image")

    @field_validator("thumbnail", "full")
    @classmethod
    def _require_https(cls, value: str, info: ValidationInfo) -> str:
        if not is_https_url(value):
            raise ValueError(f"{info.field_name} imageSrc must be a valid HTTPS URL")
        return value


class Stack(_CamelModel):
    """One upload event ("album")."""

    stack_id: str = Field(description="Unique stack ID (table partition key)")
    caption: str = Field(description="Caption describing the stack")
    upload_timestamp: int = Field(description="Upload time in epoch milliseconds")
    location: Optional[str] = Field(default=None, description="Where the media was taken")


class Media(_CamelModel):
    """A single file belonging to a stack."""

    media_id: str = Field(description="Unique media ID (table partition key)")
    stack_id: str = Field(description="Owning stack ID (GSI partition key)")
    alternative_text: Optional[str] = Field(default=None, description="Accessibility text")
    image_src: ImageSrc
    media_type: str = Field(description="Kind of media, e.g. image or video")
    sequence_number: int = Field(ge=0, description="Position of the media within its stack")
