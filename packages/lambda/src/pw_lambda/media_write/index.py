"""
Write Media Lambda - Save stack and media metadata

Handles the media write request:
1. Validates the request body against the current time
2. Builds one stack item and one media item per entry (sequenceNumber = index)
3. Inserts all items concurrently, each only if its key is absent
4. Returns 200 once every insert either succeeded or found the item already there

Inserts are idempotent so clients can safely retry. Nothing is rolled back
when one insert fails: the items that made it stay, and the request fails.

Environment Variables:
  - STACK_METADATA_TABLE
  - MEDIA_METADATA_TABLE
  - AWS_REGION
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from pw_shared import (
    ApiError,
    ErrorKind,
    Media,
    MetadataStore,
    ObservabilityContext,
    PutOutcome,
    PutResult,
    Stack,
    WriteConfig,
    WriteRequest,
    current_timestamp_ms,
    lambda_handler,
    log_error,
    log_event,
    message_response,
    parse_request_body,
)
from pw_shared.config import get_aws_region
from pw_shared.constants import (
    MEDIA_KEY_ATTRIBUTE,
    MSG_WRITE_FAILED,
    MSG_WRITE_SUCCESS,
    STACK_KEY_ATTRIBUTE,
)
from pw_shared.validation import CURRENT_TIMESTAMP

config = WriteConfig.from_env()
store = MetadataStore(region_name=get_aws_region())


def build_items(request: WriteRequest) -> Tuple[Stack, List[Media]]:
    """Build the stack and media models for a validated write request."""
    stack = Stack(
        stack_id=request.stack_id,
        caption=request.caption,
        upload_timestamp=request.upload_timestamp,
        location=request.location,
    )
    media = [
        Media(
            media_id=item.media_id,
            stack_id=request.stack_id,
            alternative_text=item.alternative_text,
            image_src=item.image_src,
            media_type=item.media_type,
            sequence_number=index,
        )
        for index, item in enumerate(request.media)
    ]
    return stack, media


async def save_stack_and_media(
    request: WriteRequest,
    config: WriteConfig,
    store: MetadataStore,
) -> List[PutResult]:
    """
    Insert the stack and all of its media concurrently.

    Returns:
        One PutResult per insert, stack first

    Raises:
        ApiError: DEPENDENCY when any insert failed for a reason other than
            the item already existing
    """
    stack, media = build_items(request)

    inserts = [store.put_if_absent(config.stack_table, stack.to_dynamo(), STACK_KEY_ATTRIBUTE)]
    inserts.extend(store.put_if_absent(config.media_table, item.to_dynamo(), MEDIA_KEY_ATTRIBUTE) for item in media)

    with ObservabilityContext("save_metadata", {"stack_id": request.stack_id, "media_count": len(media)}):
        results = await asyncio.gather(*inserts)

    failures = [result for result in results if not result.ok]
    if failures:
        raise ApiError.dependency(f"{len(failures)} of {len(results)} inserts failed") from failures[0].error

    log_event(
        "metadata_saved",
        {
            "stack_id": request.stack_id,
            "inserted": sum(1 for r in results if r.outcome is PutOutcome.INSERTED),
            "skipped": sum(1 for r in results if r.outcome is PutOutcome.ALREADY_EXISTS),
        },
    )
    return results


async def handle_write(event: Dict[str, Any], config: WriteConfig, store: MetadataStore) -> Dict[str, Any]:
    """Turn an API Gateway event into the write response."""
    request: Optional[WriteRequest] = None
    try:
        request = parse_request_body(event, WriteRequest, context={CURRENT_TIMESTAMP: current_timestamp_ms()})
        await save_stack_and_media(request, config, store)
        return message_response(200, MSG_WRITE_SUCCESS)

    except ApiError as e:
        if e.kind is ErrorKind.VALIDATION:
            return e.to_response()
        log_error(
            "write_media_failed",
            e.__cause__ or e,
            {"errorKind": e.kind.value, "detail": e.message, "request": _describe(request)},
        )
        return ApiError.internal(MSG_WRITE_FAILED).to_response()

    except Exception as e:
        log_error("write_media_failed", e, {"request": _describe(request)})
        return ApiError.internal(MSG_WRITE_FAILED).to_response()


def _describe(request: Optional[WriteRequest]) -> Optional[Dict[str, Any]]:
    return request.model_dump(by_alias=True, exclude_none=True) if request else None


@lambda_handler(kind="api_gateway")
def handler(event, context):
    """
    Handle the media write request.

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy integration response
    """
    return asyncio.run(handle_write(event, config, store))
