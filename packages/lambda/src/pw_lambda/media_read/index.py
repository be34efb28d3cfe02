"""
Read Media Lambda - Photos page stacks with their media

Handles the media read request:
1. Validates the request body (stackLimit, startTimestamp, endTimestamp)
2. Queries the stack GSI for the newest stacks in the time range
3. Queries the media GSI for every stack concurrently
4. Returns each stack with its media, in stack order

The result is all-or-nothing: a stack without a stackId or a failed media
query fails the whole request.

Environment Variables:
  - STACK_METADATA_TABLE
  - STACK_METADATA_GSI
  - MEDIA_METADATA_TABLE
  - MEDIA_METADATA_GSI
  - AWS_REGION
"""

import asyncio
from typing import Any, Dict, List, Optional

from pw_shared import (
    ApiError,
    ErrorKind,
    MetadataStore,
    ObservabilityContext,
    ReadConfig,
    ReadRequest,
    json_response,
    lambda_handler,
    log_error,
    log_event,
    parse_request_body,
)
from pw_shared.config import get_aws_region
from pw_shared.constants import MSG_INTERNAL_ERROR, MSG_NO_STACKS

# Resolved once per cold start; missing configuration aborts the import.
config = ReadConfig.from_env()
store = MetadataStore(region_name=get_aws_region())


async def fetch_stacks_and_media(
    request: ReadRequest,
    config: ReadConfig,
    store: MetadataStore,
) -> List[Dict[str, Any]]:
    """
    Query stacks, then the media of every stack in parallel.

    Args:
        request: Validated read request
        config: Table and index names
        store: Metadata store

    Returns:
        ``[{"stack": ..., "media": [...]}, ...]`` in the order the stacks were returned

    Raises:
        ApiError: NOT_FOUND when the range holds no stacks, DATA_INTEGRITY when a
            stack item has no stackId
    """
    stacks = await store.query_stacks(
        config.stack_table,
        config.stack_index,
        request.stack_limit,
        request.start_timestamp,
        request.end_timestamp,
    )
    if not stacks:
        raise ApiError.not_found(MSG_NO_STACKS)

    for stack in stacks:
        if not stack.get("stackId"):
            raise ApiError.data_integrity("stackId field is missing from stack")

    with ObservabilityContext("query_media", {"stack_count": len(stacks)}):
        media_per_stack = await asyncio.gather(
            *(store.query_media(config.media_table, config.media_index, stack["stackId"]) for stack in stacks)
        )

    return [{"stack": stack, "media": media} for stack, media in zip(stacks, media_per_stack)]


async def handle_read(event: Dict[str, Any], config: ReadConfig, store: MetadataStore) -> Dict[str, Any]:
    """Turn an API Gateway event into the read response."""
    request: Optional[ReadRequest] = None
    try:
        request = parse_request_body(event, ReadRequest)

        stack_and_media_data = await fetch_stacks_and_media(request, config, store)

        log_event(
            "stacks_read",
            {
                "stack_count": len(stack_and_media_data),
                "media_count": sum(len(entry["media"]) for entry in stack_and_media_data),
            },
        )
        return json_response(200, {"stackAndMediaData": stack_and_media_data})

    except ApiError as e:
        if e.kind in (ErrorKind.VALIDATION, ErrorKind.NOT_FOUND):
            return e.to_response()
        log_error("read_media_failed", e, {"errorKind": e.kind.value, "request": _describe(request)})
        return ApiError.internal(MSG_INTERNAL_ERROR).to_response()

    except Exception as e:
        log_error("read_media_failed", e, {"request": _describe(request)})
        return ApiError.internal(MSG_INTERNAL_ERROR).to_response()


def _describe(request: Optional[ReadRequest]) -> Optional[Dict[str, Any]]:
    return request.model_dump(by_alias=True) if request else None


@lambda_handler(kind="api_gateway")
def handler(event, context):
    """
    Handle the media read request.

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy integration response
    """
    return asyncio.run(handle_read(event, config, store))
