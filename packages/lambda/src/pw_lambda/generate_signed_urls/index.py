"""
Generate Signed URLs Lambda - Presigned S3 uploads

Handles the signed upload URL request:
1. Validates the list of file metadata (fileName, contentType, userId)
2. Derives a unique key per file: user/{userId}/{YYYY}/{MM}/{uuid}_{fileName}
3. Signs a PUT URL per file, all files concurrently
4. Returns the URLs and keys in input order with the CDN domain

Any signing failure fails the whole batch.

Environment Variables:
  - S3_BUCKET_NAME
  - S3_URL_TTL (seconds)
  - CDN_DOMAIN_URL
  - AWS_REGION
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pw_shared import (
    ApiError,
    ErrorKind,
    FileMetadata,
    ObservabilityContext,
    SignedUrlRequest,
    UploadConfig,
    UploadUrlSigner,
    build_upload_key,
    json_response,
    lambda_handler,
    log_error,
    parse_request_body,
)
from pw_shared.config import get_aws_region
from pw_shared.constants import MSG_INTERNAL_ERROR

config = UploadConfig.from_env()
signer = UploadUrlSigner(
    config.bucket_name,
    config.url_ttl_seconds,
    region_name=get_aws_region(),
)


async def sign_file(file: FileMetadata, signer: UploadUrlSigner, now: datetime) -> Dict[str, str]:
    key = build_upload_key(file.user_id, file.file_name, now=now)
    upload_url = await signer.sign_upload(key, file.content_type)
    return {"uploadUrl": upload_url, "key": key}


async def sign_files(request: SignedUrlRequest, signer: UploadUrlSigner) -> List[Dict[str, str]]:
    """Sign every file concurrently; results follow the input order."""
    now = datetime.now(timezone.utc)
    with ObservabilityContext("sign_upload_urls", {"file_count": len(request.files_metadata)}):
        return list(await asyncio.gather(*(sign_file(file, signer, now) for file in request.files_metadata)))


async def handle_signed_urls(
    event: Dict[str, Any],
    config: UploadConfig,
    signer: UploadUrlSigner,
) -> Dict[str, Any]:
    """Turn an API Gateway event into the signed URL response."""
    request: Optional[SignedUrlRequest] = None
    try:
        request = parse_request_body(event, SignedUrlRequest)
        signed_urls_and_keys = await sign_files(request, signer)
        return json_response(
            200,
            {
                "signedUrlsAndKeys": signed_urls_and_keys,
                "cdnDomainUrl": config.cdn_domain_url,
            },
        )

    except ApiError as e:
        if e.kind is ErrorKind.VALIDATION:
            return e.to_response()
        log_error("generate_signed_urls_failed", e, {"errorKind": e.kind.value, "request": _describe(request)})
        return ApiError.internal(MSG_INTERNAL_ERROR).to_response()

    except Exception as e:
        log_error("generate_signed_urls_failed", e, {"request": _describe(request)})
        return ApiError.internal(MSG_INTERNAL_ERROR).to_response()


def _describe(request: Optional[SignedUrlRequest]) -> Optional[Dict[str, Any]]:
    return request.model_dump(by_alias=True) if request else None


@lambda_handler(kind="api_gateway")
def handler(event, context):
    """
    Handle the signed upload URL request.

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy integration response
    """
    return asyncio.run(handle_signed_urls(event, config, signer))
