"""Observability utilities for structured logging in CloudWatch.

Provides helpers for emitting structured logs that are easy to query
in CloudWatch Logs Insights.

Example:
    ```python
    from pw_shared import log_event

    log_event('stacks_queried', {
        'stack_count': 3,
        'start_timestamp': 0,
    })
    ```

CloudWatch Logs Insights Query:
    ```
    fields @timestamp, eventType, awsRequestId
    | stats count() by eventType
    | sort count() desc
    ```
"""

import contextvars
import copy
import functools
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Literal, Optional

import aws_lambda_logging

# Context-local storage for the AWS request ID; copied into asyncio tasks
# and asyncio.to_thread workers.
_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "aws_request_id", default=None
)

MAX_LOGGED_BODY_LENGTH = 500


def set_aws_request_id(request_id: Optional[str]) -> None:
    """Store the AWS request ID for use in all logs."""
    _request_id.set(request_id)


def get_aws_request_id() -> Optional[str]:
    """Get the current AWS request ID."""
    return _request_id.get()


def setup_logging() -> None:
    """
    Set up AWS Lambda structured logging.

    Call this at the start of your Lambda handler. The level comes from
    ``LOG_LEVEL`` (default INFO); botocore stays at WARNING.
    """
    aws_lambda_logging.setup(
        level=os.getenv("LOG_LEVEL", "INFO"),
        boto_level="WARNING",
    )


def _json_default(value: Any) -> Any:
    return str(value)


def log_event(
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "INFO",
) -> None:
    """
    Log a structured observability event.

    Args:
        event_type: Type of event (e.g., 'stacks_queried', 'item_already_exists')
        details: Additional context (table, stack_id, etc.)
        level: Log level ('INFO', 'WARNING', 'ERROR')
    """
    if details is None:
        details = {}

    log_entry = {
        "eventType": event_type,
        **details,
    }

    request_id = get_aws_request_id()
    if request_id:
        log_entry["awsRequestId"] = request_id

    logger = logging.getLogger()
    message = json.dumps(log_entry, default=_json_default)

    if level == "WARNING":
        logger.warning(message)
    elif level == "ERROR":
        logger.error(message)
    else:
        logger.info(message)


def log_error(
    event_type: str,
    error: BaseException,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an error event with exception details.

    Args:
        event_type: Type of error event (e.g., 'read_media_failed')
        error: The exception that occurred
        details: Additional context, typically the parsed request

    CloudWatch Logs Insights Query:
        ```
        fields @timestamp, eventType, error, errorType
        | filter eventType like /failed/
        | stats count() by eventType
        ```
    """
    if details is None:
        details = {}

    log_entry = {
        "eventType": event_type,
        "error": str(error),
        "errorType": type(error).__name__,
        **details,
    }

    request_id = get_aws_request_id()
    if request_id:
        log_entry["awsRequestId"] = request_id

    logger = logging.getLogger()
    logger.error(json.dumps(log_entry, default=_json_default))


def log_metrics(
    event_type: str,
    metrics: Dict[str, Any],
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log performance metrics as structured data.

    Args:
        event_type: Type of metric event (e.g., 'read_media_completed')
        metrics: Metric values (duration_ms, counts, ...)
        details: Additional context
    """
    if details is None:
        details = {}

    log_entry = {
        "eventType": event_type,
        "metrics": metrics,
        **details,
    }

    request_id = get_aws_request_id()
    if request_id:
        log_entry["awsRequestId"] = request_id

    logger = logging.getLogger()
    logger.info(json.dumps(log_entry, default=_json_default))


def lambda_handler(kind: Literal["api_gateway"] = "api_gateway") -> Callable:
    """
    Decorator for Lambda handlers that sets up logging and handles event redaction.

    Example:
        ```python
        @lambda_handler(kind="api_gateway")
        def handler(event, context):
            return {"statusCode": 200}
        ```

    The decorator:
    - Calls setup_logging()
    - Extracts and stores AWS request ID from context
    - Logs the incoming event (with sensitive fields redacted)
    - Logs and re-raises exceptions that escape the handler
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(event, context):
            setup_logging()

            request_id = getattr(context, "aws_request_id", None)
            set_aws_request_id(request_id)

            log_event(
                f"handler_invoked_{kind}",
                {
                    "handlerKind": kind,
                    "event": _redact_event(event),
                },
            )

            try:
                return func(event, context)
            except Exception as e:
                log_error(
                    f"handler_error_{kind}",
                    e,
                    {"handlerKind": kind},
                )
                raise

        return wrapper

    return decorator


def _redact_event(event: Any) -> Any:
    """
    Redact sensitive fields from an API Gateway proxy event.

    Args:
        event: The Lambda event

    Returns:
        Event copy with auth headers redacted and the body truncated
    """
    redacted = copy.deepcopy(event)
    if not isinstance(redacted, dict):
        return redacted

    headers = redacted.get("headers")
    if isinstance(headers, dict):
        for header in list(headers):
            if header.lower() in ("authorization", "x-api-key", "cookie"):
                headers[header] = "***REDACTED***"

    # Authorizer claims can carry tokens
    request_context = redacted.get("requestContext")
    if isinstance(request_context, dict) and "authorizer" in request_context:
        request_context["authorizer"] = "***REDACTED***"

    body = redacted.get("body")
    if isinstance(body, str) and len(body) > MAX_LOGGED_BODY_LENGTH:
        redacted["body"] = body[:MAX_LOGGED_BODY_LENGTH] + "...[truncated]"

    return redacted


class ObservabilityContext:
    """
    Context manager for logging operations with timing.

    Example:
        ```python
        with ObservabilityContext('read_media', {'stack_limit': 5}):
            do_work()
        ```

    Logs:
        - 'read_media_started'
        - 'read_media_completed' (with duration_ms)
        - 'read_media_failed' (if exception occurs)
    """

    def __init__(self, operation_name: str, context: Optional[Dict[str, Any]] = None):
        self.operation_name = operation_name
        self.context = context or {}
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        log_event(f"{self.operation_name}_started", self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return False

        duration_ms = int((time.time() - self.start_time) * 1000)

        if exc_type is not None:
            log_error(
                f"{self.operation_name}_failed",
                exc_val,
                {**self.context, "duration_ms": duration_ms},
            )
        else:
            log_metrics(
                f"{self.operation_name}_completed",
                {"duration_ms": duration_ms},
                self.context,
            )
        return False
