"""API Gateway proxy responses."""

import json
from decimal import Decimal
from typing import Any, Dict

from .constants import JSON_HEADERS


def _decimal_default(obj):
    # DynamoDB returns every number as Decimal
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(body, default=_decimal_default),
    }


def message_response(status_code: int, message: str) -> Dict[str, Any]:
    return json_response(status_code, {"message": message})
