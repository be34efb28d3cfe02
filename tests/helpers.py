"""Test helpers: API Gateway events and AWS client stubs."""

import json
import os
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

STACK_TABLE = os.environ.get("STACK_METADATA_TABLE", "StackMetadataTable")
MEDIA_TABLE = os.environ.get("MEDIA_METADATA_TABLE", "MediaMetadataTable")

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def serialize(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _serializer.serialize(v) for k, v in item.items()}


def deserialize(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _deserializer.deserialize(v) for k, v in item.items()}


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def api_event(body: Any = None, raw: bool = False) -> Dict[str, Any]:
    """API Gateway proxy event; ``body`` is JSON-encoded unless ``raw``."""
    if body is not None and not raw:
        body = json.dumps(body)
    return {
        "body": body,
        "httpMethod": "POST",
        "headers": {},
        "isBase64Encoded": False,
        "path": "/v1/media",
        "pathParameters": None,
        "queryStringParameters": None,
        "requestContext": {},
        "resource": "/v1/media",
    }


def response_body(response: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(response["body"])


class DynamoDBStub:
    """In-memory stand-in for the low-level DynamoDB client.

    Stack scans apply the BETWEEN filter in table order. Media queries match
    on stackId. Puts honour ``attribute_not_exists``.
    """

    def __init__(
        self,
        stacks: Iterable[Dict[str, Any]] = (),
        media: Iterable[Dict[str, Any]] = (),
        fail_tables: Iterable[str] = (),
        fail_media_for: Iterable[str] = (),
        media_delays: Optional[Dict[str, float]] = None,
    ):
        self.stacks = list(stacks)
        self.media = list(media)
        self.fail_tables = set(fail_tables)
        self.fail_media_for = set(fail_media_for)
        self.media_delays = media_delays or {}
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.scan_calls: List[Dict[str, Any]] = []
        self.query_calls: List[Dict[str, Any]] = []
        self.put_calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        with self._lock:
            self.scan_calls.append(kwargs)
        table = kwargs["TableName"]
        if table in self.fail_tables:
            raise client_error("ProvisionedThroughputExceededException", "Scan")

        values = deserialize(kwargs["ExpressionAttributeValues"])
        matching = [s for s in self.stacks if values[":start"] <= s.get("uploadTimestamp", -1) <= values[":end"]]
        return {"Items": [serialize(s) for s in matching]}

    def query(self, **kwargs: Any) -> Dict[str, Any]:
        with self._lock:
            self.query_calls.append(kwargs)
        table = kwargs["TableName"]
        if table in self.fail_tables:
            raise client_error("ProvisionedThroughputExceededException", "Query")

        stack_id = deserialize(kwargs["ExpressionAttributeValues"])[":stackId"]
        if stack_id in self.media_delays:
            time.sleep(self.media_delays[stack_id])
        if stack_id in self.fail_media_for:
            raise client_error("InternalServerError", "Query")
        return {"Items": [serialize(m) for m in self.media if m.get("stackId") == stack_id]}

    def put_item(self, **kwargs: Any) -> Dict[str, Any]:
        with self._lock:
            self.put_calls.append(kwargs)
        table = kwargs["TableName"]
        if table in self.fail_tables:
            raise client_error("ProvisionedThroughputExceededException", "PutItem")

        key_attribute = kwargs["ConditionExpression"][len("attribute_not_exists(") : -1]
        item = deserialize(kwargs["Item"])
        with self._lock:
            rows = self.tables.setdefault(table, {})
            if item[key_attribute] in rows:
                raise client_error("ConditionalCheckFailedException", "PutItem")
            rows[item[key_attribute]] = item
        return {}

    def stored(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        return self.tables.get(table, {}).get(key)


class S3Stub:
    def __init__(self, url: str = "https://example.com/signed-url", fail: bool = False):
        self.url = url
        self.fail = fail
        self.presign_calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def generate_presigned_url(self, client_method: str, Params=None, ExpiresIn=3600, **kwargs: Any) -> str:
        with self._lock:
            self.presign_calls.append({"ClientMethod": client_method, "Params": Params, "ExpiresIn": ExpiresIn})
        if self.fail:
            raise client_error("AccessDenied", "PutObject")
        return self.url

