"""DynamoDB client for stack and media metadata.

Wraps a low-level boto3 DynamoDB client (clients are thread-safe, resources
are not) and exposes the three access patterns the handlers need as coroutines.
Each blocking boto3 call runs in a worker thread so that fan-outs started
with ``asyncio.gather`` overlap.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from .constants import PutOutcome
from .observability import log_error, log_event

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


@dataclass(frozen=True)
class PutResult:
    """Outcome of ``put_if_absent``; ``error`` is set only when FAILED."""

    table: str
    key: Any
    outcome: PutOutcome
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not PutOutcome.FAILED


class MetadataStore:
    """Async facade over DynamoDB for the photos page tables."""

    def __init__(self, client=None, region_name: Optional[str] = None):
        """
        Initialize the store.

        Args:
            client: boto3 DynamoDB client; one is created when omitted
            region_name: region for the created client
        """
        self.client = client or boto3.client("dynamodb", region_name=region_name)
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def _serialize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {k: self._serializer.serialize(v) for k, v in item.items()}

    def _deserialize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {k: self._deserializer.deserialize(v) for k, v in item.items()}

    async def query_stacks(
        self,
        table: str,
        index: str,
        limit: int,
        start_timestamp: int,
        end_timestamp: int,
    ) -> List[Dict[str, Any]]:
        """
        Find stacks uploaded in ``[start_timestamp, end_timestamp]``, newest first.

        The stack index is keyed by ``stackId``, so there is no partition to
        query by time. The index is scanned page by page with the range as a
        filter, then the matches are sorted newest first and cut to ``limit``.

        Args:
            table: Stack metadata table name
            index: Stack GSI projecting ``uploadTimestamp``
            limit: Maximum number of stacks to return
            start_timestamp: Inclusive lower bound (epoch ms)
            end_timestamp: Inclusive upper bound (epoch ms)

        Returns:
            Stack items as plain dicts
        """
        params: Dict[str, Any] = {
            "TableName": table,
            "IndexName": index,
            "FilterExpression": "#uploadTimestamp BETWEEN :start AND :end",
            "ExpressionAttributeNames": {"#uploadTimestamp": "uploadTimestamp"},
            "ExpressionAttributeValues": self._serialize({":start": start_timestamp, ":end": end_timestamp}),
        }
        items: List[Dict[str, Any]] = []
        while True:
            response = await asyncio.to_thread(self.client.scan, **params)
            items.extend(self._deserialize(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key

        items.sort(key=lambda item: item["uploadTimestamp"], reverse=True)
        return items[:limit]

    async def query_media(self, table: str, index: str, stack_id: str) -> List[Dict[str, Any]]:
        """
        Query every media item belonging to ``stack_id``.

        Follows ``LastEvaluatedKey`` so large stacks are returned whole.
        """
        params: Dict[str, Any] = {
            "TableName": table,
            "IndexName": index,
            "KeyConditionExpression": "stackId = :stackId",
            "ExpressionAttributeValues": self._serialize({":stackId": stack_id}),
        }
        items: List[Dict[str, Any]] = []
        while True:
            response = await asyncio.to_thread(self.client.query, **params)
            items.extend(self._deserialize(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key
        return items

    async def put_if_absent(self, table: str, item: Dict[str, Any], key_attribute: str) -> PutResult:
        """
        Insert ``item`` unless an item with the same key already exists.

        Never raises for store errors: the failure is returned as
        ``PutOutcome.FAILED`` with the cause attached.
        """
        key = item.get(key_attribute)
        try:
            await asyncio.to_thread(
                self.client.put_item,
                TableName=table,
                Item=self._serialize(item),
                ConditionExpression=f"attribute_not_exists({key_attribute})",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED:
                log_event(
                    "item_already_exists",
                    {"table": table, "keyAttribute": key_attribute, "key": key},
                )
                return PutResult(table, key, PutOutcome.ALREADY_EXISTS)
            log_error("put_item_failed", e, {"table": table, "keyAttribute": key_attribute, "key": key})
            return PutResult(table, key, PutOutcome.FAILED, e)
        except Exception as e:
            log_error("put_item_failed", e, {"table": table, "keyAttribute": key_attribute, "key": key})
            return PutResult(table, key, PutOutcome.FAILED, e)

        return PutResult(table, key, PutOutcome.INSERTED)
