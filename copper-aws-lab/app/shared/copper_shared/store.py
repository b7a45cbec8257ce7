"""Document store gateway.

Handlers only see the DocumentStore interface. The Lambda entry points
build a DynamoDocumentStore once per container; local tooling and tests
use InMemoryDocumentStore.
"""

import copy
import json
import logging
import os
import threading
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from copper_shared.config import DEFAULT_OWNER_INDEX, DEFAULT_TABLE_NAME
from copper_shared.errors import NotFound, UpstreamFailure

logger = logging.getLogger(__name__)


class DocumentStore:
    """Point and owner-query access to PCB design documents keyed by ``id``."""

    def get(self, item_id):
        """Return the document or None."""
        raise NotImplementedError

    def create(self, item):
        raise NotImplementedError

    def replace(self, item):
        """Overwrite an existing document. Raises NotFound if it is gone."""
        raise NotImplementedError

    def delete(self, item_id):
        """Remove an existing document. Raises NotFound if it is gone."""
        raise NotImplementedError

    def query_by_owner(self, user_id):
        raise NotImplementedError


# ---------------------------------------------------------------------------
# DynamoDB
# ---------------------------------------------------------------------------

def _to_dynamo(item):
    """DynamoDB rejects floats; store them as Decimal."""
    return json.loads(json.dumps(item), parse_float=Decimal)


def _from_dynamo(value):
    """Convert DynamoDB numbers back to int or float.

    DynamoDB normalises numbers, so an integral float such as 1.0 comes
    back as the int 1. Every other float keeps its float type.
    """
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _error_code(exc):
    return exc.response.get("Error", {}).get("Code", "ClientError")


class DynamoDocumentStore(DocumentStore):
    def __init__(self, table, owner_index=DEFAULT_OWNER_INDEX):
        self._table = table
        self._owner_index = owner_index

    @classmethod
    def from_env(cls):
        region = os.environ.get("DYNAMODB_REGION") or None
        resource = boto3.resource(
            "dynamodb",
            region_name=region,
            config=Config(retries={"max_attempts": 5, "mode": "standard"}),
        )
        table_name = os.environ.get("TABLE_NAME", DEFAULT_TABLE_NAME)
        logger.info("Using DynamoDB table %s", table_name)
        return cls(
            resource.Table(table_name),
            owner_index=os.environ.get("OWNER_INDEX_NAME", DEFAULT_OWNER_INDEX),
        )

    def get(self, item_id):
        try:
            resp = self._table.get_item(Key={"id": item_id})
        except (ClientError, BotoCoreError) as exc:
            raise UpstreamFailure(f"Failed to read item {item_id}") from exc
        item = resp.get("Item")
        return _from_dynamo(item) if item else None

    def create(self, item):
        try:
            self._table.put_item(
                Item=_to_dynamo(item),
                ConditionExpression=Attr("id").not_exists(),
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise UpstreamFailure(f"Item {item['id']} already exists") from exc
            raise UpstreamFailure("Failed to create item") from exc
        except BotoCoreError as exc:
            raise UpstreamFailure("Failed to create item") from exc

    def replace(self, item):
        try:
            self._table.put_item(
                Item=_to_dynamo(item),
                ConditionExpression=Attr("id").exists(),
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise NotFound() from exc
            raise UpstreamFailure(f"Failed to update item {item['id']}") from exc
        except BotoCoreError as exc:
            raise UpstreamFailure(f"Failed to update item {item['id']}") from exc

    def delete(self, item_id):
        try:
            self._table.delete_item(
                Key={"id": item_id},
                ConditionExpression=Attr("id").exists(),
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise NotFound() from exc
            raise UpstreamFailure(f"Failed to delete item {item_id}") from exc
        except BotoCoreError as exc:
            raise UpstreamFailure(f"Failed to delete item {item_id}") from exc

    def query_by_owner(self, user_id):
        kwargs = {
            "IndexName": self._owner_index,
            "KeyConditionExpression": Key("userId").eq(user_id),
        }
        items = []
        try:
            while True:
                resp = self._table.query(**kwargs)
                items.extend(_from_dynamo(item) for item in resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise UpstreamFailure("Internal Server Error: Unable to retrieve documents.") from exc
        return items


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryDocumentStore(DocumentStore):
    def __init__(self, items=None):
        self._items = {}
        self._lock = threading.Lock()
        for item in items or ():
            self._items[item["id"]] = copy.deepcopy(item)

    def __len__(self):
        return len(self._items)

    def get(self, item_id):
        with self._lock:
            item = self._items.get(item_id)
            return copy.deepcopy(item) if item is not None else None

    def create(self, item):
        with self._lock:
            if item["id"] in self._items:
                raise UpstreamFailure(f"Item {item['id']} already exists")
            self._items[item["id"]] = copy.deepcopy(item)

    def replace(self, item):
        with self._lock:
            if item["id"] not in self._items:
                raise NotFound()
            self._items[item["id"]] = copy.deepcopy(item)

    def delete(self, item_id):
        with self._lock:
            if self._items.pop(item_id, None) is None:
                raise NotFound()

    def query_by_owner(self, user_id):
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.values() if item.get("userId") == user_id]
