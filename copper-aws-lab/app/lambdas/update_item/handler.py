# app/lambdas/update_item/handler.py
"""PUT /items: shallow-merge the body into a design the caller owns.

The body carries ``id`` plus the fields to overwrite. Top-level keys
replace stored ones; anything not sent keeps its value. ``id``,
``userId`` and ``createdAt`` cannot be changed.
"""
import logging

from copper_shared.config import LOG_LEVEL
from copper_shared.errors import ItemError, NotFound, UpstreamFailure
from copper_shared.http_utils import error_response, json_response, now_iso, parse_request, require_fields
from copper_shared.identity import authorize_owner
from copper_shared.store import DynamoDocumentStore

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

IMMUTABLE_FIELDS = ("id", "userId", "createdAt")

_store = None


def _get_store():
    global _store
    if _store is None:
        _store = DynamoDocumentStore.from_env()
    return _store


def merge_item(existing, update_data, updated_at):
    merged = {**existing, **update_data}
    for field in IMMUTABLE_FIELDS:
        if field in existing:
            merged[field] = existing[field]
        else:
            merged.pop(field, None)
    merged["updatedAt"] = updated_at
    return merged


def handle(event, store):
    try:
        request = parse_request(event)
        require_fields(request.body, "id")
        update_data = dict(request.body)
        item_id = str(update_data.pop("id"))

        logger.info("Updating item %s", item_id)
        existing = store.get(item_id)
        if existing is None:
            raise NotFound()

        authorize_owner(request.headers, existing)

        item = merge_item(existing, update_data, now_iso())
        store.replace(item)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error updating item")
        return error_response(UpstreamFailure())

    return json_response(200, item)


def lambda_handler(event, context):
    return handle(event, _get_store())
