# app/lambdas/delete_item/handler.py
"""DELETE /items?id=<id>: remove a design the caller owns."""
import logging

from copper_shared.config import LOG_LEVEL
from copper_shared.errors import ItemError, MissingField, NotFound, UpstreamFailure
from copper_shared.http_utils import error_response, is_blank, json_response, parse_request
from copper_shared.identity import authorize_owner
from copper_shared.store import DynamoDocumentStore

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

_store = None


def _get_store():
    global _store
    if _store is None:
        _store = DynamoDocumentStore.from_env()
    return _store


def handle(event, store):
    try:
        request = parse_request(event, parse_body=False)
        item_id = request.query.get("id")
        if is_blank(item_id):
            raise MissingField("id is required")

        item = store.get(item_id)
        if item is None:
            raise NotFound()

        authorize_owner(request.headers, item)
        store.delete(item_id)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error deleting item")
        return error_response(UpstreamFailure())

    logger.info("Deleted item %s", item_id)
    return json_response(200, {"message": "Item deleted successfully", "id": item_id})


def lambda_handler(event, context):
    return handle(event, _get_store())
