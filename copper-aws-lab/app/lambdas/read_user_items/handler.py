# app/lambdas/read_user_items/handler.py
"""GET /items: every design owned by the caller."""
import logging

from copper_shared.config import LOG_LEVEL
from copper_shared.errors import ItemError, UpstreamFailure
from copper_shared.http_utils import error_response, json_response, parse_request
from copper_shared.identity import require_user_id
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
        user_id = require_user_id(request.headers)
        items = store.query_by_owner(user_id)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error listing items")
        return error_response(UpstreamFailure("Internal Server Error: Unable to retrieve documents."))

    # the index is keyed on userId already; this guards a misconfigured store
    items = [item for item in items if item.get("userId") == user_id]
    logger.info("Listed %d items", len(items))
    return json_response(200, items)


def lambda_handler(event, context):
    return handle(event, _get_store())
