# app/lambdas/read_item/handler.py
"""GET /items?id=<id>: return one design if the caller owns it."""
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

        logger.info("Reading item %s", item_id)
        item = store.get(item_id)
        if item is None:
            raise NotFound()

        authorize_owner(request.headers, item)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error reading item")
        return error_response(UpstreamFailure())

    return json_response(200, item)


def lambda_handler(event, context):
    return handle(event, _get_store())
