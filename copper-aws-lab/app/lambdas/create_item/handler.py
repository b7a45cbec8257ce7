# app/lambdas/create_item/handler.py
"""POST /items: store a new PCB design owned by the caller.

Example body:

    {
        "version": 20241229,
        "generator": "pcbnew",
        "layers": [{"index": 0, "type": "fCu", "purpose": "signal"}],
        "components": [
            {"name": "WS2812B", "layer": "fCu", "position": {"x": 148.5011, "y": 107.1372},
             "reference": "U1", "value": "WS2812B"}
        ]
    }

``id``, ``userId`` and ``createdAt`` are always set by the server, and
``updatedAt`` stays absent until the first update.
"""
import logging
import uuid

from copper_shared.config import LOG_LEVEL
from copper_shared.errors import ItemError, UpstreamFailure
from copper_shared.http_utils import error_response, json_response, now_iso, parse_request, require_fields
from copper_shared.identity import require_user_id
from copper_shared.store import DynamoDocumentStore

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

SERVER_FIELDS = ("id", "userId", "createdAt", "updatedAt")

_store = None


def _get_store():
    global _store
    if _store is None:
        _store = DynamoDocumentStore.from_env()
    return _store


def handle(event, store):
    try:
        request = parse_request(event)
        require_fields(request.body, "version", "generator")
        user_id = require_user_id(request.headers)

        body = {k: v for k, v in request.body.items() if k not in SERVER_FIELDS}
        item = {
            **body,
            "id": str(uuid.uuid4()),
            "userId": user_id,
            "createdAt": now_iso(),
        }
        store.create(item)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error creating item")
        return error_response(UpstreamFailure())

    logger.info("Created item %s", item["id"])
    return json_response(201, item)


def lambda_handler(event, context):
    return handle(event, _get_store())
