"""HTTP API (payload v2) event parsing and JSON responses."""

import base64
import json
import logging
from collections import namedtuple
from datetime import datetime, timezone

from copper_shared.config import CORS_HEADERS, CORS_ORIGIN
from copper_shared.errors import MalformedBody, MissingField

logger = logging.getLogger(__name__)

Request = namedtuple("Request", ["method", "path", "headers", "query", "body"])


def parse_request(event, parse_body=True):
    """Build a Request from an API Gateway HTTP API event.

    Header names are lower-cased. An empty body parses to None; a body
    that is not JSON raises MalformedBody. Handlers that take no body pass
    parse_body=False and get None whatever was sent.
    """
    http = (event.get("requestContext") or {}).get("http") or {}
    method = (http.get("method") or event.get("httpMethod") or "GET").upper()
    path = http.get("path") or event.get("rawPath") or "/"

    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    query = dict(event.get("queryStringParameters") or {})

    raw = event.get("body")
    body = None
    if raw and parse_body:
        try:
            if event.get("isBase64Encoded"):
                raw = base64.b64decode(raw).decode("utf-8")
            body = json.loads(raw)
        except (ValueError, TypeError) as exc:
            raise MalformedBody() from exc

    return Request(method, path, headers, query, body)


def is_blank(value):
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def require_fields(data, *names):
    """Raise MissingField unless every name is present and non-empty in data."""
    if not isinstance(data, dict):
        raise MissingField(f"Missing required fields: {', '.join(names)}")
    missing = [name for name in names if is_blank(data.get(name))]
    if missing:
        raise MissingField(f"Missing required fields: {', '.join(missing)}")


def now_iso():
    """UTC timestamp with millisecond precision, e.g. 2025-03-12T12:08:00.089Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def json_response(status_code, body):
    headers = {"Content-Type": "application/json"}
    if CORS_ORIGIN:
        headers.update(CORS_HEADERS)
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body, default=str),
    }


def error_response(error):
    """Map an ItemError onto its response."""
    if error.status_code >= 500:
        logger.error("%s: %s", error.code, error.message)
    else:
        logger.warning("%s: %s", error.code, error.message)
    return json_response(error.status_code, error.to_dict())
