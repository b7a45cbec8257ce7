"""Caller identity and document ownership.

The hosting platform authenticates the caller and injects a client
principal header: base64 of a JSON object such as

    {
        "auth_typ": "Bearer",
        "name": "Test User",
        "user_id": "test-user-id",
        "identity_provider": "AzureAD"
    }

Only ``userId`` (preferred) or ``user_id`` is read; the rest is platform
metadata.
"""

import base64
import binascii
import json
import logging

from copper_shared.config import IDENTITY_HEADER
from copper_shared.errors import Forbidden, MalformedIdentity, Unauthenticated

logger = logging.getLogger(__name__)


def _header(headers, name):
    """Case-insensitive header lookup."""
    if not headers:
        return None
    if name in headers:
        return headers[name]
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def decode_principal(value):
    """Decode a client principal header value into its JSON object."""
    try:
        raw = value.strip()
        raw += "=" * (-len(raw) % 4)
        payload = json.loads(base64.b64decode(raw, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise MalformedIdentity() from exc
    if not isinstance(payload, dict):
        raise MalformedIdentity()
    return payload


def encode_principal(principal):
    """Inverse of decode_principal, for local tooling and tests."""
    return base64.b64encode(json.dumps(principal).encode("utf-8")).decode("ascii")


def get_user_id(headers, header_name=IDENTITY_HEADER):
    """Return the caller's user id, or None when the principal carries none.

    Raises Unauthenticated when the header is missing and
    MalformedIdentity when it cannot be decoded.
    """
    value = _header(headers, header_name)
    if not value:
        raise Unauthenticated()

    principal = decode_principal(value)
    user_id = principal.get("userId")
    if user_id is None:
        user_id = principal.get("user_id")
    if user_id is None or user_id == "":
        return None
    return str(user_id)


def require_user_id(headers, header_name=IDENTITY_HEADER):
    user_id = get_user_id(headers, header_name)
    if not user_id:
        raise Unauthenticated("Unauthorized: Unable to determine user identity.")
    return user_id


def authorize_owner(headers, document, header_name=IDENTITY_HEADER):
    """Ensure the caller owns ``document``.

    Raises Unauthenticated when no identity can be resolved and Forbidden
    when the document is missing or owned by someone else.
    """
    user_id = require_user_id(headers, header_name)
    if not document or document.get("userId") != user_id:
        logger.warning("Ownership check failed for user %s", user_id)
        raise Forbidden()
