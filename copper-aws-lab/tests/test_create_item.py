# tests/test_create_item.py
"""Unit tests for the create_item Lambda handler."""
import importlib.util
import json
import os
from unittest.mock import MagicMock, patch

from copper_shared.errors import UpstreamFailure
from copper_shared.identity import encode_principal
from copper_shared.store import InMemoryDocumentStore

_handler_path = os.path.join(os.path.dirname(__file__), "..", "app", "lambdas", "create_item", "handler.py")
spec = importlib.util.spec_from_file_location("create_item_handler", _handler_path)
create_item = importlib.util.module_from_spec(spec)
spec.loader.exec_module(create_item)


def _make_event(body=None, user_id="u1", raw_body=None):
    headers = {"content-type": "application/json"}
    if user_id is not None:
        headers["x-ms-client-principal"] = encode_principal({"auth_typ": "Bearer", "user_id": user_id})
    event = {
        "requestContext": {"http": {"method": "POST", "path": "/items"}},
        "headers": headers,
    }
    if body is not None:
        event["body"] = json.dumps(body)
    if raw_body is not None:
        event["body"] = raw_body
    return event


DESIGN = {
    "version": 20241229,
    "generator": "pcbnew",
    "layers": [{"index": 0, "type": "fCu", "purpose": "signal"}],
    "components": [{"name": "WS2812B", "layer": "fCu", "position": {"x": 148.5011, "y": 107.1372}}],
}


class TestCreateItem:
    def test_creates_owned_document(self):
        store = InMemoryDocumentStore()
        result = create_item.handle(_make_event(DESIGN), store)
        body = json.loads(result["body"])

        assert result["statusCode"] == 201
        assert body["userId"] == "u1"
        assert body["generator"] == "pcbnew"
        assert body["components"] == DESIGN["components"]
        assert body["createdAt"].endswith("Z")
        assert "updatedAt" not in body
        assert store.get(body["id"]) == body

    def test_ids_are_unique(self):
        store = InMemoryDocumentStore()
        ids = {json.loads(create_item.handle(_make_event(DESIGN), store)["body"])["id"] for _ in range(5)}
        assert len(ids) == 5
        assert len(store) == 5

    def test_server_fields_override_body(self):
        store = InMemoryDocumentStore()
        body = {
            **DESIGN,
            "id": "chosen-id",
            "userId": "someone-else",
            "createdAt": "1999-01-01T00:00:00Z",
            "updatedAt": "2099-01-01T00:00:00Z",
        }
        created = json.loads(create_item.handle(_make_event(body), store)["body"])

        assert created["id"] != "chosen-id"
        assert created["userId"] == "u1"
        assert created["createdAt"] != "1999-01-01T00:00:00Z"
        assert "updatedAt" not in created
        assert "updatedAt" not in store.get(created["id"])

    def test_missing_required_fields(self):
        store = InMemoryDocumentStore()
        result = create_item.handle(_make_event({"version": 1}), store)

        assert result["statusCode"] == 400
        assert json.loads(result["body"])["code"] == "MissingField"
        assert json.loads(result["body"])["error"] == "Missing required fields: generator"
        assert len(store) == 0

    def test_missing_body(self):
        result = create_item.handle(_make_event(), InMemoryDocumentStore())
        assert result["statusCode"] == 400

    def test_invalid_json_body(self):
        result = create_item.handle(_make_event(raw_body="not-json"), InMemoryDocumentStore())
        assert result["statusCode"] == 400
        assert json.loads(result["body"])["code"] == "MalformedBody"

    def test_missing_identity_header(self):
        store = InMemoryDocumentStore()
        result = create_item.handle(_make_event(DESIGN, user_id=None), store)

        assert result["statusCode"] == 401
        assert len(store) == 0

    def test_principal_without_user_id(self):
        event = _make_event(DESIGN)
        event["headers"]["x-ms-client-principal"] = encode_principal({"name": "Nobody"})
        result = create_item.handle(event, InMemoryDocumentStore())
        assert result["statusCode"] == 401

    def test_malformed_principal(self):
        event = _make_event(DESIGN)
        event["headers"]["x-ms-client-principal"] = "not base64 at all"
        result = create_item.handle(event, InMemoryDocumentStore())

        assert result["statusCode"] == 401
        assert json.loads(result["body"])["code"] == "MalformedIdentity"

    def test_store_failure(self):
        store = MagicMock()
        store.create.side_effect = UpstreamFailure("Failed to create item")
        result = create_item.handle(_make_event(DESIGN), store)
        assert result["statusCode"] == 500

    def test_unexpected_error(self):
        store = MagicMock()
        store.create.side_effect = RuntimeError("boom")
        result = create_item.handle(_make_event(DESIGN), store)

        assert result["statusCode"] == 500
        assert json.loads(result["body"])["code"] == "UpstreamFailure"


class TestLambdaHandler:
    def test_uses_cached_store(self):
        store = InMemoryDocumentStore()
        with patch.object(create_item, "_store", store):
            result = create_item.lambda_handler(_make_event(DESIGN), None)

        assert result["statusCode"] == 201
        assert len(store) == 1

    def test_builds_store_once(self):
        store = InMemoryDocumentStore()
        with patch.object(create_item, "_store", None):
            with patch.object(create_item.DynamoDocumentStore, "from_env", return_value=store) as from_env:
                create_item.lambda_handler(_make_event(DESIGN), None)
                create_item.lambda_handler(_make_event(DESIGN), None)

        from_env.assert_called_once()
        assert len(store) == 2
