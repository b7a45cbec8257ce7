# tests/test_item_lifecycle.py
"""End-to-end ownership flow across the item handlers, on an in-memory store."""
import importlib.util
import json
import os

from copper_shared.identity import encode_principal
from copper_shared.store import InMemoryDocumentStore

_lambdas_dir = os.path.join(os.path.dirname(__file__), "..", "app", "lambdas")


def _load(name):
    spec = importlib.util.spec_from_file_location(f"{name}_handler", os.path.join(_lambdas_dir, name, "handler.py"))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


create_item = _load("create_item")
read_item = _load("read_item")
read_user_items = _load("read_user_items")
update_item = _load("update_item")
delete_item = _load("delete_item")


def _make_event(method, user_id, body=None, query=None):
    event = {
        "requestContext": {"http": {"method": method, "path": "/items"}},
        "headers": {"x-ms-client-principal": encode_principal({"userId": user_id})},
        "queryStringParameters": query,
    }
    if body is not None:
        event["body"] = json.dumps(body)
    return event


def test_owner_lifecycle():
    store = InMemoryDocumentStore()

    created = create_item.handle(_make_event("POST", "u1", body={"version": 1, "generator": "x"}), store)
    assert created["statusCode"] == 201
    doc = json.loads(created["body"])
    assert doc["userId"] == "u1"
    item_id = doc["id"]

    assert read_item.handle(_make_event("GET", "u2", query={"id": item_id}), store)["statusCode"] == 403

    fetched = read_item.handle(_make_event("GET", "u1", query={"id": item_id}), store)
    assert fetched["statusCode"] == 200
    assert json.loads(fetched["body"]) == doc

    deleted = delete_item.handle(_make_event("DELETE", "u1", query={"id": item_id}), store)
    assert deleted["statusCode"] == 200

    assert read_item.handle(_make_event("GET", "u1", query={"id": item_id}), store)["statusCode"] == 404


def test_non_owner_cannot_mutate():
    store = InMemoryDocumentStore()
    doc = json.loads(create_item.handle(_make_event("POST", "u1", body={"version": 1, "generator": "x"}), store)["body"])

    updated = update_item.handle(_make_event("PUT", "u2", body={"id": doc["id"], "generator": "evil"}), store)
    deleted = delete_item.handle(_make_event("DELETE", "u2", query={"id": doc["id"]}), store)

    assert updated["statusCode"] == 403
    assert deleted["statusCode"] == 403
    assert store.get(doc["id"]) == doc


def test_missing_items_do_not_touch_store():
    store = InMemoryDocumentStore([{"id": "keep", "userId": "u1"}])

    assert read_item.handle(_make_event("GET", "u1", query={"id": "nope"}), store)["statusCode"] == 404
    assert update_item.handle(_make_event("PUT", "u1", body={"id": "nope", "version": 2}), store)["statusCode"] == 404
    assert delete_item.handle(_make_event("DELETE", "u1", query={"id": "nope"}), store)["statusCode"] == 404
    assert len(store) == 1
    assert store.get("nope") is None


def test_listing_is_scoped_to_caller():
    store = InMemoryDocumentStore()
    for user_id in ("u1", "u2", "u1"):
        create_item.handle(_make_event("POST", user_id, body={"version": 1, "generator": "x"}), store)

    mine = json.loads(read_user_items.handle(_make_event("GET", "u1"), store)["body"])
    theirs = json.loads(read_user_items.handle(_make_event("GET", "u2"), store)["body"])

    assert len(mine) == 2
    assert len(theirs) == 1
    assert {item["userId"] for item in mine} == {"u1"}
