"""
Copper Devkit
=============
Local developer tooling for the Copper PCB design functions:
  1. Encode / decode client principal headers
  2. A local HTTP server that routes /items and /completions to the
     Lambda handlers
  3. A CLI for developer testing

Dependencies (install via pip):
  flask>=3.0.0
  pyyaml>=6.0.0

Example usage:
  # Build a principal header from a YAML identity file
  python copper_devkit.py principal user.yaml

  # Check what user id a header value resolves to
  python copper_devkit.py decode eyJ1c2VyX2lkIjogInRlc3QtdXNlci1pZCJ9

  # Run the functions on localhost:7071 against an in-memory store
  python copper_devkit.py serve --port 7071

  # In another terminal, create a design
  curl -X POST -H "Content-Type: application/json" \
       -H "x-ms-client-principal: $(python copper_devkit.py principal user.yaml)" \
       --data '{"version": 20241229, "generator": "pcbnew"}' \
       http://localhost:7071/items

An identity file looks like:

  auth_typ: Bearer
  name: Test User
  user_id: test-user-id
  identity_provider: AzureAD
"""
from __future__ import annotations

import argparse
import importlib.util
import json
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from copper_shared.config import IDENTITY_HEADER
from copper_shared.errors import ItemError
from copper_shared.identity import encode_principal, get_user_id
from copper_shared.store import DocumentStore, DynamoDocumentStore, InMemoryDocumentStore

LAMBDAS_DIR = Path(__file__).resolve().parent.parent / "copper-aws-lab" / "app" / "lambdas"

HANDLER_NAMES = (
    "create_item",
    "read_item",
    "read_user_items",
    "update_item",
    "delete_item",
    "generate_completion",
)


# ---------------------------
# Principal Helpers
# ---------------------------

def load_identity(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith((".yaml", ".yml")):
            identity = yaml.safe_load(f)
        else:
            identity = json.load(f)
    if not isinstance(identity, dict):
        raise ValueError("Identity file must contain a mapping")
    return identity


def principal_header(identity: Dict[str, Any]) -> str:
    return encode_principal(identity)


def decode_header(value: str) -> str:
    """Resolve a header value to its user id, raising ValueError if there is none."""
    try:
        user_id = get_user_id({IDENTITY_HEADER: value})
    except ItemError as e:
        raise ValueError(e.message) from e
    if not user_id:
        raise ValueError("Principal has no userId or user_id")
    return user_id


# ---------------------------
# Local Server
# ---------------------------

def load_handlers() -> Dict[str, Any]:
    handlers = {}
    for name in HANDLER_NAMES:
        spec = importlib.util.spec_from_file_location(f"{name}_handler", LAMBDAS_DIR / name / "handler.py")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        handlers[name] = module
    return handlers


def to_event(request) -> Dict[str, Any]:
    """Translate a Flask request into an HTTP API (v2) event."""
    return {
        "rawPath": request.path,
        "requestContext": {"http": {"method": request.method, "path": request.path}},
        "headers": {k.lower(): v for k, v in request.headers.items()},
        "queryStringParameters": request.args.to_dict() or None,
        "body": request.get_data(as_text=True) or None,
        "isBase64Encoded": False,
    }


def route_items(method: str, query: Dict[str, Any]) -> str:
    if method == "POST":
        return "create_item"
    if method == "GET":
        return "read_item" if "id" in query else "read_user_items"
    if method == "PUT":
        return "update_item"
    if method == "DELETE":
        return "delete_item"
    raise ValueError(f"Unsupported method {method}")


def create_app(store: DocumentStore):
    from flask import Flask, Response, request

    app = Flask(__name__)
    handlers = load_handlers()

    def _respond(result: Dict[str, Any]):
        return Response(result["body"], status=result["statusCode"], headers=result.get("headers"))

    @app.route("/items", methods=["GET", "POST", "PUT", "DELETE"])
    def items():
        event = to_event(request)
        name = route_items(request.method, request.args)
        return _respond(handlers[name].handle(event, store))

    @app.route("/completions", methods=["POST"])
    def completions():
        return _respond(handlers["generate_completion"].handle(to_event(request)))

    return app


def run_server(host: str, port: int, store_kind: str):
    store = DynamoDocumentStore.from_env() if store_kind == "dynamodb" else InMemoryDocumentStore()
    app = create_app(store)
    print(f"[*] Copper functions listening on http://{host}:{port} ({store_kind} store)")
    app.run(host=host, port=port, threaded=True)


# ---------------------------
# CLI Interface
# ---------------------------

def cli(argv=None):
    parser = argparse.ArgumentParser(description="Copper Devkit CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # principal
    p = sub.add_parser("principal", help="Encode an identity (YAML/JSON) as a client principal header")
    p.add_argument("input", help="Path to identity YAML/JSON file")

    # decode
    d = sub.add_parser("decode", help="Resolve a client principal header value to a user id")
    d.add_argument("value", help="Base64 header value")

    # serve
    s = sub.add_parser("serve", help="Run the functions on a local HTTP server")
    s.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    s.add_argument("--port", default=7071, type=int, help="Port (default 7071)")
    s.add_argument("--store", choices=("memory", "dynamodb"), default="memory", help="Document store backend")

    args = parser.parse_args(argv)

    if args.command == "principal":
        print(principal_header(load_identity(args.input)))

    elif args.command == "decode":
        try:
            print(decode_header(args.value))
        except ValueError as e:
            print(f"[✗] {e}")
            sys.exit(1)

    elif args.command == "serve":
        run_server(args.host, args.port, args.store)


if __name__ == "__main__":
    cli()
