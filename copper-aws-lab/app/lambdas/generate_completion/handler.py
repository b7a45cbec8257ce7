# app/lambdas/generate_completion/handler.py
"""POST /completions: pass a prompt through to the text completion API.

The API key is resolved per request: from the environment when
APP_ENVIRONMENT=Development, from Secrets Manager otherwise.
"""
import logging
import os

from copper_shared.completions import generate_completion
from copper_shared.config import DEFAULT_COMPLETION_SECRET, LOG_LEVEL
from copper_shared.credentials import resolve_secret
from copper_shared.errors import ItemError, MissingField, UpstreamFailure
from copper_shared.http_utils import error_response, is_blank, json_response, parse_request
from copper_shared.identity import require_user_id

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)


def handle(event, store=None):
    try:
        request = parse_request(event)
        body = request.body if isinstance(request.body, dict) else {}
        prompt = body.get("prompt")
        if is_blank(prompt):
            raise MissingField("Please provide a prompt in the request body.")
        require_user_id(request.headers)

        api_key = resolve_secret(os.environ.get("COMPLETION_API_KEY_SECRET", DEFAULT_COMPLETION_SECRET))
        text = generate_completion(prompt, api_key)
    except ItemError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Unexpected error generating completion")
        return error_response(UpstreamFailure())

    return json_response(200, {"completion": text})


def lambda_handler(event, context):
    return handle(event)
