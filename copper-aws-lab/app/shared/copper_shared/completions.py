"""Client for an OpenAI-compatible text completion endpoint."""

import json
import logging
import os
import urllib.error
import urllib.request

from copper_shared.config import (
    DEFAULT_COMPLETION_ENDPOINT,
    DEFAULT_COMPLETION_MAX_TOKENS,
    DEFAULT_COMPLETION_MODEL,
    DEFAULT_COMPLETION_TIMEOUT_SECONDS,
    env_int,
)
from copper_shared.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def generate_completion(prompt, api_key, endpoint=None, model=None, max_tokens=None, timeout=None):
    endpoint = endpoint or os.environ.get("COMPLETION_API_ENDPOINT", DEFAULT_COMPLETION_ENDPOINT)
    model = model or os.environ.get("COMPLETION_MODEL", DEFAULT_COMPLETION_MODEL)
    if max_tokens is None:
        max_tokens = env_int("COMPLETION_MAX_TOKENS", DEFAULT_COMPLETION_MAX_TOKENS)
    if timeout is None:
        timeout = env_int("COMPLETION_TIMEOUT_SECONDS", DEFAULT_COMPLETION_TIMEOUT_SECONDS)

    req = urllib.request.Request(
        url=f"{endpoint.rstrip('/')}/v1/completions",
        method="POST",
        data=json.dumps({"model": model, "prompt": prompt, "max_tokens": max_tokens}).encode("utf-8"),
        headers={
            "Authorization": f"Bearer {api_key}",
            "content-type": "application/json",
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw_body = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace")
        message = body[:400] if body else str(exc)
        raise UpstreamFailure(f"Error: completion request failed (http_{exc.code}): {message}") from exc
    except urllib.error.URLError as exc:
        raise UpstreamFailure(f"Error: completion request failed: {exc.reason}") from exc

    try:
        payload = json.loads(raw_body)
        return payload["choices"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise UpstreamFailure("Error: completion response had no choices") from exc
