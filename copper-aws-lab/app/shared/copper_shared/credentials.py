"""Named secret resolution.

Development reads the secret from an environment variable so no AWS
credentials are needed locally. Everywhere else it comes from Secrets
Manager.
"""

import logging
import os

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from copper_shared.errors import UpstreamFailure

logger = logging.getLogger(__name__)

_secretsmanager = None


def _get_secretsmanager():
    """Get (or create) the Secrets Manager client singleton."""
    global _secretsmanager
    if _secretsmanager is None:
        region = os.environ.get("SECRETS_REGION") or os.environ.get("DYNAMODB_REGION") or None
        _secretsmanager = boto3.client(
            "secretsmanager",
            region_name=region,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _secretsmanager


def env_var_name(secret_name):
    """COMPLETION-API-KEY -> COMPLETION_API_KEY"""
    return secret_name.replace("-", "_").upper()


def is_development(environment=None):
    if environment is None:
        environment = os.environ.get("APP_ENVIRONMENT", "Production")
    return environment.strip().lower() == "development"


def resolve_secret(name, environment=None, client=None):
    if is_development(environment):
        value = os.environ.get(env_var_name(name), "")
        if not value:
            raise UpstreamFailure(f"Error retrieving API key: {env_var_name(name)} is not set")
        return value

    client = client or _get_secretsmanager()
    try:
        value = client.get_secret_value(SecretId=name).get("SecretString") or ""
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code", "ClientError")
        raise UpstreamFailure(f"Error retrieving API key: {code}") from exc
    except BotoCoreError as exc:
        raise UpstreamFailure(f"Error retrieving API key: {exc.__class__.__name__}") from exc

    if not value:
        raise UpstreamFailure(f"Error retrieving API key: secret {name} is empty")
    logger.info("Resolved secret %s from Secrets Manager", name)
    return value
