"""AWS utility functions for teafinder backend."""
import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


def get_secret(secret_name: str, client=None) -> Optional[str]:
    """Retrieve a secret from AWS Secrets Manager.

    Args:
        secret_name: Name of the secret to retrieve
        client: Optional boto3 secrets client

    Returns:
        The secret string, or None if the secret has no string value

    Raises:
        ClientError: If there's an error retrieving the secret
    """
    secrets_client = client or boto3.client("secretsmanager")

    try:
        response = secrets_client.get_secret_value(SecretId=secret_name)
    except ClientError:
        logger.exception(f"Error retrieving secret {secret_name}")
        raise
    return response.get("SecretString")


def get_api_key_from_secret(secret_name: str, key_name: str, client=None) -> Optional[str]:
    """Get an API key from a secret, supporting both direct and JSON formats.

    Args:
        secret_name: Name of the secret in Secrets Manager
        key_name: Name of the key in the JSON object (if applicable)
        client: Optional boto3 secrets client

    Returns:
        API key string or None if not found
    """
    secret = get_secret(secret_name, client=client)
    if not secret:
        return None

    try:
        secret_dict = json.loads(secret)
    except json.JSONDecodeError:
        return secret
    if not isinstance(secret_dict, dict):
        return secret
    return secret_dict.get(key_name, secret)


def to_decimal(value: Optional[float]) -> Optional[Decimal]:
    """Convert a float to the Decimal form DynamoDB expects."""
    if value is None:
        return None
    return Decimal(str(value))


def from_decimal(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def drop_none(item: Dict[str, Any]) -> Dict[str, Any]:
    """DynamoDB items may not carry explicit nulls for index keys, so omit them."""
    return {key: value for key, value in item.items() if value is not None}


def cancellation_reasons(error: ClientError) -> List[str]:
    """Reason codes for each action of a cancelled DynamoDB transaction."""
    reasons = error.response.get("CancellationReasons") or []
    if reasons:
        return [reason.get("Code", "None") for reason in reasons]

    # Some SDK versions only expose the reasons inside the message
    message = error.response.get("Error", {}).get("Message", "")
    if "[" in message and "]" in message:
        inner = message[message.index("[") + 1 : message.rindex("]")]
        return [code.strip() for code in inner.split(",")]
    return []


def is_transaction_cancelled(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "TransactionCanceledException"
