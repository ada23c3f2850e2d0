"""Helpers shared by the API Gateway lambda handlers."""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",  # For CORS support
}


def parse_event(event: Dict) -> Dict:
    """Merge body, path and query parameters with the request context.

    The request models validate the merged dict, so they see both the request
    fields and the Cognito claims in the context.
    """
    body = event.get("body") or {}
    if isinstance(body, str):
        # API Gateway might send the body as a JSON string
        try:
            body = json.loads(body) if body.strip() else {}
        except json.JSONDecodeError:
            # Validation then reports the missing fields
            logger.warning("Request body is not valid JSON, ignoring it")
            body = {}
    if not isinstance(body, dict):
        body = {}

    return {
        **(event.get("queryStringParameters") or {}),
        **body,
        **(event.get("pathParameters") or {}),
        "requestContext": event.get("requestContext") or {},
    }


def json_response(status_code: int, body: Any, headers: Optional[Dict] = None) -> Dict:
    if isinstance(body, BaseModel):
        payload = body.model_dump_json()
    else:
        payload = json.dumps(body, default=str)
    return {"statusCode": status_code, "body": payload, "headers": {**CORS_HEADERS, **(headers or {})}}


def error_response(status_code: int, error: str, details: Any = None) -> Dict:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return json_response(status_code, body)


def validation_error_response(error: ValidationError, path: Optional[str] = None) -> Dict:
    """400 response listing each invalid field, without echoing the submitted values."""
    details = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]
    logger.warning(f"Validation failed for {path or 'request'}: {details}")
    return error_response(400, "Validation failed", details)
