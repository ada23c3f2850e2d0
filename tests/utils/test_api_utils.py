"""Unit tests for the API Gateway event helpers."""

import json

from pydantic import ValidationError

from teafinder.models.api import SearchRequest
from teafinder.utils.api_utils import (
    error_response,
    json_response,
    parse_event,
    validation_error_response,
)


def test_parse_event_merges_sources():
    event = {
        "body": json.dumps({"review_text": "Strong tea"}),
        "pathParameters": {"shop_id": "shop-1"},
        "queryStringParameters": {"maxwidth": "800"},
        "requestContext": {"requestId": "request-1"},
    }

    assert parse_event(event) == {
        "review_text": "Strong tea",
        "shop_id": "shop-1",
        "maxwidth": "800",
        "requestContext": {"requestId": "request-1"},
    }


def test_parse_event_path_wins_over_body():
    event = {"body": {"shop_id": "from-body"}, "pathParameters": {"shop_id": "from-path"}}
    assert parse_event(event)["shop_id"] == "from-path"


def test_parse_event_handles_missing_parts():
    event = {"body": None, "pathParameters": None, "queryStringParameters": None}
    assert parse_event(event) == {"requestContext": {}}
    assert parse_event({"body": "  "}) == {"requestContext": {}}


def test_json_response_headers():
    response = json_response(200, {"status": "OK"})

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"status": "OK"}
    assert response["headers"]["Content-Type"] == "application/json"
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"


def test_error_response_details():
    body = json.loads(error_response(500, "Search failed", "network down")["body"])
    assert body == {"error": "Search failed", "details": "network down"}
    assert json.loads(error_response(404, "Shop not found")["body"]) == {"error": "Shop not found"}


def test_validation_error_response_lists_fields():
    try:
        SearchRequest.model_validate({"longitude": 200})
    except ValidationError as e:
        response = validation_error_response(e)

    body = json.loads(response["body"])
    assert response["statusCode"] == 400
    assert body["error"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"latitude", "longitude"}


def test_parse_event_ignores_malformed_body():
    event = {"body": "{not json", "pathParameters": {"shop_id": "shop-1"}}
    assert parse_event(event) == {"shop_id": "shop-1", "requestContext": {}}
    assert parse_event({"body": "[1, 2]"}) == {"requestContext": {}}
