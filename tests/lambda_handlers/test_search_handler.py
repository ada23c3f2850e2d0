"""Unit tests for the search lambda handler."""

import json
from unittest.mock import MagicMock, patch

from teafinder.errors import EnrichmentUnavailableError, StoreUnavailableError
from teafinder.lambda_handlers.search import handler
from teafinder.models.shop import GeoPoint, RankedResult, Shop
from teafinder.services.ranking import RankingPipeline


def search_event(body):
    return {"body": json.dumps(body), "requestContext": {"requestId": "request-1"}}


def ranked_result():
    shop = Shop(
        shop_id="shop-1",
        place_id="sample_kochi_tea_1",
        name="Royal Tea Stall",
        location=GeoPoint(latitude=9.9312, longitude=76.2673),
    )
    return RankedResult(
        shop=shop,
        straight_line_distance_km=0.4,
        walking_distance_km=0.5,
        walking_time_minutes=6,
    )


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_success(mock_get_pipeline):
    mock_pipeline = MagicMock(spec=RankingPipeline)
    mock_pipeline.search.return_value = [ranked_result()]
    mock_get_pipeline.return_value = mock_pipeline

    response = handler(
        search_event({"latitude": 9.9312, "longitude": 76.2673, "max_walking_time_minutes": 30}),
        None,
    )

    assert response["statusCode"] == 200
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    body = json.loads(response["body"])
    assert body["total_count"] == 1
    assert body["results"][0]["shop"]["name"] == "Royal Tea Stall"
    assert body["results"][0]["walking_time_minutes"] == 6

    origin = mock_pipeline.search.call_args.args[0]
    assert origin == GeoPoint(latitude=9.9312, longitude=76.2673)
    assert mock_pipeline.search.call_args.kwargs == {
        "max_distance_km": None,
        "max_walking_time_minutes": 30,
    }


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_empty_results(mock_get_pipeline):
    mock_get_pipeline.return_value.search.return_value = []

    response = handler(search_event({"latitude": 51.5, "longitude": -0.12}), None)

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"results": [], "total_count": 0}


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_missing_coordinates(mock_get_pipeline):
    response = handler(search_event({"latitude": 9.9312}), None)

    assert response["statusCode"] == 400
    body = json.loads(response["body"])
    assert body["error"] == "Validation failed"
    assert body["details"][0]["field"] == "longitude"
    mock_get_pipeline.assert_not_called()


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_out_of_range_limit(mock_get_pipeline):
    response = handler(
        search_event({"latitude": 9.9312, "longitude": 76.2673, "max_distance_km": 500}), None
    )
    assert response["statusCode"] == 400
    mock_get_pipeline.assert_not_called()


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_enrichment_failure(mock_get_pipeline):
    mock_get_pipeline.return_value.search.side_effect = EnrichmentUnavailableError("timed out")

    response = handler(search_event({"latitude": 9.9312, "longitude": 76.2673}), None)

    assert response["statusCode"] == 500
    assert json.loads(response["body"])["error"] == "Search failed"


@patch("teafinder.lambda_handlers.search.get_ranking_pipeline")
def test_handler_store_failure(mock_get_pipeline):
    mock_get_pipeline.return_value.search.side_effect = StoreUnavailableError("throttled")

    response = handler(search_event({"latitude": 9.9312, "longitude": 76.2673}), None)

    assert response["statusCode"] == 500
    assert json.loads(response["body"])["error"] == "Search failed"
