import logging

from pydantic import ValidationError

from ..errors import InvalidRequestError, ServiceError
from ..models.api import SearchRequest, SearchResponse
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_ranking_pipeline

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def handler(event, context):
    """Search tea shops near a location, ranked by walking time."""
    try:
        request = SearchRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "search")

    logger.info(
        f"Search request received: lat={request.latitude} lng={request.longitude} "
        f"max_distance_km={request.max_distance_km} "
        f"max_walking_time_minutes={request.max_walking_time_minutes}"
    )

    try:
        pipeline = get_ranking_pipeline()
        results = pipeline.search(
            request.origin,
            max_distance_km=request.max_distance_km,
            max_walking_time_minutes=request.max_walking_time_minutes,
        )
    except InvalidRequestError as e:
        logger.warning(f"Search rejected: {str(e)}")
        return error_response(400, str(e))
    except ServiceError as e:
        logger.exception(f"Search error: {str(e)}")
        return error_response(500, "Search failed", str(e))
    except Exception as e:
        logger.exception(f"Unexpected search error: {str(e)}")
        return error_response(500, "Search failed")

    response = SearchResponse(results=results, total_count=len(results))
    return json_response(200, response)
