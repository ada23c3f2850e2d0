import logging

from pydantic import ValidationError

from ..errors import ShopNotFoundError
from ..models.api import ListReviewsResponse, ShopRequest
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_shop_directory

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def handler(event, context):
    """List reviews of a shop, newest first."""
    try:
        request = ShopRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "list reviews")

    try:
        reviews = get_shop_directory().list_reviews(request.shop_id)
    except ShopNotFoundError:
        return error_response(404, "Shop not found")
    except Exception as e:
        logger.exception(f"Get reviews error: {str(e)}")
        return error_response(500, "Failed to fetch reviews", str(e))

    logger.info(f"Found {len(reviews)} reviews for shop {request.shop_id}")
    return json_response(200, ListReviewsResponse(reviews=reviews, total_count=len(reviews)))
