import logging

from pydantic import ValidationError

from ..errors import InvalidRequestError, ShopReferenceError
from ..models.api import AddReviewRequest, AddReviewResponse
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_shop_directory

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def handler(event, context):
    """Add a review to a shop; authenticated reviews are attributed to the user."""
    try:
        request = AddReviewRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "add review")

    logger.info(
        f"Adding review to shop {request.shop_id}",
        extra={"reviewer": request.reviewer_name or "Anonymous"},
    )

    try:
        review = get_shop_directory().add_review(request)
    except InvalidRequestError as e:
        return error_response(400, str(e))
    except ShopReferenceError as e:
        logger.warning(str(e))
        return error_response(404, "Shop not found")
    except Exception as e:
        logger.exception(f"Add review error: {str(e)}")
        return error_response(500, "Failed to add review", str(e))

    return json_response(200, AddReviewResponse(review=review))
