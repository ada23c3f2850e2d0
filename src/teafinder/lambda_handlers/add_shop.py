import logging

from pydantic import ValidationError

from ..models.api import AddShopRequest, AddShopResponse
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_shop_directory

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def handler(event, context):
    """Add a shop (or update the one with the same place id) with optional first metadata."""
    try:
        request = AddShopRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "add shop")

    try:
        shop_id = get_shop_directory().add_shop(request)
    except Exception as e:
        # The shop and its metadata are written in one transaction, so nothing was committed
        logger.exception(f"Add shop error: {str(e)}")
        return error_response(500, "Failed to add shop", str(e))

    return json_response(200, AddShopResponse(shop_id=shop_id))
