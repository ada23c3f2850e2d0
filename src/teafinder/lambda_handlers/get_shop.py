import logging

from pydantic import ValidationError

from ..errors import ShopNotFoundError
from ..models.api import ShopRequest
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_google_maps_client, get_shop_directory

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _maps_client_or_none():
    """Photo refresh is optional; details still load without a Maps key."""
    try:
        return get_google_maps_client()
    except Exception as e:
        logger.warning(f"Google Maps client unavailable, skipping photo refresh: {str(e)}")
        return None


def handler(event, context):
    """Get a shop with its current metadata, metadata history and reviews."""
    try:
        request = ShopRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "get shop")

    try:
        directory = get_shop_directory(maps_client=_maps_client_or_none())
        details = directory.get_details(request.shop_id)
    except ShopNotFoundError:
        logger.warning(f"Shop not found: {request.shop_id}")
        return error_response(404, "Shop not found")
    except Exception as e:
        logger.exception(f"Get shop error: {str(e)}")
        return error_response(500, "Failed to fetch shop", str(e))

    logger.info(f"Shop details fetched successfully: {details.shop.name}")
    return json_response(200, details)
