import logging

from pydantic import ValidationError

from ..errors import ShopReferenceError
from ..models.api import AddMetadataRequest, AddMetadataResponse
from ..utils.api_utils import error_response, json_response, parse_event, validation_error_response
from ..utils.general_utils import get_shop_directory

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def handler(event, context):
    """Append a community metadata contribution to an existing shop."""
    try:
        request = AddMetadataRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "add metadata")

    try:
        contribution = get_shop_directory().add_metadata(request)
    except ShopReferenceError as e:
        logger.warning(str(e))
        return error_response(404, "Shop not found")
    except Exception as e:
        logger.exception(f"Add metadata error: {str(e)}")
        return error_response(500, "Failed to add metadata", str(e))

    return json_response(200, AddMetadataResponse(contribution=contribution))
