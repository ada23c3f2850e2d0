"""Handlers that proxy Google Maps lookups so the frontend never holds the API key."""

import base64
import logging

from pydantic import ValidationError

from ..models.api import (
    GeocodeRequest,
    GeocodeResponse,
    PlaceAutocompleteRequest,
    PlaceDetailsRequest,
    PlacePhotoRequest,
)
from ..utils.api_utils import (
    CORS_HEADERS,
    error_response,
    json_response,
    parse_event,
    validation_error_response,
)
from ..utils.general_utils import get_google_maps_client

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

PHOTO_CACHE_CONTROL = "public, max-age=86400"


def geocode_handler(event, context):
    try:
        request = GeocodeRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "geocode")

    try:
        data = get_google_maps_client().geocode(request.address)
        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.info(f"No geocoding result for address, status {data.get('status')}")
            return error_response(404, "Address not found")

        first = results[0]
        location = first["geometry"]["location"]
        response = GeocodeResponse(
            latitude=location["lat"],
            longitude=location["lng"],
            formatted_address=first.get("formatted_address"),
        )
    except Exception as e:
        logger.exception(f"Geocoding error: {str(e)}")
        return error_response(500, "Geocoding failed")

    return json_response(200, response)


def autocomplete_handler(event, context):
    try:
        request = PlaceAutocompleteRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "autocomplete")

    try:
        data = get_google_maps_client().place_autocomplete(request.input)
    except Exception as e:
        logger.exception(f"Autocomplete error: {str(e)}")
        return error_response(500, "Autocomplete failed")

    return json_response(200, data)


def details_handler(event, context):
    try:
        request = PlaceDetailsRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "place details")

    try:
        data = get_google_maps_client().place_details(request.place_id)
    except Exception as e:
        logger.exception(f"Place details error: {str(e)}")
        return error_response(500, "Failed to fetch place details")

    return json_response(200, data)


def photo_handler(event, context):
    """Return the photo bytes base64 encoded, as API Gateway expects for binary bodies."""
    try:
        request = PlacePhotoRequest.model_validate(parse_event(event))
    except ValidationError as e:
        return validation_error_response(e, "place photo")

    try:
        photo = get_google_maps_client().place_photo(request.photo_reference, request.maxwidth)
    except Exception as e:
        logger.exception(f"Photo proxy error: {str(e)}")
        return error_response(500, "Failed to fetch photo")

    return {
        "statusCode": 200,
        "body": base64.b64encode(photo.content).decode("ascii"),
        "isBase64Encoded": True,
        "headers": {
            **CORS_HEADERS,
            "Content-Type": photo.headers.get("Content-Type", "image/jpeg"),
            "Cache-Control": PHOTO_CACHE_CONTROL,
        },
    }
