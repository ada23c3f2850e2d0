from datetime import datetime, timezone

from ..utils.api_utils import json_response


def handler(event, context):
    return json_response(
        200, {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
    )
