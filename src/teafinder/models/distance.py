"""Walking distance lookup results."""

from typing import Literal, Union

from pydantic import BaseModel


class WalkingLeg(BaseModel):
    """Successful walking route to one destination"""

    kind: Literal["ok"] = "ok"
    distance_meters: int
    travel_time_seconds: int


class ElementFailed(BaseModel):
    """No walking route for one destination (provider element status)"""

    kind: Literal["failed"] = "failed"
    status: str


EnrichmentResult = Union[WalkingLeg, ElementFailed]
