"""API models for teafinder backend API Gateway integration."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .shop import (
    GeoPoint,
    MetadataContribution,
    MetadataFields,
    RankedResult,
    Review,
    ShopFields,
)


class CognitoUser(BaseModel):
    """Model for Cognito user information extracted from the request context"""

    user_id: str = Field(..., description="Cognito user ID (sub)")
    username: Optional[str] = Field(None, description="Cognito username")
    email: Optional[str] = Field(None, description="User email address")
    groups: List[str] = Field(default_factory=list, description="Cognito user groups")

    @classmethod
    def from_request_context(cls, request_context: Dict) -> Optional["CognitoUser"]:
        """Extract user information from the API Gateway request context"""
        if not request_context or "authorizer" not in request_context:
            return None

        authorizer = request_context.get("authorizer", {})
        if not authorizer or "claims" not in authorizer:
            return None

        claims = authorizer.get("claims", {})
        if not claims or "sub" not in claims:
            return None

        groups = []
        cognito_groups = claims.get("cognito:groups")
        if cognito_groups:
            if isinstance(cognito_groups, str):
                groups = [g.strip() for g in cognito_groups.split(",")]
            elif isinstance(cognito_groups, list):
                groups = cognito_groups

        return cls(
            user_id=claims.get("sub"),
            username=claims.get("cognito:username"),
            email=claims.get("email"),
            groups=groups,
        )


class BaseRequest(BaseModel):
    """Base request model with user information"""

    model_config = ConfigDict(str_strip_whitespace=True)

    user: Optional[CognitoUser] = Field(None, description="User information from Cognito")
    request_id: Optional[str] = Field(None, description="Unique request identifier")
    timestamp: Optional[datetime] = Field(None, description="Request timestamp")

    @model_validator(mode="before")
    @classmethod
    def extract_context_data(cls, data: Dict) -> Dict:
        """Extract context data from the raw event if available"""
        # This is used when parsing the raw Lambda event
        if isinstance(data, dict) and "requestContext" in data:
            request_context = data.get("requestContext") or {}
            data["user"] = CognitoUser.from_request_context(request_context)
            data["request_id"] = request_context.get("requestId")
            data["timestamp"] = datetime.now()
        return data


class SearchRequest(BaseRequest):
    """Request model for searching tea shops near a location"""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude of the search origin")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude of the search origin")
    max_distance_km: Optional[float] = Field(
        None, ge=0.1, le=100, description="Maximum walking distance in kilometers"
    )
    max_walking_time_minutes: Optional[int] = Field(
        None, ge=1, le=300, description="Maximum walking time in minutes"
    )

    @property
    def origin(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


class SearchResponse(BaseModel):
    """Response model for a tea shop search"""

    results: List[RankedResult]
    total_count: int


class ShopRequest(BaseRequest):
    """Request model for endpoints scoped to one shop"""

    shop_id: str = Field(..., min_length=1, description="Internal shop identifier")


class AddShopRequest(BaseRequest):
    """Request model for adding a shop, optionally with its first metadata"""

    place_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=500)
    google_rating: Optional[float] = Field(None, ge=0, le=5)
    photo_references: List[str] = Field(default_factory=list)
    chayakkada_rating: Optional[float] = Field(None, ge=1, le=5)
    items_available: Optional[str] = Field(None, max_length=500)
    sells_cigarettes: Optional[bool] = None
    contributed_by: Optional[str] = Field(None, max_length=50)

    def shop_fields(self) -> ShopFields:
        return ShopFields(
            place_id=self.place_id,
            name=self.name,
            location=GeoPoint(latitude=self.latitude, longitude=self.longitude),
            address=self.address,
            google_rating=self.google_rating,
            photo_references=self.photo_references,
        )

    def initial_metadata(self) -> Optional[MetadataFields]:
        """Metadata to record with the shop, if any metadata field was given"""
        if not (
            self.chayakkada_rating
            or self.items_available
            or self.sells_cigarettes is not None
        ):
            return None
        return MetadataFields(
            chayakkada_rating=self.chayakkada_rating,
            items_available=self.items_available,
            sells_cigarettes=bool(self.sells_cigarettes),
            contributed_by=self.contributed_by,
        )


class AddShopResponse(BaseModel):
    shop_id: str
    message: str = "Shop added successfully"


class AddMetadataRequest(ShopRequest):
    """Request model for appending a metadata contribution to a shop"""

    chayakkada_rating: Optional[float] = Field(None, ge=1, le=5)
    items_available: Optional[str] = Field(None, max_length=500)
    sells_cigarettes: Optional[bool] = None
    contributed_by: Optional[str] = Field(None, max_length=50)

    @model_validator(mode="after")
    def require_some_metadata(self) -> "AddMetadataRequest":
        if (
            self.chayakkada_rating is None
            and not self.items_available
            and self.sells_cigarettes is None
        ):
            raise ValueError(
                "At least one of chayakkada_rating, items_available or sells_cigarettes is required"
            )
        return self

    def metadata_fields(self) -> MetadataFields:
        return MetadataFields(
            chayakkada_rating=self.chayakkada_rating,
            items_available=self.items_available,
            sells_cigarettes=bool(self.sells_cigarettes),
            contributed_by=self.contributed_by,
        )


class AddMetadataResponse(BaseModel):
    contribution: MetadataContribution
    message: str = "Metadata added successfully"


class AddReviewRequest(ShopRequest):
    """Request model for adding a review to a shop"""

    review_text: str = Field(..., min_length=1, max_length=1000)
    reviewer_name: Optional[str] = Field(None, max_length=50)


class AddReviewResponse(BaseModel):
    review: Review
    message: str = "Review added successfully"


class ListReviewsResponse(BaseModel):
    reviews: List[Review]
    total_count: int


class GeocodeRequest(BaseRequest):
    address: str = Field(..., min_length=1, max_length=500)


class GeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None


class PlaceAutocompleteRequest(BaseRequest):
    input: str = Field(..., min_length=3, max_length=200)


class PlaceDetailsRequest(BaseRequest):
    place_id: str = Field(..., min_length=1, max_length=255)


class PlacePhotoRequest(BaseRequest):
    photo_reference: str = Field(..., min_length=1)
    maxwidth: int = Field(400, ge=1, le=1600)
