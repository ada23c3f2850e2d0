"""Shop and contribution models for teafinder backend."""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..utils.aws import drop_none, from_decimal, to_decimal
from ..utils.geo import GRID_LEVELS

DEFAULT_REVIEWER_NAME = "Anonymous"

# Sort-key prefixes in the contribution table
METADATA_PREFIX = "META#"
REVIEW_PREFIX = "REVIEW#"

# Fixed width so that lexical order of entry keys is time order
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def new_id() -> str:
    return uuid.uuid4().hex


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)


class GeoPoint(BaseModel):
    """A WGS84 coordinate"""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Shop(BaseModel):
    """DDB Stored tea shop"""

    shop_id: str  # Primary key
    place_id: str = Field(..., description="External (Google) place identifier, unique")
    name: str
    location: GeoPoint
    address: Optional[str] = None
    google_rating: Optional[float] = None
    photo_references: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def dump(self) -> Dict:
        item = {
            "shop_id": self.shop_id,
            "place_id": self.place_id,
            "name": self.name,
            "latitude": to_decimal(self.location.latitude),
            "longitude": to_decimal(self.location.longitude),
            "address": self.address,
            "google_rating": to_decimal(self.google_rating),
            "photo_references": list(self.photo_references),
            "created_at": format_timestamp(self.created_at),
        }
        for grid in GRID_LEVELS:
            item[grid.attribute] = grid.cell_id(self.location.latitude, self.location.longitude)
        return drop_none(item)

    @classmethod
    def load(cls, data: Dict) -> "Shop":
        return cls(
            shop_id=data["shop_id"],
            place_id=data["place_id"],
            name=data["name"],
            location=GeoPoint(
                latitude=from_decimal(data["latitude"]),
                longitude=from_decimal(data["longitude"]),
            ),
            address=data.get("address"),
            google_rating=from_decimal(data.get("google_rating")),
            photo_references=list(data.get("photo_references") or []),
            created_at=parse_timestamp(data["created_at"]),
        )


class ShopFields(BaseModel):
    """Caller-supplied fields for creating or updating a shop"""

    place_id: str
    name: str
    location: GeoPoint
    address: Optional[str] = None
    google_rating: Optional[float] = None
    photo_references: List[str] = Field(default_factory=list)


class MetadataFields(BaseModel):
    """Caller-supplied fields of a metadata contribution"""

    chayakkada_rating: Optional[float] = Field(None, ge=1, le=5)
    items_available: Optional[str] = None
    sells_cigarettes: bool = False
    contributed_by: Optional[str] = None


class MetadataContribution(MetadataFields):
    """Append-only community metadata for a shop"""

    contribution_id: str = Field(default_factory=new_id)
    shop_id: str
    contributed_at: datetime = Field(default_factory=datetime.now)

    @property
    def entry_key(self) -> str:
        return f"{METADATA_PREFIX}{format_timestamp(self.contributed_at)}#{self.contribution_id}"

    def dump(self) -> Dict:
        return drop_none(
            {
                "shop_id": self.shop_id,
                "entry_key": self.entry_key,
                "contribution_id": self.contribution_id,
                "chayakkada_rating": to_decimal(self.chayakkada_rating),
                "items_available": self.items_available,
                "sells_cigarettes": self.sells_cigarettes,
                "contributed_by": self.contributed_by,
                "contributed_at": format_timestamp(self.contributed_at),
            }
        )

    @classmethod
    def load(cls, data: Dict) -> "MetadataContribution":
        return cls(
            contribution_id=data["contribution_id"],
            shop_id=data["shop_id"],
            chayakkada_rating=from_decimal(data.get("chayakkada_rating")),
            items_available=data.get("items_available"),
            sells_cigarettes=bool(data.get("sells_cigarettes", False)),
            contributed_by=data.get("contributed_by"),
            contributed_at=parse_timestamp(data["contributed_at"]),
        )


class Review(BaseModel):
    """Append-only free-text review of a shop"""

    review_id: str = Field(default_factory=new_id)
    shop_id: str
    review_text: str = Field(..., min_length=1)
    reviewer_name: str = DEFAULT_REVIEWER_NAME
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def entry_key(self) -> str:
        return f"{REVIEW_PREFIX}{format_timestamp(self.created_at)}#{self.review_id}"

    def dump(self) -> Dict:
        return drop_none(
            {
                "shop_id": self.shop_id,
                "entry_key": self.entry_key,
                "review_id": self.review_id,
                "review_text": self.review_text,
                "reviewer_name": self.reviewer_name,
                "user_id": self.user_id,
                "created_at": format_timestamp(self.created_at),
            }
        )

    @classmethod
    def load(cls, data: Dict) -> "Review":
        return cls(
            review_id=data["review_id"],
            shop_id=data["shop_id"],
            review_text=data["review_text"],
            reviewer_name=data.get("reviewer_name") or DEFAULT_REVIEWER_NAME,
            user_id=data.get("user_id"),
            created_at=parse_timestamp(data["created_at"]),
        )


class User(BaseModel):
    """DDB Stored user, used to attribute contributions"""

    user_id: str = Field(default_factory=new_id)
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_-]+$")  # Primary key
    password_hash: str
    created_at: datetime = Field(default_factory=datetime.now)
    last_login: Optional[datetime] = None

    def dump(self) -> Dict:
        return drop_none(
            {
                "username": self.username,
                "user_id": self.user_id,
                "password_hash": self.password_hash,
                "created_at": format_timestamp(self.created_at),
                "last_login": format_timestamp(self.last_login) if self.last_login else None,
            }
        )

    @classmethod
    def load(cls, data: Dict) -> "User":
        last_login = data.get("last_login")
        return cls(
            user_id=data["user_id"],
            username=data["username"],
            password_hash=data["password_hash"],
            created_at=parse_timestamp(data["created_at"]),
            last_login=parse_timestamp(last_login) if last_login else None,
        )


class Candidate(BaseModel):
    """A shop returned by a radius query, before enrichment"""

    shop: Shop
    straight_line_distance_meters: float
    current_metadata: Optional[MetadataContribution] = None


class RankedResult(BaseModel):
    """A search hit with straight-line and walking metrics"""

    shop: Shop
    current_metadata: Optional[MetadataContribution] = None
    straight_line_distance_km: float
    walking_distance_km: float
    walking_time_minutes: int


class ShopContributions(BaseModel):
    metadata_history: List[MetadataContribution] = Field(default_factory=list)
    reviews: List[Review] = Field(default_factory=list)


class ShopDetails(BaseModel):
    """A shop with its current metadata and full contribution history"""

    shop: Shop
    latest_metadata: Optional[MetadataContribution] = None
    metadata_history: List[MetadataContribution] = Field(default_factory=list)
    reviews: List[Review] = Field(default_factory=list)

    @classmethod
    def build(cls, shop: Shop, contributions: ShopContributions) -> "ShopDetails":
        history = contributions.metadata_history
        return cls(
            shop=shop,
            latest_metadata=history[0] if history else None,
            metadata_history=history,
            reviews=contributions.reviews,
        )
