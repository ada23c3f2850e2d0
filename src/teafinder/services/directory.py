"""Shop detail and contribution operations that bypass the ranking pipeline."""

import logging
from typing import List, Optional

import requests

from ..models.api import AddMetadataRequest, AddReviewRequest, AddShopRequest, CognitoUser
from ..models.shop import MetadataContribution, Review, ShopDetails
from .contribution_ledger import ContributionLedger
from .geo_store import GeoStore
from .google_maps import GoogleMapsClient
from .user_table import UserTableClient

logger = logging.getLogger(__name__)

MAX_DETAIL_PHOTOS = 6


class ShopDirectory:
    """Reads and writes shop records and their community contributions."""

    def __init__(
        self,
        geo_store: GeoStore,
        ledger: ContributionLedger,
        maps_client: Optional[GoogleMapsClient] = None,
        user_table: Optional[UserTableClient] = None,
    ):
        self.geo_store = geo_store
        self.ledger = ledger
        self.maps_client = maps_client
        self.user_table = user_table

    def get_details(self, shop_id: str, refresh_photos: bool = True) -> ShopDetails:
        """Shop with current metadata, metadata history and reviews.

        Raises:
            ShopNotFoundError: If the shop does not exist
        """
        logger.info(f"Fetching details for shop {shop_id}")
        shop = self.geo_store.get_by_id(shop_id)
        details = ShopDetails.build(shop, self.ledger.list_for_shop(shop_id))

        if refresh_photos and self.maps_client is not None:
            photos = self._fresh_photo_references(details.shop.place_id, details.shop.name)
            if photos:
                details.shop.photo_references = photos
        return details

    def _fresh_photo_references(self, place_id: str, name: str) -> List[str]:
        try:
            photos = self.maps_client.place_photo_references(place_id, limit=MAX_DETAIL_PHOTOS)
        except (requests.RequestException, ValueError) as e:
            # Stored references are still usable
            logger.error(f"Failed to fetch fresh photos for {name}: {str(e)}")
            return []
        if not photos:
            logger.warning(f"No photos returned from Google Places API for {name}")
        else:
            logger.info(f"Fetched {len(photos)} fresh photos for {name}")
        return photos

    def add_shop(self, request: AddShopRequest) -> str:
        """Create or update a shop, with its first metadata in the same transaction."""
        return self.geo_store.create_shop(request.shop_fields(), request.initial_metadata())

    def add_metadata(self, request: AddMetadataRequest) -> MetadataContribution:
        return self.geo_store.append_metadata(request.shop_id, request.metadata_fields())

    def add_review(self, request: AddReviewRequest) -> Review:
        reviewer_name = request.reviewer_name
        if not reviewer_name and request.user is not None:
            reviewer_name = request.user.username
        return self.ledger.add_review(
            request.shop_id,
            request.review_text,
            reviewer_name=reviewer_name,
            user_id=self._resolve_user_id(request.user),
        )

    def list_reviews(self, shop_id: str) -> List[Review]:
        self.geo_store.get_by_id(shop_id)
        return self.ledger.list_reviews(shop_id)

    def _resolve_user_id(self, principal: Optional[CognitoUser]) -> Optional[str]:
        """Internal user id for an authenticated principal, falling back to its subject."""
        if principal is None:
            return None
        if self.user_table is not None and principal.username:
            user = self.user_table.get_user(principal.username)
            if user is not None:
                return user.user_id
        return principal.user_id
