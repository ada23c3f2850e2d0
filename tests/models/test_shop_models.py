"""Unit tests for shop and contribution models."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from teafinder.models.shop import (
    DEFAULT_REVIEWER_NAME,
    GeoPoint,
    MetadataContribution,
    Review,
    Shop,
    ShopContributions,
    ShopDetails,
    User,
)


@pytest.fixture
def sample_shop():
    return Shop(
        shop_id="shop-1",
        place_id="sample_kochi_tea_1",
        name="Royal Tea Stall",
        location=GeoPoint(latitude=9.9312, longitude=76.2673),
        address="MG Road, Kochi, Kerala",
        google_rating=4.2,
        photo_references=["photo-a"],
        created_at=datetime(2024, 1, 15, 8, 30),
    )


def test_shop_dump_adds_grid_cells(sample_shop):
    item = sample_shop.dump()

    assert item["shop_id"] == "shop-1"
    assert item["latitude"] == Decimal("9.9312")
    assert item["google_rating"] == Decimal("4.2")
    assert item["cell_fine"] == "1998_5125"
    assert item["cell_coarse"] == "199_512"
    assert item["created_at"] == "2024-01-15T08:30:00.000000"


def test_shop_dump_omits_missing_optional_fields():
    shop = Shop(
        shop_id="shop-2",
        place_id="place-2",
        name="Malabar Cafe",
        location=GeoPoint(latitude=9.9252, longitude=76.2599),
    )
    item = shop.dump()
    assert "address" not in item
    assert "google_rating" not in item


def test_shop_load_restores_dumped_item(sample_shop):
    assert Shop.load(sample_shop.dump()) == sample_shop


def test_geo_point_rejects_out_of_range():
    with pytest.raises(ValidationError):
        GeoPoint(latitude=91, longitude=0)
    with pytest.raises(ValidationError):
        GeoPoint(latitude=0, longitude=-180.5)


def test_entry_keys_sort_by_time():
    earlier = MetadataContribution(shop_id="shop-1", contributed_at=datetime(2024, 1, 2, 9, 0))
    later = MetadataContribution(shop_id="shop-1", contributed_at=datetime(2024, 1, 10, 9, 0))

    assert earlier.entry_key.startswith("META#2024-01-02T09:00:00.000000#")
    assert earlier.entry_key < later.entry_key


def test_metadata_rating_range():
    with pytest.raises(ValidationError):
        MetadataContribution(shop_id="shop-1", chayakkada_rating=0.5)
    with pytest.raises(ValidationError):
        MetadataContribution(shop_id="shop-1", chayakkada_rating=5.5)


def test_metadata_load_defaults_cigarettes_to_false():
    contribution = MetadataContribution(shop_id="shop-1", chayakkada_rating=4.5)
    item = contribution.dump()
    del item["sells_cigarettes"]

    loaded = MetadataContribution.load(item)
    assert loaded.sells_cigarettes is False
    assert loaded.chayakkada_rating == 4.5


def test_review_defaults_and_entry_key():
    review = Review(shop_id="shop-1", review_text="Great pazhampori")
    assert review.reviewer_name == DEFAULT_REVIEWER_NAME
    assert review.entry_key.startswith("REVIEW#")
    assert Review.load(review.dump()) == review


def test_review_rejects_empty_text():
    with pytest.raises(ValidationError):
        Review(shop_id="shop-1", review_text="")


def test_user_dump_and_load():
    user = User(username="chaya", password_hash="hash")
    item = user.dump()
    assert "last_login" not in item
    assert User.load(item) == user


def test_shop_details_current_metadata_is_newest(sample_shop):
    newest = MetadataContribution(shop_id="shop-1", contributed_at=datetime(2024, 2, 1))
    oldest = MetadataContribution(shop_id="shop-1", contributed_at=datetime(2024, 1, 1))

    details = ShopDetails.build(
        sample_shop, ShopContributions(metadata_history=[newest, oldest])
    )
    assert details.latest_metadata == newest
    assert details.metadata_history == [newest, oldest]
    assert details.reviews == []


def test_shop_details_without_metadata(sample_shop):
    details = ShopDetails.build(sample_shop, ShopContributions())
    assert details.latest_metadata is None
