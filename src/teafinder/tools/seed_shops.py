"""
Sample data loader for teafinder.

Adds a handful of Kerala tea shops, each with one metadata contribution, so a
development stack has something to search. Re-running it updates the existing
shops by place id instead of duplicating them, and appends fresh metadata.
"""

import argparse
import logging
from typing import Dict, List

from dotenv import load_dotenv

from teafinder.models.shop import GeoPoint, MetadataFields, ShopFields
from teafinder.services.geo_store import GeoStore
from teafinder.utils.general_utils import get_geo_store

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

SEED_CONTRIBUTOR = "Seed Data"

SAMPLE_SHOPS: List[Dict] = [
    {
        "place_id": "sample_kochi_tea_1",
        "name": "Royal Tea Stall",
        "latitude": 9.9312,
        "longitude": 76.2673,
        "address": "MG Road, Kochi, Kerala",
        "google_rating": 4.2,
        "chayakkada_rating": 4.5,
        "items_available": "Pazhampori, Egg Puffs, Samosa, Vada, Strong Tea, Parotta",
        "sells_cigarettes": False,
    },
    {
        "place_id": "sample_kochi_tea_2",
        "name": "Malabar Cafe",
        "latitude": 9.9252,
        "longitude": 76.2599,
        "address": "Marine Drive, Kochi, Kerala",
        "google_rating": 4.5,
        "chayakkada_rating": 4.8,
        "items_available": "Pazhampori, Egg Puffs, Beef Cutlet, Kadala Curry, Tea",
        "sells_cigarettes": True,
    },
    {
        "place_id": "sample_thrissur_tea_1",
        "name": "Swaad Tea Shop",
        "latitude": 10.5276,
        "longitude": 76.2144,
        "address": "Round South, Thrissur, Kerala",
        "google_rating": 4.0,
        "chayakkada_rating": 4.3,
        "items_available": "Pazhampori, Samosa, Unniyappam, Sulaimani Tea",
        "sells_cigarettes": False,
    },
    {
        "place_id": "sample_calicut_tea_1",
        "name": "Kerala Tea House",
        "latitude": 11.2588,
        "longitude": 75.7804,
        "address": "SM Street, Kozhikode, Kerala",
        "google_rating": 4.3,
        "chayakkada_rating": 4.6,
        "items_available": "Pazhampori, Egg Puffs, Chicken Cutlet, Sulaimani, Ginger Tea",
        "sells_cigarettes": True,
    },
    {
        "place_id": "sample_trivandrum_tea_1",
        "name": "Anand Tea Stall",
        "latitude": 8.5241,
        "longitude": 76.9366,
        "address": "Statue Junction, Thiruvananthapuram, Kerala",
        "google_rating": 4.1,
        "chayakkada_rating": 4.4,
        "items_available": "Pazhampori, Vada, Bonda, Samosa, Strong Tea",
        "sells_cigarettes": False,
    },
    {
        "place_id": "sample_kottayam_tea_1",
        "name": "Aroma Tea Shop",
        "latitude": 9.5916,
        "longitude": 76.5222,
        "address": "MC Road, Kottayam, Kerala",
        "google_rating": 4.4,
        "chayakkada_rating": 4.7,
        "items_available": "Pazhampori, Egg Puffs, Samosa, Chicken Roll, Kadala, Tea",
        "sells_cigarettes": True,
    },
]


def seed_shops(geo_store: GeoStore, shops: List[Dict] = SAMPLE_SHOPS) -> List[str]:
    """Upsert each sample shop with its metadata. Returns the shop ids."""
    shop_ids = []
    for shop in shops:
        fields = ShopFields(
            place_id=shop["place_id"],
            name=shop["name"],
            location=GeoPoint(latitude=shop["latitude"], longitude=shop["longitude"]),
            address=shop["address"],
            google_rating=shop["google_rating"],
        )
        metadata = MetadataFields(
            chayakkada_rating=shop["chayakkada_rating"],
            items_available=shop["items_available"],
            sells_cigarettes=shop["sells_cigarettes"],
            contributed_by=SEED_CONTRIBUTOR,
        )
        shop_id = geo_store.create_shop(fields, metadata)
        logger.info(f"Seeded {shop['name']} as {shop_id}")
        shop_ids.append(shop_id)
    return shop_ids


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Seed teafinder with sample tea shops")
    parser.add_argument("--limit", type=int, help="Only seed the first N sample shops")
    args = parser.parse_args()

    shops = SAMPLE_SHOPS[: args.limit] if args.limit else SAMPLE_SHOPS
    logger.info(f"Seeding {len(shops)} sample shops...")
    shop_ids = seed_shops(get_geo_store(), shops)
    logger.info(f"Database seeded successfully with {len(shop_ids)} shops")


if __name__ == "__main__":
    main()
