"""Shop table client with radius search over a grid-cell index."""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import Table
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from ..errors import ShopNotFoundError, StoreUnavailableError
from ..models.shop import (
    Candidate,
    GeoPoint,
    MetadataContribution,
    MetadataFields,
    Shop,
    ShopFields,
    new_id,
)
from ..utils.aws import cancellation_reasons, is_transaction_cancelled
from ..utils.geo import choose_grid, haversine_meters
from .contribution_ledger import ContributionLedger

logger = logging.getLogger(__name__)

# Cap on candidates handed to the walking distance lookup
CANDIDATE_LIMIT = 50

PLACE_MARKER_PREFIX = "PLACE#"


class PlaceIdConflict(Exception):
    """A concurrent writer created or removed the same place id first"""


def place_marker_key(place_id: str) -> str:
    return f"{PLACE_MARKER_PREFIX}{place_id}"


class GeoStore:
    """DDB shop table client.

    Besides shop rows the table holds one marker row per external place id
    (``PLACE#<place_id>`` -> ``target_shop_id``) which keeps place ids unique.
    Shop rows carry grid cell ids that feed sparse secondary indexes used for
    radius queries.
    """

    def __init__(self, table: Table, ledger: ContributionLedger):
        self._table = table
        # Resource client: transaction items take plain Python values
        self._client = table.meta.client
        self.table_name = table.name
        self.ledger = ledger

    def get_by_id(self, shop_id: str) -> Shop:
        """Get a shop by its internal id.

        Raises:
            ShopNotFoundError: If no shop has this id
        """
        if shop_id.startswith(PLACE_MARKER_PREFIX):
            raise ShopNotFoundError(shop_id)

        response = self._table.get_item(Key={"shop_id": shop_id})
        if "Item" not in response or not response["Item"]:
            raise ShopNotFoundError(shop_id)
        return Shop.load(response["Item"])

    def find_by_place_id(self, place_id: str) -> Optional[str]:
        """Internal id of the shop registered for an external place id, if any."""
        response = self._table.get_item(
            Key={"shop_id": place_marker_key(place_id)}, ConsistentRead=True
        )
        item = response.get("Item")
        if not item:
            return None
        return item["target_shop_id"]

    def upsert(self, fields: ShopFields) -> str:
        """Insert a shop, or update name/address/rating of the one with the same place id."""
        return self.create_shop(fields)

    @retry(
        retry=retry_if_exception_type(PlaceIdConflict),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def create_shop(self, fields: ShopFields, metadata: Optional[MetadataFields] = None) -> str:
        """Upsert a shop and optionally record its first metadata, atomically.

        Both writes go into a single DynamoDB transaction: either the shop
        upsert and the metadata insert commit together or neither does.

        Returns:
            The internal shop id, for new and existing shops alike
        """
        existing_id = self.find_by_place_id(fields.place_id)
        if existing_id is not None:
            shop_id = existing_id
            actions = [self._update_action(shop_id, fields)]
        else:
            shop_id = new_id()
            actions = self._insert_actions(shop_id, fields)
        shop_action_count = len(actions)

        if metadata is not None:
            contribution = self.ledger.build_metadata(shop_id, metadata)
            actions.append(self.ledger.entry_put(contribution.dump()))

        try:
            self._client.transact_write_items(TransactItems=actions)
        except ClientError as e:
            reasons = cancellation_reasons(e) if is_transaction_cancelled(e) else []
            if "ConditionalCheckFailed" in reasons[:shop_action_count]:
                logger.warning(f"Place id {fields.place_id} changed concurrently, retrying upsert")
                raise PlaceIdConflict(fields.place_id) from e
            raise

        if existing_id is not None:
            logger.info(f"Updated existing shop {shop_id} for place {fields.place_id}")
        else:
            logger.info(f"Created shop {shop_id} for place {fields.place_id}")
        return shop_id

    def _insert_actions(self, shop_id: str, fields: ShopFields) -> List[Dict]:
        shop = Shop(shop_id=shop_id, **fields.model_dump())
        marker = {
            "shop_id": place_marker_key(fields.place_id),
            "target_shop_id": shop_id,
            "place_id": fields.place_id,
        }
        return [
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": marker,
                    "ConditionExpression": "attribute_not_exists(shop_id)",
                }
            },
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": shop.dump(),
                    "ConditionExpression": "attribute_not_exists(shop_id)",
                }
            },
        ]

    def _update_action(self, shop_id: str, fields: ShopFields) -> Dict:
        # Only the descriptive fields change on conflict; location and photos stay
        current = Shop(shop_id=shop_id, **fields.model_dump()).dump()
        set_parts = ["#name = :name"]
        remove_parts = []
        values = {":name": current["name"]}
        for attribute in ("address", "google_rating"):
            if attribute in current:
                set_parts.append(f"{attribute} = :{attribute}")
                values[f":{attribute}"] = current[attribute]
            else:
                remove_parts.append(attribute)

        expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)

        return {
            "Update": {
                "TableName": self.table_name,
                "Key": {"shop_id": shop_id},
                "UpdateExpression": expression,
                "ConditionExpression": "attribute_exists(shop_id)",
                "ExpressionAttributeNames": {"#name": "name"},
                "ExpressionAttributeValues": values,
            }
        }

    def append_metadata(self, shop_id: str, fields: MetadataFields) -> MetadataContribution:
        """Insert a metadata contribution; an unknown shop raises ShopReferenceError."""
        return self.ledger.add_metadata(shop_id, fields)

    def _query_cell(self, index_name: str, attribute: str, cell: str) -> Iterator[Dict]:
        kwargs = {"IndexName": index_name, "KeyConditionExpression": Key(attribute).eq(cell)}
        while True:
            response = self._table.query(**kwargs)
            yield from response.get("Items", [])
            if "LastEvaluatedKey" not in response:
                return
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def find_near(
        self, origin: GeoPoint, radius_meters: float, limit: int = CANDIDATE_LIMIT
    ) -> List[Candidate]:
        """Shops within a great-circle radius, nearest first, at most ``limit``.

        Raises:
            StoreUnavailableError: If DynamoDB cannot be queried
        """
        grid = choose_grid(origin.latitude, origin.longitude, radius_meters)
        cells = grid.covering_cells(origin.latitude, origin.longitude, radius_meters)
        logger.info(
            f"Radius query of {radius_meters:.0f}m at {origin.latitude},{origin.longitude} "
            f"over {len(cells)} {grid.attribute} cells"
        )

        try:
            hits: List[Tuple[float, Shop]] = []
            for cell in cells:
                for item in self._query_cell(grid.index_name, grid.attribute, cell):
                    shop = Shop.load(item)
                    distance = haversine_meters(
                        origin.latitude,
                        origin.longitude,
                        shop.location.latitude,
                        shop.location.longitude,
                    )
                    if distance <= radius_meters:
                        hits.append((distance, shop))

            hits.sort(key=lambda hit: hit[0])
            return [
                Candidate(
                    shop=shop,
                    straight_line_distance_meters=distance,
                    current_metadata=self.ledger.latest_metadata(shop.shop_id),
                )
                for distance, shop in hits[:limit]
            ]
        except (ClientError, BotoCoreError) as e:
            logger.exception("Shop radius query failed")
            raise StoreUnavailableError(f"Shop store query failed: {str(e)}") from e

    def delete_shop(self, shop_id: str) -> None:
        """Delete a shop together with its contributions and reviews."""
        shop = self.get_by_id(shop_id)
        removed = self.ledger.delete_all_for_shop(shop_id)
        self._client.transact_write_items(
            TransactItems=[
                {
                    "Delete": {
                        "TableName": self.table_name,
                        "Key": {"shop_id": place_marker_key(shop.place_id)},
                    }
                },
                {"Delete": {"TableName": self.table_name, "Key": {"shop_id": shop_id}}},
            ]
        )
        logger.info(f"Deleted shop {shop_id} and {removed} contributions")
