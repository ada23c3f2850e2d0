"""Append-only store of community metadata and reviews."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import Table

from ..errors import InvalidRequestError, ShopReferenceError
from ..models.shop import (
    DEFAULT_REVIEWER_NAME,
    METADATA_PREFIX,
    REVIEW_PREFIX,
    MetadataContribution,
    MetadataFields,
    Review,
    ShopContributions,
)
from ..utils.aws import cancellation_reasons, is_transaction_cancelled

logger = logging.getLogger(__name__)

MAX_REVIEW_LENGTH = 1000


class ContributionLedger:
    """DDB contribution table client.

    Metadata and reviews share one table keyed by shop_id, with an entry key of
    ``<kind>#<timestamp>#<id>`` so a descending query returns newest first.
    """

    def __init__(self, table: Table, shop_table_name: str):
        self._table = table
        # Resource client: transaction items take plain Python values
        self._client = table.meta.client
        self.table_name = table.name
        self.shop_table_name = shop_table_name

    def _now(self) -> datetime:
        return datetime.now()

    def shop_exists_check(self, shop_id: str) -> Dict:
        """Transaction action that fails unless the shop row exists."""
        return {
            "ConditionCheck": {
                "TableName": self.shop_table_name,
                "Key": {"shop_id": shop_id},
                "ConditionExpression": "attribute_exists(shop_id)",
            }
        }

    def entry_put(self, item: Dict) -> Dict:
        """Transaction action inserting a contribution; entries are never overwritten."""
        return {
            "Put": {
                "TableName": self.table_name,
                "Item": item,
                "ConditionExpression": "attribute_not_exists(entry_key)",
            }
        }

    def build_metadata(self, shop_id: str, fields: MetadataFields) -> MetadataContribution:
        return MetadataContribution(
            shop_id=shop_id, contributed_at=self._now(), **fields.model_dump()
        )

    def _append(self, shop_id: str, item: Dict) -> None:
        try:
            self._client.transact_write_items(
                TransactItems=[self.shop_exists_check(shop_id), self.entry_put(item)]
            )
        except ClientError as e:
            if is_transaction_cancelled(e) and cancellation_reasons(e)[:1] == [
                "ConditionalCheckFailed"
            ]:
                raise ShopReferenceError(shop_id) from e
            raise

    def append_metadata(self, contribution: MetadataContribution) -> MetadataContribution:
        self._append(contribution.shop_id, contribution.dump())
        logger.info(
            f"Recorded metadata {contribution.contribution_id} for shop {contribution.shop_id}"
        )
        return contribution

    def add_metadata(self, shop_id: str, fields: MetadataFields) -> MetadataContribution:
        """Append a metadata contribution to a shop."""
        return self.append_metadata(self.build_metadata(shop_id, fields))

    def add_review(
        self,
        shop_id: str,
        review_text: Optional[str],
        reviewer_name: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Review:
        """Append a review to a shop.

        The text is trimmed before storage and a missing reviewer name is
        recorded as "Anonymous".

        Raises:
            InvalidRequestError: If the text is empty, whitespace or too long
            ShopReferenceError: If the shop does not exist
        """
        text = (review_text or "").strip()
        if not text:
            logger.warning("Review submission failed: empty review text")
            raise InvalidRequestError("Review text is required")
        if len(text) > MAX_REVIEW_LENGTH:
            raise InvalidRequestError(f"Review must be at most {MAX_REVIEW_LENGTH} characters")

        review = Review(
            shop_id=shop_id,
            review_text=text,
            reviewer_name=(reviewer_name or "").strip() or DEFAULT_REVIEWER_NAME,
            user_id=user_id,
            created_at=self._now(),
        )
        self._append(shop_id, review.dump())
        logger.info(f"Review {review.review_id} added to shop {shop_id}")
        return review

    def _query_all(self, shop_id: str, prefix: str, newest_first: bool = True) -> List[Dict]:
        kwargs = {
            "KeyConditionExpression": Key("shop_id").eq(shop_id)
            & Key("entry_key").begins_with(prefix),
            "ScanIndexForward": not newest_first,
        }
        items: List[Dict] = []
        while True:
            response = self._table.query(**kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                return items
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def latest_metadata(self, shop_id: str) -> Optional[MetadataContribution]:
        """The most recent metadata contribution for a shop, if any."""
        response = self._table.query(
            KeyConditionExpression=Key("shop_id").eq(shop_id)
            & Key("entry_key").begins_with(METADATA_PREFIX),
            ScanIndexForward=False,  # Sort in descending order (newest first)
            Limit=1,
        )
        items = response.get("Items") or []
        if not items:
            return None
        return MetadataContribution.load(items[0])

    def metadata_history(self, shop_id: str) -> List[MetadataContribution]:
        return [MetadataContribution.load(item) for item in self._query_all(shop_id, METADATA_PREFIX)]

    def list_reviews(self, shop_id: str) -> List[Review]:
        return [Review.load(item) for item in self._query_all(shop_id, REVIEW_PREFIX)]

    def list_for_shop(self, shop_id: str) -> ShopContributions:
        """Full metadata history and reviews for a shop, newest first."""
        return ShopContributions(
            metadata_history=self.metadata_history(shop_id),
            reviews=self.list_reviews(shop_id),
        )

    def delete_all_for_shop(self, shop_id: str) -> int:
        """Remove every contribution of a shop. Returns the number deleted."""
        kwargs = {
            "KeyConditionExpression": Key("shop_id").eq(shop_id),
            "ProjectionExpression": "shop_id, entry_key",
        }
        keys: List[Dict] = []
        while True:
            response = self._table.query(**kwargs)
            keys.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                break
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

        with self._table.batch_writer() as batch:
            for key in keys:
                batch.delete_item(Key={"shop_id": key["shop_id"], "entry_key": key["entry_key"]})
        return len(keys)
