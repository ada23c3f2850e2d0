"""
Table setup for teafinder.

Creates the shop, contribution and user tables with the key schema and grid
indexes the services expect. Handy for local DynamoDB and fresh dev accounts;
deployed stacks define the same tables in infrastructure code.
"""

import argparse
import logging
import os
from typing import Dict, List

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from teafinder.utils.geo import GRID_LEVELS

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def shop_table_definition(table_name: str) -> Dict:
    """Shop rows keyed by shop_id, with one sparse index per grid level."""
    attributes = [{"AttributeName": "shop_id", "AttributeType": "S"}]
    indexes: List[Dict] = []
    for grid in GRID_LEVELS:
        attributes.append({"AttributeName": grid.attribute, "AttributeType": "S"})
        indexes.append(
            {
                "IndexName": grid.index_name,
                "KeySchema": [{"AttributeName": grid.attribute, "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        )
    return {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": "shop_id", "KeyType": "HASH"}],
        "AttributeDefinitions": attributes,
        "GlobalSecondaryIndexes": indexes,
        "BillingMode": "PAY_PER_REQUEST",
    }


def contribution_table_definition(table_name: str) -> Dict:
    return {
        "TableName": table_name,
        "KeySchema": [
            {"AttributeName": "shop_id", "KeyType": "HASH"},
            {"AttributeName": "entry_key", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "shop_id", "AttributeType": "S"},
            {"AttributeName": "entry_key", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


def user_table_definition(table_name: str) -> Dict:
    return {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": "username", "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": "username", "AttributeType": "S"}],
        "BillingMode": "PAY_PER_REQUEST",
    }


def create_table(dynamodb, definition: Dict) -> bool:
    """Create a table and wait for it. Returns False if it already exists."""
    table_name = definition["TableName"]
    try:
        table = dynamodb.create_table(**definition)
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            logger.info(f"Table {table_name} already exists")
            return False
        raise
    table.wait_until_exists()
    logger.info(f"Created table {table_name}")
    return True


def create_all_tables(dynamodb) -> None:
    create_table(dynamodb, shop_table_definition(os.environ["SHOP_TABLE_NAME"]))
    create_table(dynamodb, contribution_table_definition(os.environ["CONTRIBUTION_TABLE_NAME"]))
    create_table(dynamodb, user_table_definition(os.environ["USER_TABLE_NAME"]))


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Create the teafinder DynamoDB tables")
    parser.add_argument("--endpoint-url", help="DynamoDB endpoint, e.g. http://localhost:8000")
    args = parser.parse_args()

    dynamodb = boto3.resource("dynamodb", endpoint_url=args.endpoint_url)
    create_all_tables(dynamodb)


if __name__ == "__main__":
    main()
