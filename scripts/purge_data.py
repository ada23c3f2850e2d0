#!/usr/bin/env python
"""
Script to purge teafinder data from DynamoDB.

Without arguments every item in the shop, contribution and user tables is
deleted. With --shop-id only that shop is removed, together with its metadata
and reviews. Useful for resetting a development stack.
"""

import argparse
import logging
import os

import boto3
from dotenv import load_dotenv

from teafinder.errors import ShopNotFoundError
from teafinder.utils.general_utils import get_geo_store

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables from .env file if present
load_dotenv()

TABLE_ENV_VARS = ("SHOP_TABLE_NAME", "CONTRIBUTION_TABLE_NAME", "USER_TABLE_NAME")


def confirm(prompt):
    return input(f"{prompt} (yes/no): ").lower() == "yes"


def purge_dynamodb_table(dynamodb, table_name):
    """Delete all items from the specified DynamoDB table."""
    table = dynamodb.Table(table_name)
    key_names = [key["AttributeName"] for key in table.key_schema]

    logger.info(f"Scanning table {table_name} for items...")
    kwargs = {"ProjectionExpression": ", ".join(f"#k{i}" for i in range(len(key_names)))}
    kwargs["ExpressionAttributeNames"] = {f"#k{i}": name for i, name in enumerate(key_names)}
    keys = []
    while True:
        response = table.scan(**kwargs)
        keys.extend(response.get("Items", []))
        if "LastEvaluatedKey" not in response:
            break
        kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    if not keys:
        logger.info(f"Table {table_name} is already empty.")
        return

    if not confirm(f"Are you sure you want to delete all {len(keys)} items from {table_name}?"):
        logger.info("Operation cancelled.")
        return

    with table.batch_writer() as batch:
        for key in keys:
            batch.delete_item(Key={name: key[name] for name in key_names})
    logger.info(f"Successfully deleted {len(keys)} items from table {table_name}.")


def purge_shop(shop_id):
    geo_store = get_geo_store()
    try:
        shop = geo_store.get_by_id(shop_id)
    except ShopNotFoundError:
        logger.error(f"Shop {shop_id} does not exist.")
        return

    if not confirm(f"Delete {shop.name} ({shop_id}) with all its metadata and reviews?"):
        logger.info("Operation cancelled.")
        return
    geo_store.delete_shop(shop_id)


def main():
    parser = argparse.ArgumentParser(description="Purge teafinder data")
    parser.add_argument("--shop-id", help="Only delete this shop and its contributions")
    args = parser.parse_args()

    if args.shop_id:
        purge_shop(args.shop_id)
        return

    table_names = [os.environ[name] for name in TABLE_ENV_VARS if os.environ.get(name)]
    print("teafinder Data Purge Utility")
    print("-" * 30)
    for table_name in table_names:
        print(f"DynamoDB Table: {table_name}")
    print("-" * 30)
    print("This utility will purge ALL data from the tables above.")
    print("This action cannot be undone.")
    print("-" * 30)

    if not confirm("Do you want to continue?"):
        logger.info("Operation cancelled.")
        return

    dynamodb = boto3.resource("dynamodb")
    for table_name in table_names:
        purge_dynamodb_table(dynamodb, table_name)

    print("-" * 30)
    print("Purge operation completed.")


if __name__ == "__main__":
    main()
