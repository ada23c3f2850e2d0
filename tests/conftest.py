"""Shared fixtures: moto-backed DynamoDB tables and the stores built on them."""

import os

import boto3
import pytest
from moto import mock_aws

from teafinder.models.shop import GeoPoint, ShopFields
from teafinder.services.contribution_ledger import ContributionLedger
from teafinder.services.geo_store import GeoStore
from teafinder.services.user_table import UserTableClient
from teafinder.tools.create_tables import (
    contribution_table_definition,
    shop_table_definition,
    user_table_definition,
)

SHOP_TABLE_NAME = "test-shop-table"
CONTRIBUTION_TABLE_NAME = "test-contribution-table"
USER_TABLE_NAME = "test-user-table"

# Kochi, Kerala
ROYAL_TEA_STALL = {"latitude": 9.9312, "longitude": 76.2673}
MALABAR_CAFE = {"latitude": 9.9252, "longitude": 76.2599}
# Thrissur, ~66 km north of Kochi
SWAAD_TEA_SHOP = {"latitude": 10.5276, "longitude": 76.2144}


@pytest.fixture(scope="function")
def aws_credentials():
    """Mocked AWS Credentials for boto3."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture(scope="function")
def dynamodb(aws_credentials):
    """DynamoDB resource."""
    with mock_aws():
        yield boto3.resource("dynamodb", region_name="us-east-1")


@pytest.fixture(scope="function")
def shop_table(dynamodb):
    os.environ["SHOP_TABLE_NAME"] = SHOP_TABLE_NAME
    return dynamodb.create_table(**shop_table_definition(SHOP_TABLE_NAME))


@pytest.fixture(scope="function")
def contribution_table(dynamodb):
    os.environ["CONTRIBUTION_TABLE_NAME"] = CONTRIBUTION_TABLE_NAME
    return dynamodb.create_table(**contribution_table_definition(CONTRIBUTION_TABLE_NAME))


@pytest.fixture(scope="function")
def user_table(dynamodb):
    os.environ["USER_TABLE_NAME"] = USER_TABLE_NAME
    return dynamodb.create_table(**user_table_definition(USER_TABLE_NAME))


@pytest.fixture
def ledger(contribution_table, shop_table):
    return ContributionLedger(contribution_table, shop_table_name=SHOP_TABLE_NAME)


@pytest.fixture
def geo_store(shop_table, ledger):
    return GeoStore(shop_table, ledger)


@pytest.fixture
def user_table_client(user_table):
    return UserTableClient(user_table)


def make_fields(place_id: str, name: str, point: dict, **kwargs) -> ShopFields:
    return ShopFields(place_id=place_id, name=name, location=GeoPoint(**point), **kwargs)


@pytest.fixture
def kochi_shops(geo_store):
    """Two Kochi shops about 1 km apart plus one in Thrissur."""
    return {
        "royal": geo_store.upsert(
            make_fields("sample_kochi_tea_1", "Royal Tea Stall", ROYAL_TEA_STALL, google_rating=4.2)
        ),
        "malabar": geo_store.upsert(
            make_fields("sample_kochi_tea_2", "Malabar Cafe", MALABAR_CAFE, google_rating=4.5)
        ),
        "swaad": geo_store.upsert(
            make_fields("sample_thrissur_tea_1", "Swaad Tea Shop", SWAAD_TEA_SHOP)
        ),
    }
