import logging
import os
import signal
import threading
from functools import lru_cache
from typing import Optional

import boto3
from botocore.config import Config

from ..services.contribution_ledger import ContributionLedger
from ..services.directory import ShopDirectory
from ..services.distance_enrichment import DistanceEnrichmentClient
from ..services.geo_store import GeoStore
from ..services.google_maps import DEFAULT_TIMEOUT_SECONDS, GoogleMapsClient
from ..services.ranking import RankingPipeline
from ..services.user_table import UserTableClient
from .aws import get_api_key_from_secret

logger = logging.getLogger(__name__)

# Constants
GOOGLE_MAPS_API_KEY_SECRET_NAME = os.environ.get(
    "GOOGLE_MAPS_API_KEY_SECRET_NAME", "teafinder/google-maps-api-key"
)

_shutdown_hook_installed = False


@lru_cache
def get_dynamodb_resource():
    """Process-wide DynamoDB resource; its botocore client owns the connection pool."""
    pool_size = int(os.environ.get("DYNAMODB_MAX_POOL_CONNECTIONS", "10"))
    resource = boto3.resource("dynamodb", config=Config(max_pool_connections=pool_size))
    install_shutdown_hook()
    return resource


@lru_cache
def get_contribution_ledger() -> ContributionLedger:
    table = get_dynamodb_resource().Table(os.environ["CONTRIBUTION_TABLE_NAME"])
    return ContributionLedger(table, shop_table_name=os.environ["SHOP_TABLE_NAME"])


@lru_cache
def get_geo_store() -> GeoStore:
    table = get_dynamodb_resource().Table(os.environ["SHOP_TABLE_NAME"])
    return GeoStore(table, get_contribution_ledger())


@lru_cache
def get_user_table_client() -> UserTableClient:
    return UserTableClient(get_dynamodb_resource().Table(os.environ["USER_TABLE_NAME"]))


def get_google_maps_api_key() -> str:
    """Get Google Maps API key from the environment or AWS Secrets Manager.

    Returns:
        The Google Maps API key as a string.

    Raises:
        ValueError: If the API key cannot be retrieved.
    """
    api_key = os.environ.get("GOOGLE_MAPS_API_KEY")
    if api_key:
        return api_key

    api_key = get_api_key_from_secret(GOOGLE_MAPS_API_KEY_SECRET_NAME, "GOOGLE_MAPS_API_KEY")
    if api_key is None:
        raise ValueError(
            f"Failed to retrieve Google Maps API key from secret {GOOGLE_MAPS_API_KEY_SECRET_NAME}"
        )
    return api_key


@lru_cache
def get_google_maps_client() -> GoogleMapsClient:
    """Get a Google Maps client instance.

    Returns a cached instance of the GoogleMapsClient to avoid creating
    multiple instances during the lifetime of the Lambda function.
    """
    timeout = float(
        os.environ.get("DISTANCE_MATRIX_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
    )
    return GoogleMapsClient(get_google_maps_api_key(), timeout=timeout)


@lru_cache
def get_distance_enrichment_client() -> DistanceEnrichmentClient:
    return DistanceEnrichmentClient(get_google_maps_client())


@lru_cache
def get_ranking_pipeline() -> RankingPipeline:
    return RankingPipeline(get_geo_store(), get_distance_enrichment_client())


def get_shop_directory(maps_client: Optional[GoogleMapsClient] = None) -> ShopDirectory:
    return ShopDirectory(
        get_geo_store(),
        get_contribution_ledger(),
        maps_client=maps_client,
        user_table=get_user_table_client(),
    )


_CACHED_GETTERS = (
    get_ranking_pipeline,
    get_distance_enrichment_client,
    get_google_maps_client,
    get_user_table_client,
    get_geo_store,
    get_contribution_ledger,
)


def close_clients() -> None:
    """Release the process-wide clients; later getters build fresh ones."""
    for getter in _CACHED_GETTERS:
        getter.cache_clear()

    if get_dynamodb_resource.cache_info().currsize:
        get_dynamodb_resource().meta.client.close()
        get_dynamodb_resource.cache_clear()
        logger.info("DynamoDB connection pool closed")


def _handle_sigterm(signum, frame):
    logger.info("SIGTERM received, closing clients...")
    close_clients()
    raise SystemExit(0)


def install_shutdown_hook() -> None:
    """Close clients on SIGTERM. Only the main thread may install signal handlers."""
    global _shutdown_hook_installed
    if _shutdown_hook_installed or threading.current_thread() is not threading.main_thread():
        return
    signal.signal(signal.SIGTERM, _handle_sigterm)
    _shutdown_hook_installed = True
