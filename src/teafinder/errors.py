"""Error types shared by the teafinder services and handlers."""


class TeaFinderError(Exception):
    """Base class for teafinder errors"""


class InvalidRequestError(TeaFinderError):
    """Malformed or out-of-range input, rejected before any store access"""


class ShopNotFoundError(TeaFinderError):
    """The referenced shop does not exist"""

    def __init__(self, shop_id: str):
        super().__init__(f"Shop not found: {shop_id}")
        self.shop_id = shop_id


class ShopReferenceError(TeaFinderError):
    """A contribution referenced a shop that does not exist"""

    def __init__(self, shop_id: str):
        super().__init__(f"Contribution references unknown shop: {shop_id}")
        self.shop_id = shop_id


class UsernameTakenError(TeaFinderError):
    """A user with the same username already exists"""


class ServiceError(TeaFinderError):
    """A backing service (store or routing provider) is unavailable"""


class StoreUnavailableError(ServiceError):
    """DynamoDB request failed"""


class EnrichmentUnavailableError(ServiceError):
    """The walking distance lookup failed for the whole batch"""
