"""User table client for contribution attribution.

No handler in this package registers or logs users in. Accounts are created
and checked by the separate sign-in service through ``create_user`` and
``verify_credentials``. Here reviews only carry the ``user_id`` taken from the
Cognito claims.
"""

import logging
from datetime import datetime
from typing import Optional

import bcrypt
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import Table

from ..errors import UsernameTakenError
from ..models.shop import User, format_timestamp

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """Salted bcrypt hash of a password."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class UserTableClient:
    """DDB user table client"""

    def __init__(self, table: Table):
        self._table = table

    def create_user(self, username: str, password: str) -> User:
        """Create a user with a hashed password.

        Raises:
            UsernameTakenError: If the username is already registered
        """
        user = User(username=username, password_hash=hash_password(password))
        try:
            self._table.put_item(
                Item=user.dump(), ConditionExpression="attribute_not_exists(username)"
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                logger.warning(f"Registration failed: username already exists: {username}")
                raise UsernameTakenError(username) from e
            raise
        logger.info(f"User registered: {username} ({user.user_id})")
        return user

    def get_user(self, username: str) -> Optional[User]:
        response = self._table.get_item(Key={"username": username})
        if "Item" not in response or not response["Item"]:
            return None
        return User.load(response["Item"])

    def verify_credentials(self, username: str, password: str) -> Optional[User]:
        """Return the user if the password matches, recording the login time."""
        user = self.get_user(username)
        if user is None or not check_password(password, user.password_hash):
            logger.warning(f"Credential check failed for {username}")
            return None

        user.last_login = datetime.now()
        self._table.update_item(
            Key={"username": username},
            UpdateExpression="SET last_login = :last_login",
            ExpressionAttributeValues={":last_login": format_timestamp(user.last_login)},
        )
        return user
