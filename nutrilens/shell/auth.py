"""Authentication - API key issuance and lookup.

Each account is identified by the hash of its API key; the plaintext key is
shown once at registration and never stored.
"""

import hashlib
import logging
import secrets
from datetime import datetime

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.models import User


logger = logging.getLogger(__name__)

API_KEY_PREFIX = "nlk_"
MIN_API_KEY_LENGTH = 40


class EmailAlreadyRegistered(Exception):
    """An account with this email already exists."""


def generate_api_key() -> str:
    """Generate a new random API key of the form nlk_<token>."""
    return API_KEY_PREFIX + secrets.token_urlsafe(32)


def hash_api_key(api_key: str) -> str:
    """Derive the user id for an API key.

    SHA256, truncated to 32 hex chars so it fits as a Firestore document ID.
    """
    return hashlib.sha256(api_key.encode()).hexdigest()[:32]


def validate_api_key_format(api_key: str | None) -> bool:
    """Cheap shape check before any database lookup."""
    return bool(api_key) and api_key.startswith(API_KEY_PREFIX) and len(api_key) >= MIN_API_KEY_LENGTH


class AuthClient:
    """Registers accounts and resolves API keys against the users collection."""

    def __init__(self, db: firestore.Client) -> None:
        self._db = db

    def _users(self) -> firestore.CollectionReference:
        return self._db.collection("users")

    def _get_user_ref(self, user_id: str) -> firestore.DocumentReference:
        return self._users().document(user_id)

    def email_registered(self, email: str) -> bool:
        """Check whether any account already uses this email."""
        query = self._users().where(filter=FieldFilter("email", "==", email)).limit(1)
        return any(True for _ in query.stream())

    def register_user(self, email: str, name: str) -> tuple[str, str]:
        """Create an account and issue its API key.

        Args:
            email: User's email address
            name: Display name, also used as the default profile name

        Returns:
            Tuple of (api_key, user_id) - api_key is only returned once!

        Raises:
            EmailAlreadyRegistered: If the email is taken
        """
        logger.info("Registering new user: %s", email)

        if self.email_registered(email):
            raise EmailAlreadyRegistered(email)

        api_key = generate_api_key()
        user_id = hash_api_key(api_key)

        user = User(
            email=email,
            name=name,
            api_key_hash=user_id,
            created_at=datetime.utcnow(),
        )
        self._get_user_ref(user_id).set(user.model_dump())

        logger.info("User registered successfully: %s", user_id[:8])
        return api_key, user_id

    def validate_api_key(self, api_key: str) -> str | None:
        """Resolve an API key to its user_id, or None if unknown."""
        if not validate_api_key_format(api_key):
            logger.warning("Invalid API key format")
            return None

        user_id = hash_api_key(api_key)
        if self.user_exists(user_id):
            logger.debug("API key validated for user: %s", user_id[:8])
            return user_id

        logger.warning("API key not found in database")
        return None

    def get_user(self, user_id: str) -> User | None:
        try:
            user_doc = self._get_user_ref(user_id).get()
            if user_doc.exists:
                return User(**user_doc.to_dict())
            return None
        except Exception as e:
            logger.error("Error fetching user: %s", str(e))
            return None

    def user_exists(self, user_id: str) -> bool:
        try:
            return self._get_user_ref(user_id).get().exists
        except Exception as e:
            logger.error("Error checking user: %s", str(e))
            return False
