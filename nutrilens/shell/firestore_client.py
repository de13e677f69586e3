"""Firestore Client - Persistence for profiles and daily records.

This module handles all database I/O for the nutrition tracker.
All I/O is contained here; business logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from google.cloud import firestore

from ..core.models import UserProfile, FoodEntry, DailyRecord
from ..core.daily import ensure_current_record, log_food, add_water, remove_water


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


class NutritionFirestoreClient:
    """Client for persisting profiles and daily records to Firestore.

    Document structure per user:
        users/{user_id}/
            profile/config: { name, gender, weight, ..., daily_calorie_goal, ... }
            records/{YYYY-MM-DD}: { record_date, calories, water, entries: [...] }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self.client.collection("users").document(user_id)

    def _profile_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user profile document."""
        return self._user_ref(user_id).collection("profile").document("config")

    def _record_ref(self, user_id: str, record_date: date) -> firestore.DocumentReference:
        """Get reference to daily record document."""
        return self._user_ref(user_id).collection("records").document(record_date.isoformat())

    # ==================== Profile Operations ====================

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Fetch user profile.

        Args:
            user_id: The user's ID

        Returns:
            UserProfile if found, None otherwise
        """
        logger.debug("Fetching profile for user: %s", user_id[:8])
        try:
            doc = self._profile_ref(user_id).get()
            if not doc.exists:
                return None
            return UserProfile(**doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch profile: %s", str(e))
            return None

    def get_or_create_profile(self, user_id: str, name: str | None = None) -> UserProfile | None:
        """Fetch the profile, storing a default one on first use.

        Returns:
            UserProfile, or None if the default could not be saved
        """
        profile = self.get_profile(user_id)
        if profile is not None:
            return profile

        profile = UserProfile(name=name) if name else UserProfile()
        if self.save_profile(user_id, profile):
            return profile
        return None

    def save_profile(self, user_id: str, profile: UserProfile) -> bool:
        """Save user profile as a single document write.

        Args:
            user_id: The user's ID
            profile: Profile to save

        Returns:
            True if successful
        """
        logger.info("Saving profile for user: %s", user_id[:8])
        try:
            data = profile.model_dump(mode="json")
            data["updated_at"] = datetime.utcnow()
            self._profile_ref(user_id).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save profile: %s", str(e))
            return False

    # ==================== Daily Record Operations ====================

    def _read_record(self, user_id: str, record_date: date) -> DailyRecord | None:
        """Fetch a daily record, letting read and validation errors propagate."""
        logger.debug("Fetching record for %s on %s", user_id[:8], record_date)
        doc = self._record_ref(user_id, record_date).get()
        if not doc.exists:
            return None
        return DailyRecord(**doc.to_dict())

    def get_record(self, user_id: str, record_date: date) -> DailyRecord | None:
        """Fetch a daily record.

        Args:
            user_id: The user's ID
            record_date: Date of the record

        Returns:
            DailyRecord if found, None if missing or unreadable
        """
        try:
            return self._read_record(user_id, record_date)
        except Exception as e:
            logger.error("Failed to fetch record: %s", str(e))
            return None

    def save_record(self, user_id: str, record: DailyRecord) -> bool:
        """Save a daily record.

        Args:
            user_id: The user's ID
            record: The record to save

        Returns:
            True if successful
        """
        logger.info("Saving record for %s on %s", user_id[:8], record.record_date)
        try:
            data = record.model_dump(mode="json")
            data["updated_at"] = datetime.utcnow()
            self._record_ref(user_id, record.record_date).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save record: %s", str(e))
            return False

    def get_records_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> list[DailyRecord]:
        """Fetch records for a date range.

        Args:
            user_id: The user's ID
            start_date: Start of range (inclusive)
            end_date: End of range (inclusive)

        Returns:
            List of DailyRecords found (may be empty)
        """
        logger.debug(
            "Fetching records for %s from %s to %s", user_id[:8], start_date, end_date
        )
        records: list[DailyRecord] = []

        try:
            records_ref = self._user_ref(user_id).collection("records")
            query = (
                records_ref.where("record_date", ">=", start_date.isoformat())
                .where("record_date", "<=", end_date.isoformat())
                .order_by("record_date")
            )

            for doc in query.stream():
                records.append(DailyRecord(**doc.to_dict()))

            logger.debug("Found %d records in range", len(records))
            return records
        except Exception as e:
            logger.error("Failed to fetch records range: %s", str(e))
            return []

    def get_today(self, user_id: str, today: date | None = None) -> DailyRecord | None:
        """Load today's record, starting a fresh one if none is stored yet.

        The fresh record is not written until something is logged. A failed
        read gives None, never an empty day that could be saved over the
        stored entries.

        Args:
            user_id: The user's ID
            today: Date key for today (defaults to date.today())

        Returns:
            Today's DailyRecord, or None if the stored record could not be read
        """
        if today is None:
            today = date.today()
        try:
            stored = self._read_record(user_id, today)
        except Exception as e:
            logger.error("Failed to load today's record: %s", str(e))
            return None
        return ensure_current_record(stored, today)

    def add_entry(self, user_id: str, entry: FoodEntry, today: date | None = None) -> DailyRecord | None:
        """Add a food entry to today's record.

        Args:
            user_id: The user's ID
            entry: The food entry to add
            today: Date key for today (defaults to date.today())

        Returns:
            Updated DailyRecord if successful, None otherwise
        """
        record = self.get_today(user_id, today)
        if record is None:
            return None
        record = log_food(record, entry)

        if self.save_record(user_id, record):
            return record
        return None

    def change_water(self, user_id: str, delta: int, today: date | None = None) -> DailyRecord | None:
        """Add or remove one glass of water on today's record.

        Args:
            user_id: The user's ID
            delta: +1 to add a glass, -1 to remove one
            today: Date key for today (defaults to date.today())

        Returns:
            Updated DailyRecord if successful, None otherwise
        """
        record = self.get_today(user_id, today)
        if record is None:
            return None
        record = add_water(record) if delta > 0 else remove_water(record)

        if self.save_record(user_id, record):
            return record
        return None

    # ==================== Account Operations ====================

    def delete_user_data(self, user_id: str) -> bool:
        """Delete the profile and every daily record for a user.

        Args:
            user_id: The user's ID

        Returns:
            True if successful
        """
        logger.info("Deleting stored data for user: %s", user_id[:8])
        try:
            for doc in self._user_ref(user_id).collection("records").stream():
                doc.reference.delete()
            self._profile_ref(user_id).delete()
            return True
        except Exception as e:
            logger.error("Failed to delete user data: %s", str(e))
            return False
