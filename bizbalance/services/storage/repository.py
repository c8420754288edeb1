"""
Business Data Repository

Loads and saves the whole BusinessData blob under one fixed key.

DESIGN DECISION: Loading NEVER fails. Missing data starts the default
state; unreadable or invalid data also starts the default state and is
logged as a warning. The user is never shown a storage error on startup.
"""

from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from bizbalance.audit import AuditLogger
from bizbalance.models.finance import (
    BusinessData,
    CollectionName,
    default_business_data,
)
from bizbalance.services.storage.interface import KeyValueStore, StorageError

DEFAULT_STATE_KEY = "bizbalance_data"


class BusinessDataRepository:
    """
    Persistence adapter for BusinessData.

    Serialization uses the camelCase keys of the stored blob, so a
    saved file reads the same as the data the user sees.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STATE_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = key
        self._audit_logger = audit_logger

    @property
    def key(self) -> str:
        return self._key

    @staticmethod
    def serialize(data: BusinessData) -> str:
        return data.model_dump_json(by_alias=True)

    @staticmethod
    def deserialize(raw: str) -> BusinessData:
        """
        Parse a stored blob.

        Raises:
            ValidationError: If the blob is not valid JSON or does not
                match the BusinessData schema
        """
        return BusinessData.model_validate_json(raw)

    def load(self) -> BusinessData:
        """
        Load the stored state, falling back to the default state.
        """
        try:
            raw = self._store.get_item(self._key)
        except StorageError as e:
            return self._reset(str(e))

        if raw is None:
            return default_business_data()

        try:
            data = self.deserialize(raw)
        except ValidationError as e:
            return self._reset(f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}")

        if self._audit_logger:
            self._audit_logger.log_state_loaded(
                key=self._key,
                record_counts={
                    name.value: len(data.records(name)) for name in CollectionName
                },
            )
        return data

    def save(
        self,
        data: BusinessData,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Serialize and store the full state.

        Returns:
            Size of the stored blob in bytes

        Raises:
            StorageError: If the store rejects the write
        """
        payload = self.serialize(data)
        self._store.set_item(self._key, payload)

        size = len(payload.encode("utf-8"))
        if self._audit_logger:
            self._audit_logger.log_state_saved(
                key=self._key,
                size_bytes=size,
                correlation_id=correlation_id,
            )
        return size

    def clear(self) -> None:
        """Forget the stored state; the next load starts from default."""
        self._store.remove_item(self._key)

    def _reset(self, reason: str) -> BusinessData:
        if self._audit_logger:
            self._audit_logger.log_state_reset(key=self._key, reason=reason)
        return default_business_data()
