from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable

from apartment_catalog.domain.apartment import FilterParams
from apartment_catalog.domain.validation import FilterOverrides
from apartment_catalog.ports.key_value_storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

FILTERS_STORAGE_KEY = "apartment-filters"
MAX_AGE_SECONDS = 7 * 24 * 60 * 60

_FIELDS = ("priceRange", "areaRange", "rooms", "floors")


class FilterPersistence:
    """
    Best-effort durable copy of the last committed filters.

    Snapshots older than seven days are purged on read. Storage failures are
    logged and never raised. Without a storage every call is a no-op.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._clock = clock

    def save(self, filters: FilterParams) -> None:
        if self._storage is None:
            return

        payload = {**filters.to_dict(), "timestamp": self._clock()}
        try:
            self._storage.set_item(FILTERS_STORAGE_KEY, json.dumps(payload))
        except StorageError as exc:
            logger.warning("Error saving filters to storage", extra={"error": str(exc)})

    def load(self) -> FilterOverrides | None:
        """
        Return the stored snapshot as untrusted overrides.

        The caller is expected to sanitize the result against current metadata.
        """
        if self._storage is None:
            return None

        try:
            raw = self._storage.get_item(FILTERS_STORAGE_KEY)
            if raw is None:
                return None

            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                return None

            timestamp = parsed.get("timestamp")
            if isinstance(timestamp, (int, float)) and self._clock() - timestamp > MAX_AGE_SECONDS:
                self._storage.remove_item(FILTERS_STORAGE_KEY)
                logger.info("Discarded expired saved filters")
                return None
        except (StorageError, ValueError) as exc:
            logger.warning("Error loading filters from storage", extra={"error": str(exc)})
            return None

        overrides: FilterOverrides = {}
        for name in _FIELDS:
            if name in parsed:
                overrides[name] = parsed[name]  # type: ignore[literal-required]
        return overrides or None

    def clear(self) -> None:
        if self._storage is None:
            return

        try:
            self._storage.remove_item(FILTERS_STORAGE_KEY)
        except StorageError as exc:
            logger.warning("Error clearing filters from storage", extra={"error": str(exc)})
