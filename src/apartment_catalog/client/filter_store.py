"""Filter panel state.

Lifecycle: uninitialized (no metadata) -> initialized (defaults or a
restored snapshot) -> mutated (setters) -> reset (defaults, snapshot
cleared). Every setter validates before writing; a rejected value leaves
the filters untouched and sets ``error``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from apartment_catalog.client.apartment_store import ApartmentStore
from apartment_catalog.client.filter_persistence import FilterPersistence
from apartment_catalog.domain.apartment import (
    DEFAULT_FILTER_METADATA,
    FilterMetadata,
    FilterParams,
    Range,
)
from apartment_catalog.domain.validation import (
    DEFAULT_VALIDATION_RULES,
    FilterOverrides,
    FilterValidationRules,
    ValidationResult,
    active_filter_fields,
    format_number,
    reconcile,
    rules_from_metadata,
    validate_filter_params,
)

logger = logging.getLogger(__name__)

FiltersListener = Callable[[FilterParams], None]


class FilterStore:
    def __init__(
        self,
        apartment_store: ApartmentStore,
        persistence: FilterPersistence | None = None,
    ) -> None:
        self._apartment_store = apartment_store
        self._persistence = persistence or FilterPersistence(None)
        self._listeners: list[FiltersListener] = []

        self.metadata: FilterMetadata | None = None
        self.loading = False
        self.error: str | None = None
        self.is_active = False
        self._filters = DEFAULT_FILTER_METADATA.default_filters()

    # ==========================================================================
    # State
    # ==========================================================================

    @property
    def filters(self) -> FilterParams:
        return self._filters

    def _commit(self, filters: FilterParams, persist: bool = True) -> None:
        self._filters = filters
        self.is_active = self.has_active_filters
        if persist:
            self._persistence.save(filters)
        for listener in list(self._listeners):
            listener(filters)

    def subscribe(self, listener: FiltersListener) -> Callable[[], None]:
        """Call ``listener`` with the new filters after every write."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def validation_rules(self) -> FilterValidationRules:
        if self.metadata is None:
            return DEFAULT_VALIDATION_RULES
        return rules_from_metadata(self.metadata)

    @property
    def default_filters(self) -> FilterParams:
        return (self.metadata or DEFAULT_FILTER_METADATA).default_filters()

    @property
    def has_active_filters(self) -> bool:
        return bool(active_filter_fields(self._filters, self.metadata or DEFAULT_FILTER_METADATA))

    @property
    def active_filters_count(self) -> int:
        return len(active_filter_fields(self._filters, self.metadata or DEFAULT_FILTER_METADATA))

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def summary(self) -> list[str] | None:
        """One line per active dimension, e.g. ``"Price: 5,000,000 - 10,000,000"``."""
        if self.metadata is None:
            return None

        filters = self._filters
        lines = []
        for field_name in active_filter_fields(filters, self.metadata):
            if field_name == "priceRange":
                low, high = filters.price_range
                lines.append(f"Price: {low:,.0f} - {high:,.0f}")
            elif field_name == "areaRange":
                low, high = filters.area_range
                lines.append(f"Area: {format_number(low)} - {format_number(high)} m²")
            elif field_name == "rooms":
                lines.append(f"Rooms: {', '.join(str(room) for room in filters.rooms)}")
            else:
                low, high = filters.floors
                lines.append(f"Floor: {format_number(low)} - {format_number(high)}")
        return lines

    def is_room_selected(self, room: int) -> bool:
        return room in self._filters.rooms

    def clear_error(self) -> None:
        self.error = None

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def initialize(self, metadata: FilterMetadata) -> None:
        """Adopt ``metadata`` and restore the saved snapshot, or the defaults."""
        self.metadata = metadata
        filters = reconcile(metadata, durable=self._persistence.load())
        self._commit(filters, persist=False)
        logger.debug(
            "Filters initialized",
            extra={"active": active_filter_fields(filters, metadata)},
        )

    def apply_url_filters(self, overrides: FilterOverrides | None) -> None:
        """Adopt filters read from the URL; ignored until metadata is known."""
        if self.metadata is None or not overrides:
            return
        self._commit(reconcile(self.metadata, url=overrides))

    def reset_filters(self) -> None:
        if self.metadata is None:
            return
        self._persistence.clear()
        self.error = None
        self._commit(self.metadata.default_filters(), persist=False)

    # ==========================================================================
    # Setters
    # ==========================================================================

    def _update(self, field_name: str, **changes: Any) -> bool:
        candidate = replace(self._filters, **changes)
        result = validate_filter_params(candidate, self.validation_rules)
        issues = tuple(issue for issue in result.errors if issue.field == field_name)
        if issues:
            self.error = ValidationResult(issues).message()
            logger.info(
                "Rejected filter update",
                extra={"field": field_name, "codes": [issue.code for issue in issues]},
            )
            return False

        self.error = None
        self._commit(candidate)
        return True

    def update_price_range(self, price_range: Range) -> bool:
        return self._update("priceRange", price_range=tuple(price_range))

    def update_area_range(self, area_range: Range) -> bool:
        return self._update("areaRange", area_range=tuple(area_range))

    def update_floors_range(self, floors: Range) -> bool:
        return self._update("floors", floors=tuple(floors))

    def update_rooms(self, rooms: tuple[int, ...] | list[int]) -> bool:
        return self._update("rooms", rooms=tuple(sorted(set(rooms))))

    def toggle_room(self, room: int) -> bool:
        rooms = set(self._filters.rooms)
        if room in rooms:
            rooms.remove(room)
        else:
            rooms.add(room)
        return self._update("rooms", rooms=tuple(sorted(rooms)))

    # ==========================================================================
    # Apply
    # ==========================================================================

    def validate_all_filters(self) -> ValidationResult:
        return validate_filter_params(self._filters, self.validation_rules)

    async def apply_filters(self) -> bool:
        """
        Load the listing for the current filters.

        Nothing is requested when any dimension is invalid; the messages are
        joined into ``error`` instead. Filters equal to the defaults are sent
        as no filter at all.
        """
        result = self.validate_all_filters()
        if not result.is_valid:
            self.error = result.message()
            logger.info("Filters not applied", extra={"codes": result.codes})
            return False

        self.error = None
        self.loading = True
        try:
            await self._apartment_store.filter(self._filters if self.has_active_filters else None)
        finally:
            self.loading = False
        return True
