"""
Tests for FilterStore.

- setters validate before writing; rejected values leave filters untouched
- committed filters are persisted and announced to listeners
- apply_filters sends defaults as "no filter" and refuses invalid state
"""

from __future__ import annotations

import json
import math
from unittest.mock import Mock

import httpx
import pytest

from apartment_catalog.adapters.in_memory_key_value_storage import InMemoryKeyValueStorage
from apartment_catalog.client.apartment_store import ApartmentStore
from apartment_catalog.client.cache import ApiCache
from apartment_catalog.client.filter_persistence import FILTERS_STORAGE_KEY, FilterPersistence
from apartment_catalog.client.filter_store import FilterStore
from apartment_catalog.domain.apartment import DEFAULT_FILTER_METADATA, FilterMetadata


@pytest.fixture
def apartment_store() -> Mock:
    return Mock(spec=ApartmentStore)


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(apartment_store: Mock, storage: InMemoryKeyValueStorage) -> FilterStore:
    return FilterStore(apartment_store, FilterPersistence(storage))


@pytest.fixture
def initialized(store: FilterStore, metadata: FilterMetadata) -> FilterStore:
    store.initialize(metadata)
    return store


# ==============================================================================
# Initialization
# ==============================================================================


def test_uninitialized_store_uses_fallback_defaults(store: FilterStore) -> None:
    assert store.metadata is None
    assert store.filters == DEFAULT_FILTER_METADATA.default_filters()
    assert store.summary() is None
    assert not store.has_active_filters


def test_url_filters_are_ignored_before_initialization(store: FilterStore) -> None:
    before = store.filters

    store.apply_url_filters({"rooms": [2]})
    store.reset_filters()

    assert store.filters is before


def test_initialize_without_snapshot_uses_metadata_defaults(
    store: FilterStore, metadata: FilterMetadata
) -> None:
    store.initialize(metadata)

    assert store.filters == metadata.default_filters()
    assert store.is_active is False
    assert store.active_filters_count == 0
    assert store.summary() == []


def test_initialize_restores_sanitized_snapshot(
    store: FilterStore, storage: InMemoryKeyValueStorage, metadata: FilterMetadata
) -> None:
    """Saved bounds are clamped to current metadata; vanished room counts are dropped."""
    storage.set_item(
        FILTERS_STORAGE_KEY,
        json.dumps({"priceRange": [6_000_000, 20_000_000], "rooms": [2, 9]}),
    )

    store.initialize(metadata)

    assert store.filters.price_range == (6_000_000, 11_000_000)
    assert store.filters.rooms == (2,)
    assert store.filters.area_range == metadata.area_range
    assert store.is_active is True


def test_url_filters_replace_restored_snapshot(
    store: FilterStore, storage: InMemoryKeyValueStorage, metadata: FilterMetadata
) -> None:
    storage.set_item(FILTERS_STORAGE_KEY, json.dumps({"priceRange": [6_000_000, 7_000_000]}))
    store.initialize(metadata)

    store.apply_url_filters({"rooms": [1]})

    assert store.filters.price_range == metadata.price_range
    assert store.filters.rooms == (1,)
    assert json.loads(storage.get_item(FILTERS_STORAGE_KEY))["rooms"] == [1]


# ==============================================================================
# Setters
# ==============================================================================


def test_valid_update_commits_persists_and_notifies(
    initialized: FilterStore, storage: InMemoryKeyValueStorage
) -> None:
    listener = Mock()
    initialized.subscribe(listener)

    assert initialized.update_price_range((5_000_000, 10_000_000)) is True

    assert initialized.filters.price_range == (5_000_000, 10_000_000)
    assert initialized.is_active is True
    assert initialized.active_filters_count == 1
    assert initialized.error is None
    listener.assert_called_once_with(initialized.filters)
    assert json.loads(storage.get_item(FILTERS_STORAGE_KEY))["priceRange"] == [5_000_000, 10_000_000]


@pytest.mark.parametrize(
    ("price_range", "message"),
    [
        ((4_000_000, 6_000_000), "Minimum price cannot be less than 5000000"),
        ((6_000_000, 12_000_000), "Maximum price cannot be greater than 11000000"),
        ((9_000_000, 6_000_000), "Minimum price cannot be greater than maximum price"),
    ],
)
def test_invalid_update_sets_error_and_keeps_filters(
    initialized: FilterStore, price_range: tuple[int, int], message: str
) -> None:
    listener = Mock()
    initialized.subscribe(listener)
    before = initialized.filters

    assert initialized.update_price_range(price_range) is False

    assert initialized.filters is before
    assert initialized.error == message
    assert initialized.has_error
    listener.assert_not_called()


def test_nan_bound_is_rejected(initialized: FilterStore) -> None:
    before = initialized.filters

    assert initialized.update_price_range((math.nan, 6_000_000)) is False

    assert initialized.filters is before
    assert initialized.error == "Minimum price must be a number"


def test_fractional_floor_is_rejected(initialized: FilterStore) -> None:
    assert initialized.update_floors_range((2, 5.5)) is False

    assert initialized.error == "Maximum floor must be a whole number"
    assert initialized.filters.floors == (1, 10)


def test_successful_update_clears_previous_error(initialized: FilterStore) -> None:
    initialized.update_area_range((10, 20))

    initialized.update_area_range((35, 40))

    assert initialized.error is None


def test_toggle_room_twice_removes_it(initialized: FilterStore) -> None:
    initialized.toggle_room(2)
    initialized.toggle_room(3)
    initialized.toggle_room(2)

    assert initialized.filters.rooms == (3,)
    assert initialized.is_room_selected(3)
    assert not initialized.is_room_selected(2)


def test_toggle_unavailable_room_is_rejected(initialized: FilterStore) -> None:
    assert initialized.toggle_room(7) is False

    assert initialized.error == "Invalid number of rooms: 7"
    assert initialized.filters.rooms == ()


def test_update_rooms_deduplicates_and_sorts(initialized: FilterStore) -> None:
    initialized.update_rooms([3, 1, 3])

    assert initialized.filters.rooms == (1, 3)


def test_summary_lists_active_dimensions(initialized: FilterStore) -> None:
    initialized.update_price_range((6_000_000, 9_000_000))
    initialized.update_area_range((35, 40.5))
    initialized.update_rooms([1, 3])
    initialized.update_floors_range((2, 5))

    assert initialized.summary() == [
        "Price: 6,000,000 - 9,000,000",
        "Area: 35 - 40.5 m²",
        "Rooms: 1, 3",
        "Floor: 2 - 5",
    ]
    assert initialized.active_filters_count == 4


# ==============================================================================
# Reset
# ==============================================================================


def test_reset_restores_defaults_and_clears_snapshot(
    initialized: FilterStore, storage: InMemoryKeyValueStorage, metadata: FilterMetadata
) -> None:
    initialized.update_rooms([2])
    initialized.update_floors_range((0, 3))

    initialized.reset_filters()

    assert initialized.filters == metadata.default_filters()
    assert initialized.error is None
    assert initialized.is_active is False
    assert storage.get_item(FILTERS_STORAGE_KEY) is None


def test_reset_is_idempotent(initialized: FilterStore, metadata: FilterMetadata) -> None:
    initialized.update_rooms([2])

    initialized.reset_filters()
    initialized.reset_filters()

    assert initialized.filters == metadata.default_filters()


# ==============================================================================
# apply_filters()
# ==============================================================================


@pytest.mark.anyio
async def test_apply_default_filters_requests_unfiltered_listing(
    initialized: FilterStore, apartment_store: Mock
) -> None:
    assert await initialized.apply_filters() is True

    apartment_store.filter.assert_awaited_once_with(None)
    assert initialized.loading is False


@pytest.mark.anyio
async def test_apply_active_filters_passes_them(
    initialized: FilterStore, apartment_store: Mock
) -> None:
    initialized.toggle_room(2)

    await initialized.apply_filters()

    apartment_store.filter.assert_awaited_once_with(initialized.filters)


@pytest.mark.anyio
async def test_apply_refuses_invalid_filters(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    """Filters chosen under wider bounds become invalid once metadata narrows."""
    store.update_price_range((1_000_000, 2_000_000))
    store.update_floors_range((20, 30))
    store.metadata = metadata

    assert await store.apply_filters() is False

    apartment_store.filter.assert_not_awaited()
    assert store.error == (
        "Minimum price cannot be less than 5000000, "
        "Maximum floor cannot be greater than 10"
    )


@pytest.mark.anyio
async def test_price_filter_reaches_listing_request(
    http_client: httpx.AsyncClient, listing_api
) -> None:
    """Only the filtered dimensions matter; empty rooms are never sent."""
    apartment_store = ApartmentStore(http_client, ApiCache())
    await apartment_store.load()
    store = FilterStore(apartment_store)
    store.initialize(apartment_store.metadata)

    store.update_price_range((5_000_000, 6_000_000))
    await store.apply_filters()

    params = listing_api.last_params
    assert params["priceMin"] == "5000000"
    assert params["priceMax"] == "6000000"
    assert "rooms" not in params
    assert [a.price for a in apartment_store.apartments] == [
        5_000_000,
        5_250_000,
        5_500_000,
        5_750_000,
        6_000_000,
    ]
    assert apartment_store.pagination.total == 5


@pytest.mark.anyio
async def test_price_scenario_with_fallback_bounds(
    http_client: httpx.AsyncClient, listing_api
) -> None:
    """Bounds 0..100M: a 5M..10M price range is sent as priceMin/priceMax without rooms."""
    apartment_store = ApartmentStore(http_client, ApiCache())
    store = FilterStore(apartment_store)
    store.initialize(DEFAULT_FILTER_METADATA)

    store.update_price_range((5_000_000, 10_000_000))
    await store.apply_filters()

    params = listing_api.last_params
    assert params["priceMin"] == "5000000"
    assert params["priceMax"] == "10000000"
    assert "rooms" not in params
    assert apartment_store.pagination.total == 21
