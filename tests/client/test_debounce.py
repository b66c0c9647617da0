"""Tests for the debounced filter apply pipeline."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import Mock

import pytest

from apartment_catalog.client.apartment_store import ApartmentStore
from apartment_catalog.client.debounce import DebouncedFilterApplier
from apartment_catalog.client.filter_store import FilterStore
from apartment_catalog.domain.apartment import FilterMetadata

pytestmark = pytest.mark.anyio

DELAY = 0.01


@pytest.fixture
def apartment_store() -> Mock:
    return Mock(spec=ApartmentStore)


@pytest.fixture
def store(apartment_store: Mock) -> FilterStore:
    return FilterStore(apartment_store)


async def settle() -> None:
    await asyncio.sleep(DELAY * 5)


async def test_first_firing_only_records_filters(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    """The write made by initialization is not an edit."""
    DebouncedFilterApplier(store, delay=DELAY)

    store.initialize(metadata)
    await settle()

    apartment_store.filter.assert_not_awaited()


async def test_burst_of_edits_applies_once_with_final_filters(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    applier = DebouncedFilterApplier(store, delay=DELAY)
    store.initialize(metadata)
    await settle()

    store.toggle_room(1)
    store.toggle_room(2)
    store.update_price_range((6_000_000, 9_000_000))
    assert applier.pending

    await settle()

    apartment_store.filter.assert_awaited_once_with(store.filters)
    assert store.filters.rooms == (1, 2)
    assert not applier.pending


async def test_returning_to_last_applied_filters_does_not_reload(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    DebouncedFilterApplier(store, delay=DELAY)
    store.initialize(metadata)
    await settle()

    store.toggle_room(3)
    store.toggle_room(3)
    await settle()

    apartment_store.filter.assert_not_awaited()


async def test_mark_applied_cancels_pending_apply(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    applier = DebouncedFilterApplier(store, delay=DELAY)
    store.initialize(metadata)
    store.toggle_room(2)

    applier.mark_applied()
    await settle()

    assert not applier.pending
    apartment_store.filter.assert_not_awaited()

    store.toggle_room(4)
    await applier.flush()

    apartment_store.filter.assert_awaited_once_with(store.filters)


async def test_flush_applies_immediately(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    applier = DebouncedFilterApplier(store, delay=60)
    store.initialize(metadata)
    applier.mark_applied()

    store.update_floors_range((2, 5))
    await applier.flush()

    apartment_store.filter.assert_awaited_once_with(store.filters)


async def test_close_stops_listening(
    store: FilterStore, apartment_store: Mock, metadata: FilterMetadata
) -> None:
    applier = DebouncedFilterApplier(store, delay=DELAY)
    store.initialize(metadata)

    applier.close()
    store.toggle_room(2)
    await settle()

    assert not applier.pending
    apartment_store.filter.assert_not_awaited()


async def test_failed_apply_is_logged(
    store: FilterStore,
    apartment_store: Mock,
    metadata: FilterMetadata,
    caplog: pytest.LogCaptureFixture,
) -> None:
    apartment_store.filter.side_effect = RuntimeError("boom")
    DebouncedFilterApplier(store, delay=DELAY)
    store.initialize(metadata)
    await settle()

    with caplog.at_level(logging.ERROR, logger="apartment_catalog.client.debounce"):
        store.toggle_room(2)
        await settle()

    assert "Debounced filter apply failed" in caplog.text
    assert store.loading is False
