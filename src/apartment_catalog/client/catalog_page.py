"""Catalog page controller.

Wires the apartment list, the filter panel, the debounced apply pipeline
and the address bar together:

1. ``bootstrap`` loads the unfiltered listing to learn the filter bounds,
   initializes the filter store (restoring the saved snapshot), applies
   filters from the URL when present and mirrors the result back to the URL.
2. Afterwards every committed filter change is mirrored to the URL, and
   back/forward navigation to a filtered URL re-applies its filters.
"""

from __future__ import annotations

import logging

import httpx

from apartment_catalog.client.apartment_store import ApartmentStore
from apartment_catalog.client.cache import ApiCache
from apartment_catalog.client.debounce import DebouncedFilterApplier
from apartment_catalog.client.filter_persistence import FilterPersistence
from apartment_catalog.client.filter_store import FilterStore
from apartment_catalog.client.url_filters import UrlFilters
from apartment_catalog.domain.apartment import FilterParams
from apartment_catalog.domain.errors import ApiRequestError
from apartment_catalog.domain.validation import FilterOverrides, available_rooms, room_counts
from apartment_catalog.infra.config import ClientSettings, client_settings
from apartment_catalog.ports.address_bar import AddressBar
from apartment_catalog.ports.key_value_storage import KeyValueStorage

logger = logging.getLogger(__name__)


class CatalogPage:
    def __init__(
        self,
        apartment_store: ApartmentStore,
        filter_store: FilterStore,
        url_filters: UrlFilters,
        debouncer: DebouncedFilterApplier | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            http_client: Client closed together with the page, if the page owns it
        """
        self.apartment_store = apartment_store
        self.filter_store = filter_store
        self.url_filters = url_filters
        self._debouncer = debouncer
        self._http_client = http_client

        self._initializing = False
        self._writing_url = False
        self._unsubscribe_url = None
        self._unsubscribe_filters = filter_store.subscribe(self._on_filters_changed)

    @property
    def bootstrapped(self) -> bool:
        return self.filter_store.metadata is not None

    async def bootstrap(self) -> None:
        """Load the first page and set up filters; never raises on API failures."""
        self._initializing = True
        try:
            await self.apartment_store.load()
            await self._initialize_filters()
        finally:
            self._initializing = False

        if self._unsubscribe_url is None:
            self._unsubscribe_url = self.url_filters.watch(self._on_url_changed)

    async def _initialize_filters(self) -> None:
        metadata = self.apartment_store.metadata
        if metadata is None or self.filter_store.metadata is not None:
            return

        self.filter_store.initialize(metadata)
        if self.url_filters.has_url_filters():
            self.filter_store.apply_url_filters(self.url_filters.parse_from_url())

        if self.filter_store.has_active_filters:
            await self.filter_store.apply_filters()
        if self._debouncer is not None:
            self._debouncer.mark_applied()

        self._mirror_to_url(self.filter_store.filters)
        logger.info(
            "Catalog bootstrapped",
            extra={
                "total": self.apartment_store.pagination.total,
                "active_filters": self.filter_store.active_filters_count,
            },
        )

    def _mirror_to_url(self, filters: FilterParams) -> None:
        self._writing_url = True
        try:
            self.url_filters.update_url(filters, self.filter_store.default_filters)
        finally:
            self._writing_url = False

    def _on_filters_changed(self, filters: FilterParams) -> None:
        if self._initializing or not self.bootstrapped:
            return
        self._mirror_to_url(filters)

    def _on_url_changed(self, overrides: FilterOverrides | None) -> None:
        if self._initializing or self._writing_url or not overrides:
            return
        logger.debug("Applying filters from navigation", extra={"filters": overrides})
        self.filter_store.apply_url_filters(overrides)

    async def retry(self) -> None:
        """Re-run the load for the filters currently in effect."""
        self.apartment_store.clear_error()
        await self.apartment_store.load(self.apartment_store.current_filters, reset=True)

        if not self.bootstrapped:
            self._initializing = True
            try:
                await self._initialize_filters()
            finally:
                self._initializing = False

    async def reset(self) -> None:
        """Back to the unfiltered listing: filters, URL and errors are cleared."""
        self.filter_store.reset_filters()
        self.filter_store.clear_error()
        self.url_filters.clear_url()
        self.apartment_store.clear_error()
        if self._debouncer is not None:
            self._debouncer.mark_applied()

        await self.apartment_store.filter(None)

    async def load_more(self) -> None:
        try:
            await self.apartment_store.load_more()
        except ApiRequestError as exc:
            # Surfaced through apartment_store.error
            logger.info("Load more failed", extra={"error_code": exc.error_code})

    def sort(self, key: str, reverse: bool = False) -> None:
        self.apartment_store.sort_apartments(key, reverse)

    @property
    def available_rooms(self) -> tuple[int, ...]:
        """Room counts the filter panel keeps enabled."""
        return available_rooms(
            self.apartment_store.apartments,
            self.filter_store.filters,
            self.filter_store.metadata,
        )

    def is_room_available(self, room: int) -> bool:
        return room in self.available_rooms

    def room_counts(self) -> dict[int, int]:
        return room_counts(self.apartment_store.apartments, self.available_rooms)

    async def close(self) -> None:
        self._unsubscribe_filters()
        if self._unsubscribe_url is not None:
            self._unsubscribe_url()
            self._unsubscribe_url = None
        if self._debouncer is not None:
            self._debouncer.close()
        if self._http_client is not None:
            await self._http_client.aclose()


def build_catalog_page(
    settings: ClientSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    storage: KeyValueStorage | None = None,
    address_bar: AddressBar | None = None,
) -> CatalogPage:
    """
    Assemble a page from configuration.

    When no ``http_client`` is given one is created for ``settings.api_base_url``
    and closed by ``CatalogPage.close``. Without ``storage`` nothing is
    persisted; without ``address_bar`` URL sync is disabled.
    """
    settings = settings or client_settings()
    owned_client = None
    if http_client is None:
        http_client = owned_client = httpx.AsyncClient(base_url=settings.api_base_url)

    apartment_store = ApartmentStore(
        http_client,
        ApiCache(storage),
        limit=settings.page_limit,
        cache_ttl=settings.cache_ttl_seconds,
    )
    filter_store = FilterStore(apartment_store, FilterPersistence(storage))
    debouncer = DebouncedFilterApplier(filter_store, delay=settings.debounce_seconds)

    return CatalogPage(
        apartment_store,
        filter_store,
        UrlFilters(address_bar),
        debouncer=debouncer,
        http_client=owned_client,
    )
