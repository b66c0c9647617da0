"""Paginated apartment list state.

Reset loads replace the list (page 1); continuation loads append the next
page. Every reset load starts a new generation, and a response that belongs
to an older generation is discarded instead of being merged into the newer
result set.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from apartment_catalog.client.cache import ApiCache, CacheOptions
from apartment_catalog.domain.apartment import (
    DEFAULT_PAGE_LIMIT,
    Apartment,
    FilterMetadata,
    FilterParams,
    PaginationParams,
)
from apartment_catalog.domain.errors import ApiRequestError, PagingValidationError
from apartment_catalog.domain.validation import format_number, validate_pagination_params
from apartment_catalog.entrypoints.http.dtos.apartment_search import ApartmentListResponseDTO
from apartment_catalog.entrypoints.http.mappers.apartment_search_mapper import (
    ApartmentSearchMapper,
)

logger = logging.getLogger(__name__)

LISTING_PATH = "/api/apartments"
LISTING_CACHE_TTL_SECONDS = 2 * 60

SORT_KEYS = ("price", "area", "rooms", "floor")


@dataclass(frozen=True, slots=True)
class ListingPage:
    apartments: list[Apartment]
    total: int
    metadata: FilterMetadata | None


def parse_listing(payload: Any) -> ListingPage:
    """
    Validate a listing body and convert it to domain objects.

    Raises:
        ApiRequestError: If the body does not have the listing shape
    """
    try:
        dto = ApartmentListResponseDTO.model_validate(payload)
    except PydanticValidationError as exc:
        raise ApiRequestError(
            "Server returned a malformed listing", status_code=200, errors=exc.error_count()
        ) from exc

    return ListingPage(
        apartments=[ApartmentSearchMapper.to_domain_apartment(item) for item in dto.apartments],
        total=dto.meta.total,
        metadata=(
            ApartmentSearchMapper.to_domain_metadata(dto.meta.filters)
            if dto.meta.filters is not None
            else None
        ),
    )


class ApartmentStore:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache: ApiCache,
        limit: int = DEFAULT_PAGE_LIMIT,
        listing_path: str = LISTING_PATH,
        cache_ttl: float = LISTING_CACHE_TTL_SECONDS,
    ) -> None:
        self._http_client = http_client
        self._cache = cache
        self._listing_path = listing_path
        self._cache_options = CacheOptions(ttl=cache_ttl, durable=True)

        self.apartments: list[Apartment] = []
        self.pagination = PaginationParams(limit=limit)
        self.has_more = True
        self.metadata: FilterMetadata | None = None
        self.loading = False
        self.error: str | None = None

        self._generation = 0
        # Filters of the result set currently shown; continuation loads reuse them
        self._current_filters: FilterParams | None = None

    @property
    def can_load_more(self) -> bool:
        return self.has_more and not self.loading

    @property
    def total_pages(self) -> int:
        return math.ceil(self.pagination.total / self.pagination.limit)

    @property
    def is_first_page(self) -> bool:
        return self.pagination.page == 1

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def current_filters(self) -> FilterParams | None:
        return self._current_filters

    def build_query_params(self, filters: FilterParams | None = None) -> dict[str, str]:
        """Listing query for the current page, plus every filter dimension when given."""
        params = {
            "page": str(self.pagination.page),
            "limit": str(self.pagination.limit),
        }
        if filters is None:
            return params

        params["priceMin"] = format_number(filters.price_range[0])
        params["priceMax"] = format_number(filters.price_range[1])
        params["areaMin"] = format_number(filters.area_range[0])
        params["areaMax"] = format_number(filters.area_range[1])
        if filters.rooms:
            params["rooms"] = ",".join(str(room) for room in filters.rooms)
        params["floorMin"] = format_number(filters.floors[0])
        params["floorMax"] = format_number(filters.floors[1])
        return params

    async def load(self, filters: FilterParams | None = None, reset: bool = True) -> None:
        """
        Fetch one page of the listing.

        A reset load starts at page 1 and replaces the list once the response
        arrives; on failure it empties the list. A continuation load appends
        the page given by ``pagination.page`` using the filters of the current
        result set, and re-raises on failure.

        Raises:
            ApiRequestError: Only for continuation loads of the current generation
        """
        if reset:
            self._generation += 1
            self.pagination.page = 1
            self._current_filters = filters
        else:
            filters = self._current_filters

        generation = self._generation
        params = self.build_query_params(filters)

        self.loading = True
        self.error = None
        started = time.perf_counter()
        try:
            payload = await self._cache.cached_fetch(
                self._http_client, self._listing_path, params, self._cache_options
            )
            page = parse_listing(payload)
        except ApiRequestError as exc:
            if generation != self._generation:
                logger.info(
                    "Discarding failed stale listing response",
                    extra={"page": params["page"], "error_code": exc.error_code},
                )
                return

            logger.warning(
                "Failed to load apartments",
                extra={"params": params, "error_code": exc.error_code, "error_message": exc.message},
            )
            self.error = exc.message
            if not reset:
                raise
            self.apartments = []
            return
        finally:
            if generation == self._generation:
                self.loading = False

        logger.debug(
            "Listing fetched",
            extra={
                "params": params,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )

        if generation != self._generation:
            logger.info("Discarding stale listing response", extra={"page": params["page"]})
            return

        if reset:
            self.apartments = list(page.apartments)
        else:
            self.apartments.extend(page.apartments)

        self.pagination.total = page.total
        self.has_more = len(self.apartments) < page.total

        if page.metadata is not None and self.metadata is None:
            self.metadata = page.metadata

    async def load_more(self) -> None:
        """
        Append the next page.

        Raises:
            ApiRequestError: If the page could not be loaded; the page number is rolled back first
        """
        if not self.can_load_more:
            return

        generation = self._generation
        self.pagination.page += 1
        try:
            await self.load(None, reset=False)
        except ApiRequestError:
            if generation == self._generation:
                self.pagination.page -= 1
            raise

    async def filter(self, filters: FilterParams | None = None) -> None:
        await self.load(filters, reset=True)

    def reset(self) -> None:
        """Forget the loaded pages; metadata is kept."""
        self._generation += 1
        self.apartments = []
        self.pagination = PaginationParams(limit=self.pagination.limit)
        self.has_more = True
        self.error = None
        self.loading = False
        self._current_filters = None

    def update_limit(self, limit: int) -> None:
        """
        Change the page size; accumulated pages are dropped.

        Raises:
            PagingValidationError: If ``limit`` is outside 1..100
        """
        validate_pagination_params(PaginationParams(limit=limit)).raise_if_invalid(
            PagingValidationError
        )
        self.pagination.limit = limit
        self.reset()

    def clear_error(self) -> None:
        self.error = None

    def get_apartment_by_id(self, apartment_id: str) -> Apartment | None:
        return next((item for item in self.apartments if item.id == apartment_id), None)

    def sort_apartments(self, key: str, reverse: bool = False) -> None:
        """
        Sort the loaded apartments in place by one numeric attribute.

        Raises:
            ValueError: If ``key`` is not a sortable attribute
        """
        if key not in SORT_KEYS:
            raise ValueError(f"Cannot sort apartments by {key!r}; expected one of {SORT_KEYS}")
        self.apartments.sort(key=lambda item: getattr(item, key), reverse=reverse)
