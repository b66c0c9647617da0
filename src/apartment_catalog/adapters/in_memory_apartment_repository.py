from __future__ import annotations

from apartment_catalog.domain.apartment import (
    Apartment,
    ApartmentQuery,
    FilterMetadata,
    Paging,
)
from apartment_catalog.infra.dataset import Dataset, derive_metadata
from apartment_catalog.ports.apartment_repository import ApartmentRepository, SearchResult


class InMemoryApartmentRepository(ApartmentRepository):
    """
    Serves the static dataset from memory.

    - Stores apartments in dataset order
    - Applies AND-semantics filtering with inclusive bounds
    - Applies paging AFTER filtering
    - Returns total_count of matching apartments before paging
    """

    def __init__(
        self,
        apartments: list[Apartment],
        metadata: FilterMetadata | None = None,
    ) -> None:
        self._apartments = apartments
        self._metadata = metadata

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> InMemoryApartmentRepository:
        return cls(dataset.apartments, dataset.metadata)

    def search(self, query: ApartmentQuery, paging: Paging) -> SearchResult:
        # Trust that UseCase has validated inputs (contract programming)
        matches = [apartment for apartment in self._apartments if self._matches(apartment, query)]
        total_count = len(matches)  # Count BEFORE paging

        start = paging.offset
        end = start + paging.limit

        return SearchResult(apartments=matches[start:end], total_count=total_count)

    def get_by_id(self, apartment_id: str) -> Apartment | None:
        return next((a for a in self._apartments if a.id == apartment_id), None)

    def metadata(self) -> FilterMetadata:
        if self._metadata is None:
            self._metadata = derive_metadata(self._apartments)
        return self._metadata

    def _matches(self, apartment: Apartment, query: ApartmentQuery) -> bool:
        if query.price_min is not None and apartment.price < query.price_min:
            return False
        if query.price_max is not None and apartment.price > query.price_max:
            return False
        if query.area_min is not None and apartment.area < query.area_min:
            return False
        if query.area_max is not None and apartment.area > query.area_max:
            return False
        if query.rooms and apartment.rooms not in query.rooms:
            return False
        if query.floor_min is not None and apartment.floor < query.floor_min:
            return False
        if query.floor_max is not None and apartment.floor > query.floor_max:
            return False
        return True
