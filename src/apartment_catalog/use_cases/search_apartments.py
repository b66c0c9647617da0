from __future__ import annotations

from dataclasses import dataclass

from apartment_catalog.domain.apartment import (
    Apartment,
    ApartmentQuery,
    FilterMetadata,
    Paging,
)
from apartment_catalog.ports.apartment_repository import ApartmentRepository


@dataclass(frozen=True, slots=True)
class SearchApartmentsRequest:
    query: ApartmentQuery
    paging: Paging


@dataclass(frozen=True, slots=True)
class SearchApartmentsResponse:
    apartments: list[Apartment]
    total_count: int
    metadata: FilterMetadata


class SearchApartments:
    """
    Apartment search with filters and pagination.

    This use case validates the request and delegates filtering to the
    repository adapter. No filtering logic exists in the use case.
    Filter metadata is attached to every response so that a client can
    bootstrap its filter bounds from any page.
    """

    def __init__(self, apartment_repository: ApartmentRepository) -> None:
        self._repository = apartment_repository

    def execute(self, request: SearchApartmentsRequest) -> SearchApartmentsResponse:
        """
        Execute apartment search.

        Args:
            request: Search parameters (query and paging)

        Returns:
            Response containing the requested page, total count and metadata

        Raises:
            PagingValidationError: If paging parameters are invalid
            FilterValidationError: If query constraints are invalid
        """
        # Validate inputs (UseCase responsibility per contract)
        request.query.validate()
        request.paging.validate()

        result = self._repository.search(
            query=request.query,
            paging=request.paging,
        )

        return SearchApartmentsResponse(
            apartments=result.apartments,
            total_count=result.total_count,
            metadata=self._repository.metadata(),
        )
