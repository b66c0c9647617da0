from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from apartment_catalog.domain.apartment import (
    Apartment,
    ApartmentQuery,
    FilterMetadata,
    Paging,
)


@dataclass(frozen=True)
class SearchResult:
    """Result from catalog search including pagination metadata."""

    apartments: list[Apartment]
    total_count: int  # Total matching apartments before paging


class ApartmentRepository(ABC):
    """
    Port for apartment data access.

    Contract (Preconditions):
        - query and paging parameters must be pre-validated by caller (UseCase)
        - Implementations trust inputs are valid and do not re-validate
    """

    @abstractmethod
    def search(self, query: ApartmentQuery, paging: Paging) -> SearchResult:
        """
        Search the dataset with constraints and paging.

        Args:
            query: Filter constraints (AND semantics, inclusive bounds) - pre-validated
            paging: Pagination parameters - pre-validated

        Returns:
            SearchResult containing the requested page and the total match count
        """
        ...

    @abstractmethod
    def get_by_id(self, apartment_id: str) -> Apartment | None: ...

    @abstractmethod
    def metadata(self) -> FilterMetadata:
        """Dataset-level filter bounds, independent of any query."""
        ...
