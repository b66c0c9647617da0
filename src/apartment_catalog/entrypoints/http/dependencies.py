"""
Dependency injection for FastAPI routes.

Key principle: the dataset is static and read-only, so the repository is a
process-wide singleton (lru_cache). Use cases are cheap and built per request.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from apartment_catalog.adapters.in_memory_apartment_repository import (
    InMemoryApartmentRepository,
)
from apartment_catalog.infra.config import apartments_data_path
from apartment_catalog.infra.dataset import load_dataset
from apartment_catalog.ports.apartment_repository import ApartmentRepository
from apartment_catalog.use_cases.get_apartment_by_id import GetApartmentById
from apartment_catalog.use_cases.search_apartments import SearchApartments


@lru_cache(maxsize=1)
def get_apartment_repository() -> ApartmentRepository:
    """
    Loads the dataset once and serves it from memory.

    Raises:
        InternalError: If the dataset file cannot be read
    """
    return InMemoryApartmentRepository.from_dataset(load_dataset(apartments_data_path()))


def get_search_apartments_use_case(
    repository: ApartmentRepository = Depends(get_apartment_repository),
) -> SearchApartments:
    return SearchApartments(apartment_repository=repository)


def get_get_apartment_by_id_use_case(
    repository: ApartmentRepository = Depends(get_apartment_repository),
) -> GetApartmentById:
    return GetApartmentById(apartment_repository=repository)
