"""Shared fixtures for the client-side stores.

``FakeListingApi`` answers listing requests through the real search use case,
so the stores are exercised against the same filtering and wire shape the
HTTP service produces, without a network.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest

from apartment_catalog.adapters.in_memory_apartment_repository import InMemoryApartmentRepository
from apartment_catalog.domain.apartment import Apartment, FilterMetadata
from apartment_catalog.entrypoints.http.dtos.apartment_search import ApartmentsSearchQueryDTO
from apartment_catalog.entrypoints.http.mappers.apartment_search_mapper import (
    ApartmentSearchMapper,
)
from apartment_catalog.use_cases.search_apartments import SearchApartments

BASE_URL = "http://catalog.test"


class FakeListingApi:
    """httpx mock handler serving ``GET /api/apartments``."""

    def __init__(self, apartments: list[Apartment], metadata: FilterMetadata) -> None:
        self._use_case = SearchApartments(InMemoryApartmentRepository(apartments, metadata))
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.network_down = False
        self.payload: Any = None
        self.raw_body: bytes | None = None
        self._holds: list[asyncio.Event] = []

    @property
    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)

    def hold(self) -> asyncio.Event:
        """Delay the next request until the returned event is set."""
        event = asyncio.Event()
        self._holds.append(event)
        return event

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._holds:
            await self._holds.pop(0).wait()

        if self.network_down:
            raise httpx.ConnectError("Connection refused", request=request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "Internal server error"})
        if self.raw_body is not None:
            return httpx.Response(200, content=self.raw_body)
        if self.payload is not None:
            return httpx.Response(200, json=self.payload)

        query = ApartmentsSearchQueryDTO.model_validate(dict(request.url.params))
        result = self._use_case.execute(ApartmentSearchMapper.to_domain_request(query))
        body = ApartmentSearchMapper.to_response(result).model_dump(by_alias=True, exclude_none=True)
        return httpx.Response(200, json=body)


@pytest.fixture
def anyio_backend() -> str:
    # The debouncer schedules on the asyncio loop
    return "asyncio"


@pytest.fixture
def metadata() -> FilterMetadata:
    return FilterMetadata(
        price_range=(5_000_000, 11_000_000),
        area_range=(30, 54),
        rooms_available=(1, 2, 3, 4),
        floors_range=(1, 10),
    )


@pytest.fixture
def apartments() -> list[Apartment]:
    """25 apartments; ``rooms`` cycles 1..4 and ``floor`` cycles 1..10."""
    return [
        Apartment(
            id=f"apt-{index + 1:03d}",
            title=f"Apartment {index + 1}",
            price=5_000_000 + index * 250_000,
            area=30 + index,
            rooms=index % 4 + 1,
            floor=index % 10 + 1,
            total_floors=12,
            address=f"Tverskaya Street, {index + 1}",
        )
        for index in range(25)
    ]


@pytest.fixture
def listing_api(apartments: list[Apartment], metadata: FilterMetadata) -> FakeListingApi:
    return FakeListingApi(apartments, metadata)


@pytest.fixture
async def http_client(listing_api: FakeListingApi) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(listing_api), base_url=BASE_URL
    ) as client:
        yield client
