from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from apartment_catalog.entrypoints.http.dependencies import (
    get_get_apartment_by_id_use_case,
    get_search_apartments_use_case,
)
from apartment_catalog.entrypoints.http.dtos.apartment_search import (
    ApartmentListResponseDTO,
    ApartmentResponseDTO,
    ApartmentsSearchQueryDTO,
)
from apartment_catalog.entrypoints.http.error_responses import ErrorResponse
from apartment_catalog.entrypoints.http.mappers.apartment_search_mapper import (
    ApartmentSearchMapper,
)
from apartment_catalog.use_cases.get_apartment_by_id import (
    GetApartmentById,
    GetApartmentByIdRequest,
)
from apartment_catalog.use_cases.search_apartments import SearchApartments

# 5 min browser, 10 min CDN
CACHE_CONTROL = "public, max-age=300, s-maxage=600"

router = APIRouter(tags=["Apartments"])


def listing_etag(total: int, page: int, limit: int) -> str:
    return f'"apartments-{total}-{page}-{limit}"'


@router.get(
    "/apartments",
    response_model=ApartmentListResponseDTO,
    response_model_exclude_none=True,
    summary="Search apartments",
    description="""
    List apartments with optional filters and page-based pagination.

    ## Filters
    - All filters use AND semantics
    - Ranges are inclusive: priceMin/priceMax, areaMin/areaMax, floorMin/floorMax
    - rooms: comma-separated list, matches any of the given counts

    ## Pagination
    - Default limit: 20
    - Max limit: 100
    - meta.total is the number of matches before paging

    ## Example
    ```
    GET /api/apartments?priceMin=5000000&priceMax=10000000&rooms=1,2&limit=10
    ```
    """,
    responses={
        422: {"description": "Validation error", "model": ErrorResponse},
    },
)
def list_apartments(
    response: Response,
    query: Annotated[ApartmentsSearchQueryDTO, Query()],
    use_case: SearchApartments = Depends(get_search_apartments_use_case),
) -> ApartmentListResponseDTO:
    """Search endpoint following parse → execute → map → return pattern."""
    # 1. Map to domain request
    request = ApartmentSearchMapper.to_domain_request(query)

    # 2. Execute use case
    result = use_case.execute(request)

    # 3. Cacheable response
    response.headers["Cache-Control"] = CACHE_CONTROL
    response.headers["ETag"] = listing_etag(result.total_count, query.page, query.limit)

    # 4. Map to response
    return ApartmentSearchMapper.to_response(result)


@router.get(
    "/apartments/{apartment_id}",
    response_model=ApartmentResponseDTO,
    response_model_exclude_none=True,
    summary="Get apartment by ID",
    responses={
        404: {"description": "Apartment not found", "model": ErrorResponse},
    },
)
def get_apartment(
    apartment_id: str,
    use_case: GetApartmentById = Depends(get_get_apartment_by_id_use_case),
) -> ApartmentResponseDTO:
    result = use_case.execute(GetApartmentByIdRequest(apartment_id=apartment_id))
    return ApartmentSearchMapper.to_apartment_response(result.apartment)
