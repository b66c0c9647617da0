from __future__ import annotations

from apartment_catalog.domain.apartment import (
    Apartment,
    ApartmentQuery,
    FilterMetadata,
    Paging,
)
from apartment_catalog.entrypoints.http.dtos.apartment_search import (
    ApartmentListResponseDTO,
    ApartmentResponseDTO,
    ApartmentsSearchQueryDTO,
    FilterMetadataDTO,
    ListMetaDTO,
)
from apartment_catalog.use_cases.search_apartments import (
    SearchApartmentsRequest,
    SearchApartmentsResponse,
)


class ApartmentSearchMapper:
    """Maps between REST DTOs and domain models for apartment search."""

    @staticmethod
    def to_domain_query(dto: ApartmentsSearchQueryDTO) -> ApartmentQuery:
        """
        Converts query params to domain constraints.

        The comma-joined ``rooms`` wire value becomes a tuple of ints.
        """
        rooms = tuple(int(room) for room in dto.rooms.split(",")) if dto.rooms else ()
        return ApartmentQuery(
            price_min=dto.price_min,
            price_max=dto.price_max,
            area_min=dto.area_min,
            area_max=dto.area_max,
            rooms=rooms,
            floor_min=dto.floor_min,
            floor_max=dto.floor_max,
        )

    @staticmethod
    def to_domain_paging(dto: ApartmentsSearchQueryDTO) -> Paging:
        return Paging(page=dto.page, limit=dto.limit)

    @staticmethod
    def to_domain_request(dto: ApartmentsSearchQueryDTO) -> SearchApartmentsRequest:
        """Convenience method: builds complete domain request from DTO."""
        return SearchApartmentsRequest(
            query=ApartmentSearchMapper.to_domain_query(dto),
            paging=ApartmentSearchMapper.to_domain_paging(dto),
        )

    @staticmethod
    def to_apartment_response(apartment: Apartment) -> ApartmentResponseDTO:
        return ApartmentResponseDTO(
            id=apartment.id,
            title=apartment.title,
            price=apartment.price,
            area=apartment.area,
            rooms=apartment.rooms,
            floor=apartment.floor,
            total_floors=apartment.total_floors,
            address=apartment.address,
            images=list(apartment.images),
            features=list(apartment.features),
            description=apartment.description,
        )

    @staticmethod
    def to_metadata_response(metadata: FilterMetadata) -> FilterMetadataDTO:
        return FilterMetadataDTO(
            price_range=list(metadata.price_range),
            area_range=list(metadata.area_range),
            rooms_available=list(metadata.rooms_available),
            floors_range=list(metadata.floors_range),
        )

    @staticmethod
    def to_domain_apartment(dto: ApartmentResponseDTO) -> Apartment:
        return Apartment(
            id=dto.id,
            title=dto.title,
            price=dto.price,
            area=dto.area,
            rooms=dto.rooms,
            floor=dto.floor,
            total_floors=dto.total_floors,
            address=dto.address,
            images=tuple(dto.images),
            features=tuple(dto.features),
            description=dto.description,
        )

    @staticmethod
    def to_domain_metadata(dto: FilterMetadataDTO) -> FilterMetadata:
        return FilterMetadata(
            price_range=(dto.price_range[0], dto.price_range[1]),
            area_range=(dto.area_range[0], dto.area_range[1]),
            rooms_available=tuple(dto.rooms_available),
            floors_range=(dto.floors_range[0], dto.floors_range[1]),
        )

    @staticmethod
    def to_response(result: SearchApartmentsResponse) -> ApartmentListResponseDTO:
        """
        Converts domain search result to the listing wire shape.

        Args:
            result: Domain search result containing apartments, total and metadata

        Returns:
            ApartmentListResponseDTO: ``{apartments, meta: {total, filters}}``
        """
        return ApartmentListResponseDTO(
            apartments=[
                ApartmentSearchMapper.to_apartment_response(apartment)
                for apartment in result.apartments
            ],
            meta=ListMetaDTO(
                total=result.total_count,
                filters=ApartmentSearchMapper.to_metadata_response(result.metadata),
            ),
        )
