"""Get apartment by ID use case."""

from __future__ import annotations

from dataclasses import dataclass

from apartment_catalog.domain.apartment import Apartment
from apartment_catalog.domain.errors import NotFoundError, ValidationError
from apartment_catalog.ports.apartment_repository import ApartmentRepository


@dataclass(frozen=True, slots=True)
class GetApartmentByIdRequest:
    apartment_id: str


@dataclass(frozen=True, slots=True)
class GetApartmentByIdResponse:
    apartment: Apartment


class GetApartmentById:
    """
    Use case for retrieving a single apartment by ID.

    Responsibilities:
    - Reject blank identifiers
    - Delegate to repository for data access
    - Raise NotFoundError if the apartment doesn't exist
    """

    def __init__(self, apartment_repository: ApartmentRepository) -> None:
        self._repository = apartment_repository

    def execute(self, request: GetApartmentByIdRequest) -> GetApartmentByIdResponse:
        """
        Raises:
            ValidationError: If apartment_id is blank
            NotFoundError: If no apartment has the given ID
        """
        if not request.apartment_id.strip():
            raise ValidationError(
                errors=[
                    {
                        "field": "apartment_id",
                        "message": "Must not be blank",
                        "code": "ID_REQUIRED",
                    }
                ]
            )

        apartment = self._repository.get_by_id(request.apartment_id)

        if apartment is None:
            raise NotFoundError(resource="Apartment", identifier=request.apartment_id)

        return GetApartmentByIdResponse(apartment=apartment)
