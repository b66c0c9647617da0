from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from apartment_catalog.domain.errors import FilterValidationError, PagingValidationError

Range = tuple[float, float]

MAX_PAGE_LIMIT = 100
DEFAULT_PAGE_LIMIT = 20


@dataclass(frozen=True)
class Apartment:
    id: str
    title: str
    price: float
    area: float
    rooms: int
    floor: int
    total_floors: int
    address: str
    images: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Apartment:
        """Build an apartment from its wire shape (camelCase keys)."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            price=data["price"],
            area=data["area"],
            rooms=data["rooms"],
            floor=data["floor"],
            total_floors=data["totalFloors"],
            address=data["address"],
            images=tuple(data.get("images") or ()),
            features=tuple(data.get("features") or ()),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "area": self.area,
            "rooms": self.rooms,
            "floor": self.floor,
            "totalFloors": self.total_floors,
            "address": self.address,
            "images": list(self.images),
            "features": list(self.features),
        }
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True, slots=True)
class FilterParams:
    """
    A complete filter selection.

    Every range is [min, max]; an empty ``rooms`` tuple means no room
    constraint. Instances are replaced, never mutated, by the filter store.
    """

    price_range: Range
    area_range: Range
    rooms: tuple[int, ...]
    floors: Range

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceRange": list(self.price_range),
            "areaRange": list(self.area_range),
            "rooms": list(self.rooms),
            "floors": list(self.floors),
        }


@dataclass(frozen=True, slots=True)
class FilterMetadata:
    """Server-declared bounds for every filter dimension."""

    price_range: Range
    area_range: Range
    rooms_available: tuple[int, ...]
    floors_range: Range

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterMetadata:
        return cls(
            price_range=(data["priceRange"][0], data["priceRange"][1]),
            area_range=(data["areaRange"][0], data["areaRange"][1]),
            rooms_available=tuple(data["roomsAvailable"]),
            floors_range=(data["floorsRange"][0], data["floorsRange"][1]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceRange": list(self.price_range),
            "areaRange": list(self.area_range),
            "roomsAvailable": list(self.rooms_available),
            "floorsRange": list(self.floors_range),
        }

    def default_filters(self) -> FilterParams:
        """The no-op filter: full ranges, no room constraint."""
        return FilterParams(
            price_range=self.price_range,
            area_range=self.area_range,
            rooms=(),
            floors=self.floors_range,
        )


DEFAULT_FILTER_METADATA = FilterMetadata(
    price_range=(0, 100_000_000),
    area_range=(1, 1000),
    rooms_available=(1, 2, 3, 4),
    floors_range=(1, 50),
)


@dataclass
class PaginationParams:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    total: int = 0


@dataclass(frozen=True, slots=True)
class ApartmentQuery:
    """Server-side search constraints; ``None`` bounds are unconstrained."""

    price_min: float | None = None
    price_max: float | None = None
    area_min: float | None = None
    area_max: float | None = None
    rooms: tuple[int, ...] = field(default_factory=tuple)
    floor_min: int | None = None
    floor_max: int | None = None

    def validate(self) -> None:
        """
        Validate query constraints.

        Raises:
            FilterValidationError: If a range is inverted or a room count is not positive
        """
        errors: list[dict[str, str]] = []
        for name, low, high in (
            ("price", self.price_min, self.price_max),
            ("area", self.area_min, self.area_max),
            ("floor", self.floor_min, self.floor_max),
        ):
            if low is not None and high is not None and low > high:
                errors.append(
                    {
                        "field": f"{name}Min",
                        "message": f"{name}Min cannot be greater than {name}Max",
                        "code": "INVALID_RANGE",
                    }
                )
        if any(room <= 0 for room in self.rooms):
            errors.append(
                {
                    "field": "rooms",
                    "message": "rooms must contain positive integers",
                    "code": "ROOMS_INVALID",
                }
            )
        if errors:
            raise FilterValidationError(errors=errors)


@dataclass(frozen=True, slots=True)
class Paging:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def validate(self) -> None:
        """
        Validate paging parameters.

        Raises:
            PagingValidationError: If paging parameters are invalid
        """
        if self.page < 1:
            raise PagingValidationError("page must be >= 1")
        if self.limit <= 0:
            raise PagingValidationError("limit must be > 0")
        if self.limit > MAX_PAGE_LIMIT:
            raise PagingValidationError(f"limit must be <= {MAX_PAGE_LIMIT}")
