from pydantic import BaseModel, ConfigDict, Field

Number = int | float


class ApartmentResponseDTO(BaseModel):
    id: str
    title: str
    price: Number
    area: Number
    rooms: int
    floor: int
    total_floors: int = Field(alias="totalFloors")
    address: str
    images: list[str]
    features: list[str]
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class FilterMetadataDTO(BaseModel):
    price_range: list[Number] = Field(alias="priceRange", min_length=2, max_length=2)
    area_range: list[Number] = Field(alias="areaRange", min_length=2, max_length=2)
    rooms_available: list[int] = Field(alias="roomsAvailable")
    floors_range: list[Number] = Field(alias="floorsRange", min_length=2, max_length=2)

    model_config = ConfigDict(populate_by_name=True)


class ApartmentsSearchQueryDTO(BaseModel):
    """Query parameters for searching the apartment listing."""

    page: int = Field(
        default=1,
        description="Page number (1-based)",
        examples=[1],
        ge=1,
    )
    limit: int = Field(
        default=20,
        description="Page size",
        examples=[20],
        ge=1,
        le=100,
    )
    price_min: float | None = Field(
        default=None,
        alias="priceMin",
        description="Minimum price (inclusive)",
        examples=[5000000],
        ge=0,
    )
    price_max: float | None = Field(
        default=None,
        alias="priceMax",
        description="Maximum price (inclusive)",
        examples=[10000000],
        ge=0,
    )
    area_min: float | None = Field(
        default=None,
        alias="areaMin",
        description="Minimum area in square metres (inclusive)",
        examples=[40],
        ge=0,
    )
    area_max: float | None = Field(
        default=None,
        alias="areaMax",
        description="Maximum area in square metres (inclusive)",
        examples=[80.5],
        ge=0,
    )
    rooms: str | None = Field(
        default=None,
        description="Comma-separated room counts (any of)",
        examples=["1,2"],
        pattern=r"^\d+(,\d+)*$",
    )
    floor_min: int | None = Field(
        default=None,
        alias="floorMin",
        description="Lowest floor (inclusive)",
        examples=[2],
        ge=1,
    )
    floor_max: int | None = Field(
        default=None,
        alias="floorMax",
        description="Highest floor (inclusive)",
        examples=[12],
        ge=1,
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "page": 1,
                "limit": 20,
                "priceMin": 5000000,
                "priceMax": 10000000,
                "rooms": "1,2",
            }
        },
    )


class ListMetaDTO(BaseModel):
    total: int = Field(ge=0)
    filters: FilterMetadataDTO | None = None


class ApartmentListResponseDTO(BaseModel):
    apartments: list[ApartmentResponseDTO]
    meta: ListMetaDTO
