"""Filter, apartment and pagination validation.

Two modes are provided for filters:

* ``validate_filter_params`` is strict and reports every violation; it is
  used for values typed by the user.
* ``sanitize_filter_params`` is lenient and repairs values; it is used for
  state coming from the URL or durable storage, which must never break the
  filter panel.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypedDict

from apartment_catalog.domain.apartment import (
    DEFAULT_FILTER_METADATA,
    MAX_PAGE_LIMIT,
    DEFAULT_PAGE_LIMIT,
    Apartment,
    FilterMetadata,
    FilterParams,
    PaginationParams,
    Range,
)
from apartment_catalog.domain.errors import ValidationError


class FilterOverrides(TypedDict, total=False):
    """Partial, untrusted filter state keyed by wire names."""

    priceRange: Any
    areaRange: Any
    rooms: Any
    floors: Any


@dataclass(frozen=True, slots=True)
class RangeRule:
    min: float
    max: float


@dataclass(frozen=True, slots=True)
class RoomsRule:
    available: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class FilterValidationRules:
    price_range: RangeRule
    area_range: RangeRule
    rooms: RoomsRule
    floors: RangeRule


def rules_from_metadata(metadata: FilterMetadata) -> FilterValidationRules:
    return FilterValidationRules(
        price_range=RangeRule(*metadata.price_range),
        area_range=RangeRule(*metadata.area_range),
        rooms=RoomsRule(tuple(metadata.rooms_available)),
        floors=RangeRule(*metadata.floors_range),
    )


DEFAULT_VALIDATION_RULES = rules_from_metadata(DEFAULT_FILTER_METADATA)


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.errors]

    def message(self) -> str:
        """All issue messages, comma-joined."""
        return ", ".join(issue.message for issue in self.errors)

    def raise_if_invalid(self, error_cls: type[ValidationError] = ValidationError) -> None:
        """
        Raises:
            ValidationError: (or ``error_cls``) carrying one entry per issue
        """
        if self.errors:
            raise error_cls(errors=[issue.to_dict() for issue in self.errors])


def format_number(value: float) -> str:
    """Render a bound without a trailing ``.0`` for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ==============================================================================
# Strict validation
# ==============================================================================

# attribute -> (wire field, code prefix, label)
_RANGE_DIMENSIONS = {
    "price_range": ("priceRange", "PRICE", "price"),
    "area_range": ("areaRange", "AREA", "area"),
    "floors": ("floors", "FLOOR", "floor"),
}

# Floors are whole numbers on the wire
_INTEGRAL_DIMENSIONS = frozenset({"floors"})


def _check_bound(attr: str, bound: str, value: Any) -> ValidationIssue | None:
    """``bound`` is ``"MIN"`` or ``"MAX"``."""
    field_name, prefix, label = _RANGE_DIMENSIONS[attr]
    name = "Minimum" if bound == "MIN" else "Maximum"
    code = f"{prefix}_{bound}_INVALID"

    if not _is_number(value):
        return ValidationIssue(field_name, f"{name} {label} must be a number", code)
    if attr in _INTEGRAL_DIMENSIONS and value != int(value):
        return ValidationIssue(field_name, f"{name} {label} must be a whole number", code)
    return None


def _check_range(attr: str, value: Range, rule: RangeRule) -> list[ValidationIssue]:
    field_name, prefix, label = _RANGE_DIMENSIONS[attr]
    low, high = value

    malformed = [
        issue
        for issue in (_check_bound(attr, "MIN", low), _check_bound(attr, "MAX", high))
        if issue is not None
    ]
    if malformed:
        return malformed

    issues = []

    if low < rule.min:
        issues.append(
            ValidationIssue(
                field=field_name,
                message=f"Minimum {label} cannot be less than {format_number(rule.min)}",
                code=f"{prefix}_MIN_INVALID",
            )
        )
    if high > rule.max:
        issues.append(
            ValidationIssue(
                field=field_name,
                message=f"Maximum {label} cannot be greater than {format_number(rule.max)}",
                code=f"{prefix}_MAX_INVALID",
            )
        )
    if low > high:
        issues.append(
            ValidationIssue(
                field=field_name,
                message=f"Minimum {label} cannot be greater than maximum {label}",
                code=f"{prefix}_RANGE_INVALID",
            )
        )
    return issues


def invalid_rooms(rooms: tuple[int, ...] | list[int], rule: RoomsRule) -> list[int]:
    return [room for room in rooms if room not in rule.available]


def validate_filter_params(
    filters: FilterParams,
    rules: FilterValidationRules = DEFAULT_VALIDATION_RULES,
) -> ValidationResult:
    """Check every dimension independently; each violation gets its own code."""
    issues: list[ValidationIssue] = []

    issues += _check_range("price_range", filters.price_range, rules.price_range)
    issues += _check_range("area_range", filters.area_range, rules.area_range)

    rejected = invalid_rooms(filters.rooms, rules.rooms)
    if rejected:
        issues.append(
            ValidationIssue(
                field="rooms",
                message=f"Invalid number of rooms: {', '.join(str(room) for room in rejected)}",
                code="ROOMS_INVALID",
            )
        )

    issues += _check_range("floors", filters.floors, rules.floors)

    return ValidationResult(tuple(issues))


# ==============================================================================
# Lenient sanitization
# ==============================================================================


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _sanitize_range(value: Any, rule: RangeRule, integral: bool = False) -> Range:
    fallback = (rule.min, rule.max)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return fallback

    low, high = value
    if not _is_number(low) or not _is_number(high):
        return fallback

    low = min(max(low, rule.min), rule.max)
    high = max(min(high, rule.max), rule.min)
    if integral:
        low, high = math.ceil(low), math.floor(high)
    if low > high:
        return fallback
    return (low, high)


def _sanitize_rooms(value: Any, rule: RoomsRule) -> tuple[int, ...]:
    if not isinstance(value, (list, tuple)):
        return ()

    rooms = set()
    for room in value:
        if not _is_number(room) or room != int(room):
            continue
        if int(room) in rule.available:
            rooms.add(int(room))
    return tuple(sorted(rooms))


def sanitize_filter_params(
    filters: Mapping[str, Any] | None,
    rules: FilterValidationRules = DEFAULT_VALIDATION_RULES,
) -> FilterParams:
    """
    Repair externally sourced filter state.

    Bounds are clamped into the rule range, malformed or inverted ranges fall
    back to the full rule range and disallowed rooms are dropped. Floor
    bounds are narrowed to whole floors. Missing dimensions take their
    default value.
    """
    filters = filters or {}
    return FilterParams(
        price_range=_sanitize_range(filters.get("priceRange"), rules.price_range),
        area_range=_sanitize_range(filters.get("areaRange"), rules.area_range),
        rooms=_sanitize_rooms(filters.get("rooms"), rules.rooms),
        floors=_sanitize_range(filters.get("floors"), rules.floors, integral=True),
    )


def reconcile(
    metadata: FilterMetadata,
    durable: Mapping[str, Any] | None = None,
    url: Mapping[str, Any] | None = None,
) -> FilterParams:
    """
    Resolve the starting filters from the three sources, in order.

    Metadata defaults are overridden by the durable snapshot, which is in
    turn replaced as a whole by URL filters when the URL carries any.
    """
    rules = rules_from_metadata(metadata)
    if url:
        return sanitize_filter_params(url, rules)
    if durable:
        return sanitize_filter_params(durable, rules)
    return metadata.default_filters()


def active_filter_fields(filters: FilterParams, metadata: FilterMetadata) -> list[str]:
    """Wire names of the dimensions that differ from the metadata defaults."""
    active = []
    if tuple(filters.price_range) != tuple(metadata.price_range):
        active.append("priceRange")
    if tuple(filters.area_range) != tuple(metadata.area_range):
        active.append("areaRange")
    if filters.rooms:
        active.append("rooms")
    if tuple(filters.floors) != tuple(metadata.floors_range):
        active.append("floors")
    return active


def available_rooms(
    apartments: Sequence[Apartment],
    filters: FilterParams,
    metadata: FilterMetadata | None,
) -> tuple[int, ...]:
    """
    Room counts that can still be selected.

    Every room count is offered until a price, area or floor filter narrows
    the listing; from then on only the counts present among the loaded
    apartments are.
    """
    offered = (metadata or DEFAULT_FILTER_METADATA).rooms_available
    if not apartments or metadata is None:
        return tuple(offered)

    narrowed = [name for name in active_filter_fields(filters, metadata) if name != "rooms"]
    if not narrowed:
        return tuple(offered)
    return tuple(sorted({apartment.rooms for apartment in apartments}))


def room_counts(apartments: Sequence[Apartment], rooms: Sequence[int]) -> dict[int, int]:
    """Number of loaded apartments per room count, for each of ``rooms``."""
    return {room: sum(1 for apartment in apartments if apartment.rooms == room) for room in rooms}


# ==============================================================================
# Apartment records and pagination
# ==============================================================================


def _positive_number(value: Any) -> bool:
    return _is_number(value) and value > 0


def validate_apartment(record: Mapping[str, Any]) -> ValidationResult:
    """Validate a raw apartment record from the dataset."""
    issues: list[ValidationIssue] = []

    for name, code in (("id", "ID_REQUIRED"), ("title", "TITLE_REQUIRED")):
        if not record.get(name) or not isinstance(record.get(name), str):
            issues.append(ValidationIssue(name, f"{name} is required and must be a string", code))

    for name, code in (
        ("price", "PRICE_INVALID"),
        ("area", "AREA_INVALID"),
        ("rooms", "ROOMS_INVALID"),
        ("floor", "FLOOR_INVALID"),
        ("totalFloors", "TOTAL_FLOORS_INVALID"),
    ):
        if not _positive_number(record.get(name)):
            issues.append(ValidationIssue(name, f"{name} must be a positive number", code))

    floor, total_floors = record.get("floor"), record.get("totalFloors")
    if _is_number(floor) and _is_number(total_floors) and floor > total_floors:
        issues.append(
            ValidationIssue(
                "floor", "floor cannot be greater than totalFloors", "FLOOR_EXCEEDS_TOTAL"
            )
        )

    if not record.get("address") or not isinstance(record.get("address"), str):
        issues.append(
            ValidationIssue("address", "address is required and must be a string", "ADDRESS_REQUIRED")
        )
    if not isinstance(record.get("images"), list):
        issues.append(ValidationIssue("images", "images must be a list", "IMAGES_INVALID"))
    if not isinstance(record.get("features"), list):
        issues.append(ValidationIssue("features", "features must be a list", "FEATURES_INVALID"))

    return ValidationResult(tuple(issues))


def validate_pagination_params(pagination: PaginationParams) -> ValidationResult:
    issues: list[ValidationIssue] = []

    if not isinstance(pagination.page, int) or pagination.page < 1:
        issues.append(ValidationIssue("page", "page must be a positive integer", "PAGE_INVALID"))
    if not isinstance(pagination.limit, int) or not 1 <= pagination.limit <= MAX_PAGE_LIMIT:
        issues.append(
            ValidationIssue(
                "limit", f"limit must be between 1 and {MAX_PAGE_LIMIT}", "LIMIT_INVALID"
            )
        )
    if not isinstance(pagination.total, int) or pagination.total < 0:
        issues.append(
            ValidationIssue("total", "total must be a non-negative integer", "TOTAL_INVALID")
        )

    return ValidationResult(tuple(issues))


def sanitize_pagination_params(pagination: Mapping[str, Any]) -> PaginationParams:
    return PaginationParams(
        page=max(1, int(pagination.get("page") or 1)),
        limit=min(MAX_PAGE_LIMIT, max(1, int(pagination.get("limit") or DEFAULT_PAGE_LIMIT))),
        total=max(0, int(pagination.get("total") or 0)),
    )
