"""Filter state in the page URL.

Filters are mirrored into ``priceMin/priceMax``, ``areaMin/areaMax``,
``rooms`` (repeated) and ``floorMin/floorMax`` so that a filtered listing
can be bookmarked or shared. Only dimensions that differ from the defaults
are written; unrelated query parameters are preserved.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping

from apartment_catalog.domain.apartment import FilterParams, Range
from apartment_catalog.domain.validation import FilterOverrides, format_number
from apartment_catalog.ports.address_bar import AddressBar, QueryParams, Unsubscribe

logger = logging.getLogger(__name__)

# wire field -> (min param, max param)
RANGE_PARAMS = {
    "priceRange": ("priceMin", "priceMax"),
    "areaRange": ("areaMin", "areaMax"),
    "floors": ("floorMin", "floorMax"),
}
FILTER_QUERY_PARAMS = (
    "priceMin",
    "priceMax",
    "areaMin",
    "areaMax",
    "rooms",
    "floorMin",
    "floorMax",
)


def _values(query: Mapping[str, str | list[str]], name: str) -> list[str]:
    value = query.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _parse_number(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_filters_from_query(query: Mapping[str, str | list[str]]) -> FilterOverrides | None:
    """
    Extract filter overrides from query parameters.

    A range is accepted only when both ends parse and min <= max. Rooms may
    be given as repeated keys or comma-joined; non-positive or non-numeric
    values are dropped. Returns None when no dimension is usable.
    """
    filters: FilterOverrides = {}

    for field_name, (min_param, max_param) in RANGE_PARAMS.items():
        low_values, high_values = _values(query, min_param), _values(query, max_param)
        if not low_values or not high_values:
            continue
        low, high = _parse_number(low_values[0]), _parse_number(high_values[0])
        if low is None or high is None or low > high:
            continue
        filters[field_name] = [low, high]  # type: ignore[literal-required]

    rooms = set()
    for raw in _values(query, "rooms"):
        for part in raw.split(","):
            room = _parse_number(part.strip())
            if room is not None and room > 0:
                rooms.add(room)
    if rooms:
        filters["rooms"] = sorted(rooms)

    return filters or None


def _range_differs(value: Range, default: Range) -> bool:
    return tuple(value) != tuple(default)


def build_filter_query(filters: FilterParams, defaults: FilterParams) -> QueryParams:
    """Query parameters for the dimensions of ``filters`` that differ from ``defaults``."""
    query: QueryParams = {}

    for (min_param, max_param), value, default in (
        (RANGE_PARAMS["priceRange"], filters.price_range, defaults.price_range),
        (RANGE_PARAMS["areaRange"], filters.area_range, defaults.area_range),
        (RANGE_PARAMS["floors"], filters.floors, defaults.floors),
    ):
        if _range_differs(value, default):
            query[min_param] = [format_number(value[0])]
            query[max_param] = [format_number(value[1])]

    if filters.rooms:
        query["rooms"] = [str(room) for room in filters.rooms]

    return query


class UrlFilters:
    """
    Reads and writes filters through an address bar.

    Without an address bar (any non-browser context) reads return nothing
    and writes are ignored.
    """

    def __init__(self, address_bar: AddressBar | None = None) -> None:
        self._address_bar = address_bar

    @property
    def is_client(self) -> bool:
        return self._address_bar is not None

    def parse_from_url(self) -> FilterOverrides | None:
        if self._address_bar is None:
            return None
        return parse_filters_from_query(self._address_bar.query())

    def has_url_filters(self) -> bool:
        """True if any filter parameter is present, valid or not."""
        if self._address_bar is None:
            return False
        query = self._address_bar.query()
        return any(name in query for name in FILTER_QUERY_PARAMS)

    def update_url(self, filters: FilterParams, defaults: FilterParams) -> None:
        """Replace the filter parameters of the current entry (no new history entry)."""
        if self._address_bar is None:
            return

        current = self._address_bar.query()
        query = {name: values for name, values in current.items() if name not in FILTER_QUERY_PARAMS}
        query.update(build_filter_query(filters, defaults))

        if query != current:
            self._address_bar.replace(query)
            logger.debug("URL filters updated", extra={"query": query})

    def clear_url(self) -> None:
        """Drop every query parameter from the current entry."""
        if self._address_bar is None:
            return
        if self._address_bar.query():
            self._address_bar.replace({})

    def watch(self, callback: Callable[[FilterOverrides | None], None]) -> Unsubscribe:
        """Call ``callback`` with the parsed filters on every location change."""
        if self._address_bar is None:
            return lambda: None
        return self._address_bar.subscribe(lambda query: callback(parse_filters_from_query(query)))

    def shareable_url(self) -> str:
        if self._address_bar is None:
            return ""
        return self._address_bar.href()
