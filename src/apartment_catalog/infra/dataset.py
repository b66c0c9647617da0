"""Static apartment dataset loader.

The dataset is a JSON document of the form::

    {"apartments": [...], "meta": {"filters": {...}}}

Records that fail validation are skipped (and logged) so that one bad row
never takes the listing endpoint down.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from apartment_catalog.domain.apartment import Apartment, FilterMetadata
from apartment_catalog.domain.errors import InternalError
from apartment_catalog.domain.validation import validate_apartment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    apartments: list[Apartment]
    metadata: FilterMetadata


def derive_metadata(apartments: list[Apartment]) -> FilterMetadata:
    """Compute filter bounds from the records when the file declares none."""
    if not apartments:
        raise InternalError("Cannot derive filter metadata from an empty dataset")

    return FilterMetadata(
        price_range=(min(a.price for a in apartments), max(a.price for a in apartments)),
        area_range=(min(a.area for a in apartments), max(a.area for a in apartments)),
        rooms_available=tuple(sorted({a.rooms for a in apartments})),
        floors_range=(min(a.floor for a in apartments), max(a.floor for a in apartments)),
    )


def load_dataset(path: Path) -> Dataset:
    """
    Read and validate the dataset file.

    Args:
        path: JSON dataset location

    Returns:
        Dataset with the valid apartments (file order) and filter metadata

    Raises:
        InternalError: If the file is missing or not a valid dataset document
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InternalError(f"Cannot read apartments dataset: {exc}", path=str(path)) from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("apartments"), list):
        raise InternalError("Apartments dataset must contain an 'apartments' list", path=str(path))

    apartments: list[Apartment] = []
    for index, record in enumerate(raw["apartments"]):
        if not isinstance(record, dict):
            logger.warning("Skipping non-object dataset record", extra={"index": index})
            continue

        result = validate_apartment(record)
        if not result.is_valid:
            logger.warning(
                "Skipping invalid apartment record",
                extra={"index": index, "id": record.get("id"), "codes": result.codes},
            )
            continue

        apartments.append(Apartment.from_dict(record))

    declared = (raw.get("meta") or {}).get("filters")
    if declared:
        try:
            metadata = FilterMetadata.from_dict(declared)
        except (KeyError, IndexError, TypeError) as exc:
            raise InternalError(f"Invalid filter metadata in dataset: {exc}", path=str(path)) from exc
    else:
        metadata = derive_metadata(apartments)

    logger.info(
        "Apartments dataset loaded",
        extra={"path": str(path), "apartments": len(apartments)},
    )
    return Dataset(apartments=apartments, metadata=metadata)
