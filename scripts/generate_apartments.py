#!/usr/bin/env python3
"""
Generate the static apartments dataset with deterministic random data.

Features:
- Deterministic: fixed seed → same dataset every run
- Idempotent: overwrites the target file
- Realism-lite: area grows with rooms, price grows with area

Usage:
    python scripts/generate_apartments.py
    python scripts/generate_apartments.py --count 60 --output /tmp/apartments.json
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from apartment_catalog.domain.apartment import Apartment
from apartment_catalog.domain.validation import validate_apartment
from apartment_catalog.infra.config import DEFAULT_DATA_PATH
from apartment_catalog.infra.dataset import derive_metadata


# ==============================================================================
# Configuration
# ==============================================================================

RANDOM_SEED = 42  # Fixed seed for deterministic results
NUM_APARTMENTS = 40  # Number of apartments to generate

ROOMS_AVAILABLE = [1, 2, 3, 4]

STREETS = [
    "Tverskaya Street",
    "Arbat Street",
    "Leninsky Prospekt",
    "Kutuzovsky Prospekt",
    "Prospekt Mira",
    "Profsoyuznaya Street",
    "Novy Arbat",
    "Sadovaya-Kudrinskaya Street",
    "Petrovka Street",
    "Myasnitskaya Street",
]

FEATURES = [
    "Balcony",
    "Parking",
    "Elevator",
    "Concierge",
    "Renovated",
    "Furnished",
    "Park view",
    "Air conditioning",
    "Storage room",
    "Gym",
]


# ==============================================================================
# Apartment Generation
# ==============================================================================


def calculate_price(area: float) -> int:
    """Price per square metre between 180k and 300k, rounded to 10k."""
    price_per_m2 = random.uniform(180_000, 300_000)
    return int(area * price_per_m2 / 10_000) * 10_000


def generate_apartment(index: int) -> Apartment:
    """Generate a single random apartment."""
    rooms = random.choice(ROOMS_AVAILABLE)
    area = round(18 + rooms * 17 + random.uniform(0, 25), 1)

    total_floors = random.randint(5, 25)
    floor = random.randint(1, total_floors)

    apartment_id = f"apt-{index:03d}"
    title = f"{rooms}-room apartment, {area:g} m²"

    return Apartment(
        id=apartment_id,
        title=title,
        price=calculate_price(area),
        area=area,
        rooms=rooms,
        floor=floor,
        total_floors=total_floors,
        address=f"{random.choice(STREETS)}, {random.randint(1, 120)}, Moscow",
        images=(
            f"/images/apartments/{apartment_id}-1.jpg",
            f"/images/apartments/{apartment_id}-2.jpg",
        ),
        features=tuple(random.sample(FEATURES, k=random.randint(2, 4))),
        description=f"{title} on floor {floor} of {total_floors}.",
    )


def generate_dataset(num_apartments: int = NUM_APARTMENTS, seed: int = RANDOM_SEED) -> dict:
    """
    Build the dataset document.

    Args:
        num_apartments: Number of apartments to generate
        seed: Random seed for deterministic results
    """
    random.seed(seed)

    apartments = [generate_apartment(index) for index in range(1, num_apartments + 1)]
    records = [apartment.to_dict() for apartment in apartments]

    for record in records:
        validate_apartment(record).raise_if_invalid()

    metadata = derive_metadata(apartments)
    return {
        "apartments": records,
        "meta": {
            "filters": {
                **metadata.to_dict(),
                "roomsAvailable": ROOMS_AVAILABLE,
                "floorsRange": [1, metadata.floors_range[1]],
            }
        },
    }


# ==============================================================================
# Main
# ==============================================================================


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--count", type=int, default=NUM_APARTMENTS)
    parser.add_argument("--seed", type=int, default=RANDOM_SEED)
    parser.add_argument("--output", type=Path, default=DEFAULT_DATA_PATH)
    args = parser.parse_args()

    print(f"🏠 Generating {args.count} apartments (seed={args.seed})...")
    dataset = generate_dataset(args.count, args.seed)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(dataset, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    print(f"✅ Wrote {len(dataset['apartments'])} apartments to {args.output}")
    print(f"   Filter bounds: {dataset['meta']['filters']}")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"❌ Error generating dataset: {e}", file=sys.stderr)
        sys.exit(1)
