from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "apartments.json"


def apartments_data_path() -> Path:
    """Location of the static dataset served by the listing endpoint."""
    path = os.getenv("APARTMENTS_DATA_PATH")

    return Path(path) if path else DEFAULT_DATA_PATH


def storage_url() -> str:
    """SQLAlchemy URL of the durable client storage (filters + response cache)."""
    return os.getenv("CATALOG_STORAGE_URL", "sqlite:///catalog-storage.db")


def _env_number(name: str, default: float, cast: type[int] | type[float]) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} environment variable must be a number, got {raw!r}")


@dataclass(frozen=True)
class ClientSettings:
    api_base_url: str = "http://localhost:8000"
    page_limit: int = 20
    debounce_seconds: float = 0.3
    cache_ttl_seconds: float = 120.0


_DEFAULTS = ClientSettings()


def client_settings() -> ClientSettings:
    """
    Read client configuration from the environment.

    Raises:
        RuntimeError: If a numeric variable cannot be parsed
    """
    return ClientSettings(
        api_base_url=os.getenv("CATALOG_API_BASE_URL", _DEFAULTS.api_base_url),
        page_limit=int(_env_number("CATALOG_PAGE_LIMIT", _DEFAULTS.page_limit, int)),
        debounce_seconds=_env_number(
            "CATALOG_DEBOUNCE_SECONDS", _DEFAULTS.debounce_seconds, float
        ),
        cache_ttl_seconds=_env_number(
            "CATALOG_CACHE_TTL_SECONDS", _DEFAULTS.cache_ttl_seconds, float
        ),
    )
