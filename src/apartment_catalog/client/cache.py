"""Response cache for listing API calls.

Entries live in an in-memory table and, when requested, in a durable
``KeyValueStorage`` mirror that survives page sessions. A failed network
call falls back to the last in-memory entry for the same key, expired or
not: availability wins over freshness.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from apartment_catalog.domain.errors import ApiRequestError
from apartment_catalog.ports.key_value_storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

API_CACHE_PREFIX = "api_cache_"
DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True, slots=True)
class CacheOptions:
    ttl: float = DEFAULT_TTL_SECONDS
    durable: bool = False


@dataclass(frozen=True, slots=True)
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl

    def to_json(self) -> str:
        return json.dumps({"data": self.data, "timestamp": self.timestamp, "ttl": self.ttl})

    @classmethod
    def from_json(cls, raw: str) -> CacheEntry:
        payload = json.loads(raw)
        return cls(data=payload["data"], timestamp=payload["timestamp"], ttl=payload["ttl"])


def _normalize_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized[str(key)] = [str(item) for item in value]
        else:
            normalized[str(key)] = str(value)
    return normalized


def generate_cache_key(url: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Deterministic key for (endpoint, parameters).

    Parameters are normalized to strings and serialized with sorted keys, so
    the key does not depend on insertion order or on ``1`` vs ``"1"``.
    """
    canonical = json.dumps(_normalize_params(params), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{API_CACHE_PREFIX}{url}_{digest}"


def _to_api_error(exc: Exception, url: str) -> ApiRequestError:
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        return ApiRequestError(f"Server responded with status {status_code}", status_code=status_code, url=url)
    if isinstance(exc, ValueError):
        return ApiRequestError("Server returned an invalid JSON body", status_code=200, url=url)
    return ApiRequestError(f"Network error: {exc}", url=url)


class ApiCache:
    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            storage: Durable mirror; durable options are ignored without one
            clock: Seconds since the epoch, injectable for tests
        """
        self._memory: dict[str, CacheEntry] = {}
        self._storage = storage
        self._clock = clock

    def __len__(self) -> int:
        return len(self._memory)

    def get(self, key: str, durable: bool = False) -> Any | None:
        """Return cached data for ``key`` or None when absent or expired."""
        now = self._clock()

        entry = self._memory.get(key)
        if entry is not None and entry.is_valid(now):
            return entry.data

        if not durable or self._storage is None:
            return None

        try:
            raw = self._storage.get_item(key)
            if raw is None:
                return None
            stored = CacheEntry.from_json(raw)
            if stored.is_valid(now):
                # Promote so repeat reads skip the durable store
                self._memory[key] = stored
                return stored.data
            self._storage.remove_item(key)
        except (StorageError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to read durable cache entry", extra={"key": key, "error": str(exc)})

        return None

    def set(self, key: str, data: Any, options: CacheOptions | None = None) -> None:
        options = options or CacheOptions()
        entry = CacheEntry(data=data, timestamp=self._clock(), ttl=options.ttl)

        self._memory[key] = entry

        if options.durable and self._storage is not None:
            try:
                self._storage.set_item(key, entry.to_json())
            except (StorageError, TypeError, ValueError) as exc:
                logger.warning("Failed to write durable cache entry", extra={"key": key, "error": str(exc)})

    def stale(self, key: str) -> Any | None:
        """In-memory data for ``key`` regardless of expiry."""
        entry = self._memory.get(key)
        return entry.data if entry is not None else None

    def clear(self, key: str, durable: bool = False) -> None:
        self._memory.pop(key, None)

        if durable and self._storage is not None:
            try:
                self._storage.remove_item(key)
            except StorageError as exc:
                logger.warning("Failed to clear durable cache entry", extra={"key": key, "error": str(exc)})

    def clear_all(self, durable: bool = False) -> None:
        """Drop every cache entry; durable keys outside the cache prefix are left alone."""
        self._memory.clear()

        if durable and self._storage is not None:
            self._remove_durable(self._storage, lambda key: key.startswith(API_CACHE_PREFIX))

    def invalidate(self, pattern: str | re.Pattern[str], durable: bool = False) -> int:
        """Drop in-memory (and optionally durable) entries whose key matches ``pattern``."""
        regex = re.compile(pattern)

        matching = [key for key in self._memory if regex.search(key)]
        for key in matching:
            del self._memory[key]

        if durable and self._storage is not None:
            self._remove_durable(
                self._storage,
                lambda key: key.startswith(API_CACHE_PREFIX) and regex.search(key) is not None
            )

        return len(matching)

    @staticmethod
    def _remove_durable(storage: KeyValueStorage, predicate: Callable[[str], bool]) -> None:
        try:
            for key in storage.keys():
                if predicate(key):
                    storage.remove_item(key)
        except StorageError as exc:
            logger.warning("Failed to clear durable cache", extra={"error": str(exc)})

    async def cached_fetch(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Mapping[str, Any] | None = None,
        options: CacheOptions | None = None,
    ) -> Any:
        """
        GET ``url`` through the cache.

        Returns:
            Decoded JSON body, from cache when a valid entry exists

        Raises:
            ApiRequestError: If the request fails and no in-memory entry exists for the key
        """
        options = options or CacheOptions()
        key = generate_cache_key(url, params)

        cached = self.get(key, durable=options.durable)
        if cached is not None:
            logger.debug("Cache hit", extra={"url": url, "key": key})
            return cached

        try:
            response = await client.get(url, params=_normalize_params(params))
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            if key in self._memory:
                logger.warning(
                    "API request failed, returning stale cache data",
                    extra={"url": url, "error": str(exc)},
                )
                return self.stale(key)
            raise _to_api_error(exc, url) from exc

        self.set(key, data, options)
        return data
