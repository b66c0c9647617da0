from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised by storage adapters when the backing store is unavailable or full."""


class KeyValueStorage(ABC):
    """
    Port for durable, per-origin string storage.

    Mirrors browser local storage: string keys, string values, last writer
    wins. Adapters raise ``StorageError`` on failure; callers treat storage
    as best-effort and must catch it.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_item(self, key: str) -> None: ...

    @abstractmethod
    def keys(self) -> list[str]: ...
