from __future__ import annotations

from apartment_catalog.ports.key_value_storage import KeyValueStorage, StorageError


class InMemoryKeyValueStorage(KeyValueStorage):
    """
    Canonical contract implementation for tests.

    ``quota`` bounds the total number of stored characters (keys + values);
    writes beyond it raise ``StorageError`` like a full browser store.
    """

    def __init__(self, quota: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota = quota

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
            if used + len(key) + len(value) > self._quota:
                raise StorageError(f"Storage quota exceeded writing '{key}'")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)
