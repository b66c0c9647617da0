from __future__ import annotations

import copy
from collections.abc import Callable
from urllib.parse import parse_qs, urlencode, urlsplit

from apartment_catalog.ports.address_bar import AddressBar, QueryParams, Unsubscribe


class InMemoryAddressBar(AddressBar):
    """
    History-aware location used outside a browser and in tests.

    - ``replace`` rewrites the current entry (no new back-button stop)
    - ``navigate`` pushes a new entry and drops any forward history
    - ``back``/``forward`` move through the stack
    - every location change notifies subscribers
    """

    def __init__(self, url: str = "http://localhost/") -> None:
        parts = urlsplit(url)
        self._origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""
        self._path = parts.path or "/"
        self._entries: list[QueryParams] = [parse_qs(parts.query)]
        self._index = 0
        self._listeners: list[Callable[[QueryParams], None]] = []

    @property
    def history_length(self) -> int:
        return len(self._entries)

    def query(self) -> QueryParams:
        return copy.deepcopy(self._entries[self._index])

    def replace(self, query: QueryParams) -> None:
        self._entries[self._index] = copy.deepcopy(query)
        self._notify()

    def navigate(self, query: QueryParams) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(copy.deepcopy(query))
        self._index += 1
        self._notify()

    def back(self) -> None:
        if self._index > 0:
            self._index -= 1
            self._notify()

    def forward(self) -> None:
        if self._index < len(self._entries) - 1:
            self._index += 1
            self._notify()

    def href(self) -> str:
        query = urlencode(self._entries[self._index], doseq=True)
        return f"{self._origin}{self._path}" + (f"?{query}" if query else "")

    def subscribe(self, listener: Callable[[QueryParams], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.query())
