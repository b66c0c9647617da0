from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

QueryParams = dict[str, list[str]]
Unsubscribe = Callable[[], None]


class AddressBar(ABC):
    """
    Port for the page location that hosts the catalog.

    Query parameters are modelled the way ``urllib.parse.parse_qs`` returns
    them: every key maps to the list of its values, in order.
    """

    @abstractmethod
    def query(self) -> QueryParams: ...

    @abstractmethod
    def replace(self, query: QueryParams) -> None:
        """Swap the current entry's query without adding a history entry."""
        ...

    @abstractmethod
    def href(self) -> str: ...

    @abstractmethod
    def subscribe(self, listener: Callable[[QueryParams], None]) -> Unsubscribe:
        """Notify ``listener`` with the new query whenever the location changes."""
        ...
