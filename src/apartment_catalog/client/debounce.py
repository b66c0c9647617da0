from __future__ import annotations

import asyncio
import json
import logging

from apartment_catalog.client.filter_store import FilterStore
from apartment_catalog.domain.apartment import FilterParams

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY_SECONDS = 0.3


def _snapshot(filters: FilterParams) -> str:
    return json.dumps(filters.to_dict(), sort_keys=True)


class DebouncedFilterApplier:
    """
    Applies filters once edits have been quiet for ``delay`` seconds.

    Only one timer is live at a time: every change cancels it and schedules
    a new one. The first firing only records the filters it saw (that write
    is the store's initialization); later firings apply the filters when
    they differ from the last fired snapshot.

    Must be driven from a running event loop.
    """

    def __init__(self, store: FilterStore, delay: float = DEBOUNCE_DELAY_SECONDS) -> None:
        self._store = store
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[bool] | None = None
        self._last_fired: str | None = None
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def _on_change(self, filters: FilterParams) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = asyncio.get_running_loop().call_later(self._delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        snapshot = _snapshot(self._store.filters)

        if self._last_fired is None:
            self._last_fired = snapshot
            return
        if snapshot == self._last_fired:
            return

        self._last_fired = snapshot
        self._task = asyncio.ensure_future(self._store.apply_filters())
        self._task.add_done_callback(self._on_applied)

    def _on_applied(self, task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Debounced filter apply failed",
                extra={"error_type": type(exc).__name__},
                exc_info=exc,
            )

    def mark_applied(self) -> None:
        """Record the current filters as applied and drop any pending timer."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._last_fired = _snapshot(self._store.filters)

    async def flush(self) -> None:
        """Fire a pending timer now and wait for the resulting apply."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        if self._task is not None and not self._task.done():
            await self._task

    def close(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._unsubscribe()
