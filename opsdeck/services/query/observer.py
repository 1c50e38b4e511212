from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from opsdeck.services.query.cache import QueryClient, QueryState
from opsdeck.services.query.keys import QueryKey


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryDefinition(Generic[T]):
    # What a read hook declares: its slot, how to fetch it, how often, and whether it may run.
    key: QueryKey
    fetch: Callable[[], Awaitable[T]]
    refetch_interval_s: float | None = None
    enabled: bool = True


class QueryObserver(Generic[T]):
    """Live view of one query slot, the Python counterpart of a read hook.

    ``mount()`` subscribes to the slot, fires the initial request when the
    definition is enabled and starts the refetch timer; ``unmount()`` stops
    the timer. Failures are never raised from the observer: they surface as
    ``is_error`` / ``error``.
    """

    def __init__(self, client: QueryClient, definition: QueryDefinition[T]) -> None:
        self._client = client
        self.definition = definition
        self._mounted = False
        self._timer: asyncio.Task[None] | None = None

    @property
    def key(self) -> QueryKey:
        return self.definition.key

    @property
    def state(self) -> QueryState:
        return self._client.get_query_state(self.definition.key)

    @property
    def data(self) -> T | None:
        return self.state.data

    @property
    def error(self) -> BaseException | None:
        return self.state.error

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def is_loading(self) -> bool:
        # Disabled queries stay idle, never loading.
        return self.definition.enabled and self.state.status == "loading"

    @property
    def is_fetching(self) -> bool:
        return self.state.is_fetching

    @property
    def is_error(self) -> bool:
        return self.state.status == "error"

    @property
    def is_success(self) -> bool:
        return self.state.status == "success"

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def mount(self) -> "QueryObserver[T]":
        if self._mounted:
            return self
        self._mounted = True
        definition = self.definition
        self._client.attach(self)
        self._client.subscribe(definition.key, definition.fetch if definition.enabled else None)
        if not definition.enabled:
            return self
        if not self._client.is_fresh(definition.key):
            self._client.spawn(self._fetch(force=False))
        if definition.refetch_interval_s:
            self._timer = asyncio.create_task(self._poll(definition.refetch_interval_s))
        return self

    def unmount(self) -> None:
        # Requests already in flight still settle into the cache.
        if not self._mounted:
            return
        self._mounted = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._client.unsubscribe(self.definition.key)
        self._client.detach(self)

    async def refetch(self) -> QueryState:
        # Manual refresh always issues a newer request; disabled queries stay untouched.
        if self.definition.enabled:
            await self._fetch(force=True)
        return self.state

    async def _fetch(self, *, force: bool) -> None:
        try:
            await self._client.fetch_query(self.definition.key, self.definition.fetch, force=force)
        except asyncio.CancelledError:
            # Our own cancellation propagates; a request cancelled by QueryClient.clear() does not.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.debug("query_observer_fetch_cancelled key=%s", self.definition.key)
        except Exception as exc:  # noqa: BLE001 - error is kept on the slot for the view
            logger.debug("query_observer_fetch_failed key=%s error=%s", self.definition.key, exc)

    async def _poll(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            await self._fetch(force=False)

    async def __aenter__(self) -> "QueryObserver[T]":
        return self.mount()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.unmount()
