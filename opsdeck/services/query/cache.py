from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Coroutine

from opsdeck.core.config import get_settings
from opsdeck.services.query.keys import QueryKey, matches_prefix
from opsdeck.services.resilience import RetryPolicy, default_retry_policy, retry_async
from opsdeck.services.telemetry import increment_counter

if TYPE_CHECKING:
    from opsdeck.services.query.observer import QueryObserver


logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[Any]]


@dataclass
class QuerySlot:
    # One cache entry per normalized key; sequence counters order overlapping requests.
    key: QueryKey
    data: Any = None
    error: BaseException | None = None
    status: str = "idle"
    updated_at: float | None = None
    invalidated: bool = False
    invalidated_at_seq: int = 0
    issued_seq: int = 0
    applied_seq: int = 0
    in_flight: asyncio.Task[Any] | None = field(default=None, repr=False)
    in_flight_seq: int = 0
    fetch_fn: FetchFn | None = field(default=None, repr=False)
    observers: int = 0

    @property
    def is_fetching(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()


@dataclass(frozen=True)
class QueryState:
    # Immutable snapshot handed to observers and views.
    data: Any
    error: BaseException | None
    status: str
    is_fetching: bool
    invalidated: bool
    updated_at: float | None


_IDLE_STATE = QueryState(
    data=None,
    error=None,
    status="idle",
    is_fetching=False,
    invalidated=False,
    updated_at=None,
)


class QueryClient:
    """Process-wide query cache with explicit lifecycle.

    Create one per application (or per test), share it between every
    observer and mutation, and call ``clear()`` or ``aclose()`` on teardown.
    """

    def __init__(
        self,
        *,
        stale_time_s: float | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = get_settings()
        self._stale_time_s = settings.query_stale_time_s if stale_time_s is None else stale_time_s
        self._retry_policy = retry_policy or default_retry_policy()
        self._clock = clock
        self._slots: dict[QueryKey, QuerySlot] = {}
        self._observers: set[QueryObserver[Any]] = set()
        self._background: set[asyncio.Task[Any]] = set()

    # -- slot access ----------------------------------------------------------

    def _slot(self, key: QueryKey) -> QuerySlot:
        slot = self._slots.get(key)
        if slot is None:
            slot = QuerySlot(key=key)
            self._slots[key] = slot
        return slot

    def keys(self) -> list[QueryKey]:
        return list(self._slots)

    def get_query_state(self, key: QueryKey) -> QueryState:
        slot = self._slots.get(key)
        if slot is None:
            return _IDLE_STATE
        return QueryState(
            data=slot.data,
            error=slot.error,
            status=slot.status,
            is_fetching=slot.is_fetching,
            invalidated=slot.invalidated,
            updated_at=slot.updated_at,
        )

    def get_query_data(self, key: QueryKey) -> Any:
        slot = self._slots.get(key)
        return None if slot is None else slot.data

    def is_fresh(self, key: QueryKey) -> bool:
        slot = self._slots.get(key)
        if slot is None or slot.status != "success" or slot.invalidated or slot.updated_at is None:
            return False
        return (self._clock() - slot.updated_at) < self._stale_time_s

    # -- fetching -------------------------------------------------------------

    async def fetch_query(self, key: QueryKey, fn: FetchFn, *, force: bool = False) -> Any:
        # Non-forced calls join an in-flight request; forced calls always issue a newer one.
        slot = self._slot(key)
        slot.fetch_fn = fn
        if not force and slot.is_fetching:
            increment_counter("query_deduplicated_total")
            assert slot.in_flight is not None
            return await asyncio.shield(slot.in_flight)

        slot.issued_seq += 1
        seq = slot.issued_seq
        if slot.status == "idle":
            slot.status = "loading"
        task = asyncio.create_task(self._run(slot, seq, fn))
        slot.in_flight = task
        slot.in_flight_seq = seq
        increment_counter("query_fetch_total")
        return await asyncio.shield(task)

    async def ensure_query_data(self, key: QueryKey, fn: FetchFn) -> Any:
        # Serve fresh cached data without a request; otherwise fetch.
        if self.is_fresh(key):
            return self._slots[key].data
        return await self.fetch_query(key, fn)

    async def _run(self, slot: QuerySlot, seq: int, fn: FetchFn) -> Any:
        try:
            data = await retry_async(fn, policy=self._retry_policy)
        except asyncio.CancelledError:
            if slot.in_flight_seq == seq:
                slot.in_flight = None
            raise
        except Exception as exc:  # noqa: BLE001 - recorded on the slot, then re-raised
            if self._settle(slot, seq, error=exc):
                raise
            return slot.data
        self._settle(slot, seq, data=data)
        return slot.data

    def _settle(
        self,
        slot: QuerySlot,
        seq: int,
        *,
        data: Any = None,
        error: BaseException | None = None,
    ) -> bool:
        # Apply a response only if no newer one has been applied to the slot.
        if slot.in_flight_seq == seq:
            slot.in_flight = None
        if seq < slot.applied_seq:
            increment_counter("query_stale_responses_discarded_total")
            logger.debug(
                "query_stale_response_discarded key=%s seq=%s applied=%s",
                slot.key,
                seq,
                slot.applied_seq,
            )
            return False
        slot.applied_seq = seq
        if error is not None:
            slot.error = error
            slot.status = "error"
            logger.info("query_fetch_failed key=%s error=%s", slot.key, error)
            return True
        slot.data = data
        slot.error = None
        slot.status = "success"
        slot.updated_at = self._clock()
        # A response issued before the last invalidation is still stale.
        if seq > slot.invalidated_at_seq:
            slot.invalidated = False
        return True

    # -- invalidation ---------------------------------------------------------

    def invalidate_queries(self, prefix: QueryKey, *, refetch_active: bool = True) -> list[asyncio.Task[Any]]:
        # Mark matching slots stale now; slots with mounted observers refetch in the background.
        refetches: list[asyncio.Task[Any]] = []
        for slot in list(self._slots.values()):
            if not matches_prefix(slot.key, prefix):
                continue
            slot.invalidated = True
            slot.invalidated_at_seq = slot.issued_seq
            if refetch_active and slot.observers > 0 and slot.fetch_fn is not None:
                task = self._spawn_refetch(slot)
                if task is not None:
                    refetches.append(task)
        logger.debug("query_invalidated prefix=%s refetching=%s", prefix, len(refetches))
        return refetches

    def _spawn_refetch(self, slot: QuerySlot) -> asyncio.Task[Any] | None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return None
        assert slot.fetch_fn is not None
        return self.spawn(self._quiet_fetch(slot.key, slot.fetch_fn, force=True))

    async def _quiet_fetch(self, key: QueryKey, fn: FetchFn, *, force: bool) -> Any:
        # Background reads keep failures on the slot instead of raising into nobody.
        try:
            return await self.fetch_query(key, fn, force=force)
        except Exception:  # noqa: BLE001 - error already stored on the slot
            return None

    # -- observers and background work ---------------------------------------

    def subscribe(self, key: QueryKey, fn: FetchFn | None) -> None:
        slot = self._slot(key)
        slot.observers += 1
        if fn is not None:
            slot.fetch_fn = fn

    def unsubscribe(self, key: QueryKey) -> None:
        slot = self._slots.get(key)
        if slot is not None and slot.observers > 0:
            slot.observers -= 1

    def attach(self, observer: QueryObserver[Any]) -> None:
        self._observers.add(observer)

    def detach(self, observer: QueryObserver[Any]) -> None:
        self._observers.discard(observer)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        # Track fire-and-forget work so wait_idle() and clear() can reach it.
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _pending_tasks(self) -> set[asyncio.Task[Any]]:
        pending = {task for task in self._background if not task.done()}
        for slot in self._slots.values():
            if slot.in_flight is not None and not slot.in_flight.done():
                pending.add(slot.in_flight)
        return pending

    async def wait_idle(self) -> None:
        # Wait for in-flight requests and background refetches (including ones they spawn).
        while True:
            pending = self._pending_tasks()
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def clear(self) -> None:
        # Tear down timers, cancel outstanding work and forget every slot.
        for observer in list(self._observers):
            observer.unmount()
        for task in self._pending_tasks():
            task.cancel()
        self._slots.clear()
        self._background.clear()

    async def aclose(self) -> None:
        pending = self._pending_tasks()
        self.clear()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
