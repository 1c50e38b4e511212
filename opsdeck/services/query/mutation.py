from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from opsdeck.services.query.cache import QueryClient
from opsdeck.services.query.keys import QueryKey


logger = logging.getLogger(__name__)

V = TypeVar("V")
R = TypeVar("R")

SuccessCallback = Callable[[Any, Any], Any]
ErrorCallback = Callable[[BaseException, Any], Any]


@dataclass(frozen=True)
class MutationDefinition(Generic[V, R]):
    # What a write hook declares: the call and the query slots it makes stale.
    name: str
    fn: Callable[[V], Awaitable[R]]
    invalidates: tuple[QueryKey, ...] = ()


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


class Mutation(Generic[V, R]):
    """Write hook: invalidate-and-refetch on success, untouched cache on failure."""

    def __init__(
        self,
        client: QueryClient,
        definition: MutationDefinition[V, R],
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._client = client
        self.definition = definition
        self._on_success = on_success
        self._on_error = on_error
        self._pending = 0
        self.status = "idle"
        self.data: R | None = None
        self.error: BaseException | None = None
        self.variables: V | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending > 0

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_idle(self) -> bool:
        return self.status == "idle"

    def reset(self) -> None:
        self.status = "idle"
        self.data = None
        self.error = None
        self.variables = None

    async def mutate_async(self, variables: V = None) -> R:  # type: ignore[assignment]
        self._pending += 1
        self.status = "pending"
        self.variables = variables
        try:
            result = await self.definition.fn(variables)
        except Exception as exc:
            self.status = "error"
            self.error = exc
            logger.info("mutation_failed name=%s error=%s", self.definition.name, exc)
            if self._on_error is not None:
                await _maybe_await(self._on_error(exc, variables))
            raise
        finally:
            self._pending -= 1

        self.status = "success"
        self.data = result
        self.error = None
        for prefix in self.definition.invalidates:
            self._client.invalidate_queries(prefix)
        if self._on_success is not None:
            await _maybe_await(self._on_success(result, variables))
        return result

    def mutate(self, variables: V = None) -> asyncio.Task[R | None]:  # type: ignore[assignment]
        # Fire-and-forget trigger; the outcome lands on status/error instead of raising.
        return self._client.spawn(self._mutate_quietly(variables))

    async def _mutate_quietly(self, variables: V) -> R | None:
        try:
            return await self.mutate_async(variables)
        except Exception:  # noqa: BLE001 - recorded on self.error by mutate_async
            return None
