from __future__ import annotations

import asyncio

import pytest

from opsdeck.core.errors import ApiError, ApiTransportError
from opsdeck.domain.schemas import AnomalyFilters
from opsdeck.services.query import QueryClient, QueryDefinition, QueryObserver, matches_prefix, query_key
from opsdeck.services.resilience import RetryPolicy
from opsdeck.services.telemetry import counters_snapshot


def test_query_key_normalizes_filters() -> None:
    # Unset filters vanish and mapping order does not matter.
    assert query_key("anomalies", AnomalyFilters()) == query_key("anomalies", {})
    assert query_key("anomalies", AnomalyFilters(category="COST")) == query_key(
        "anomalies", {"severity": None, "category": "COST"}
    )
    assert query_key("anomalies", AnomalyFilters(category="COST")) != query_key("anomalies", {})


def test_prefix_matching() -> None:
    key = query_key("anomalies", {"category": "COST"})
    assert matches_prefix(key, query_key("anomalies"))
    assert not matches_prefix(key, query_key("anomaly-stats"))
    assert not matches_prefix(query_key("anomaly"), key)


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_request(query_client: QueryClient) -> None:
    gate = asyncio.Event()
    calls = {"count": 0}

    async def fetch() -> str:
        calls["count"] += 1
        await gate.wait()
        return "stats"

    key = query_key("anomaly-stats")
    first = asyncio.create_task(query_client.fetch_query(key, fetch))
    second = asyncio.create_task(query_client.fetch_query(key, fetch))
    await asyncio.sleep(0)
    gate.set()

    assert await first == "stats"
    assert await second == "stats"
    assert calls["count"] == 1
    assert counters_snapshot()["query_deduplicated_total"] == 1


@pytest.mark.asyncio
async def test_older_response_never_overwrites_newer(query_client: QueryClient) -> None:
    gate = asyncio.Event()

    async def slow() -> str:
        await gate.wait()
        return "old"

    async def fast() -> str:
        return "new"

    key = query_key("anomalies", {})
    first = asyncio.create_task(query_client.fetch_query(key, slow, force=True))
    await asyncio.sleep(0)
    assert await query_client.fetch_query(key, fast, force=True) == "new"

    gate.set()
    # The late response is dropped; its caller sees the newer data.
    assert await first == "new"
    assert query_client.get_query_data(key) == "new"
    assert counters_snapshot()["query_stale_responses_discarded_total"] == 1


@pytest.mark.asyncio
async def test_failure_keeps_last_good_data(query_client: QueryClient) -> None:
    key = query_key("system-health")

    async def ok() -> dict[str, int]:
        return {"cpu": 10}

    async def broken() -> dict[str, int]:
        raise ApiError(500, "Internal error")

    await query_client.fetch_query(key, ok)
    with pytest.raises(ApiError):
        await query_client.fetch_query(key, broken, force=True)

    state = query_client.get_query_state(key)
    assert state.status == "error"
    assert state.data == {"cpu": 10}
    assert isinstance(state.error, ApiError)


@pytest.mark.asyncio
async def test_fresh_data_served_without_request() -> None:
    now = {"t": 0.0}
    client = QueryClient(stale_time_s=30, clock=lambda: now["t"])
    calls = {"count": 0}

    async def fetch() -> int:
        calls["count"] += 1
        return calls["count"]

    key = query_key("alert-rules")
    try:
        assert await client.ensure_query_data(key, fetch) == 1
        now["t"] = 10.0
        assert await client.ensure_query_data(key, fetch) == 1
        now["t"] = 31.0
        assert await client.ensure_query_data(key, fetch) == 2
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_invalidation_refetches_only_observed_slots(query_client: QueryClient) -> None:
    calls = {"observed": 0, "unobserved": 0, "rules": 0}

    async def observed() -> str:
        calls["observed"] += 1
        return "observed"

    async def unobserved() -> str:
        calls["unobserved"] += 1
        return "unobserved"

    async def rules() -> str:
        calls["rules"] += 1
        return "rules"

    observed_key = query_key("anomalies", {"category": "COST"})
    unobserved_key = query_key("anomalies", {"category": "HEALTH"})
    rules_key = query_key("alert-rules")

    observer = QueryObserver(query_client, QueryDefinition(key=observed_key, fetch=observed)).mount()
    await query_client.fetch_query(unobserved_key, unobserved)
    await query_client.fetch_query(rules_key, rules)
    await query_client.wait_idle()

    refetches = query_client.invalidate_queries(query_key("anomalies"))
    assert len(refetches) == 1
    await query_client.wait_idle()

    assert calls == {"observed": 2, "unobserved": 1, "rules": 1}
    assert observer.is_success and not observer.state.invalidated
    assert query_client.get_query_state(unobserved_key).invalidated is True
    assert query_client.get_query_state(rules_key).invalidated is False
    observer.unmount()


@pytest.mark.asyncio
async def test_response_issued_before_invalidation_stays_stale(query_client: QueryClient) -> None:
    gate = asyncio.Event()

    async def fetch() -> str:
        await gate.wait()
        return "pre-invalidation"

    key = query_key("anomaly-stats")
    pending = asyncio.create_task(query_client.fetch_query(key, fetch))
    await asyncio.sleep(0)
    query_client.invalidate_queries(query_key("anomaly-stats"))
    gate.set()
    await pending

    state = query_client.get_query_state(key)
    assert state.data == "pre-invalidation"
    assert state.invalidated is True


@pytest.mark.asyncio
async def test_disabled_query_never_fetches(query_client: QueryClient) -> None:
    calls = {"count": 0}

    async def fetch() -> str:
        calls["count"] += 1
        return "detail"

    observer = QueryObserver(
        query_client,
        QueryDefinition(key=query_key("anomaly", None), fetch=fetch, refetch_interval_s=0.01, enabled=False),
    )
    async with observer:
        await asyncio.sleep(0.03)
        await observer.refetch()
        assert observer.is_loading is False
        assert observer.status == "idle"
    assert calls["count"] == 0


@pytest.mark.asyncio
async def test_unmount_stops_refetch_timer(query_client: QueryClient) -> None:
    calls = {"count": 0}

    async def fetch() -> int:
        calls["count"] += 1
        return calls["count"]

    observer = QueryObserver(
        query_client,
        QueryDefinition(key=query_key("ai-usage-realtime"), fetch=fetch, refetch_interval_s=0.01),
    ).mount()
    await asyncio.sleep(0.05)
    observer.unmount()
    seen = calls["count"]
    assert seen >= 2

    await asyncio.sleep(0.05)
    assert calls["count"] == seen
    assert observer.is_mounted is False


@pytest.mark.asyncio
async def test_clear_unmounts_observers_and_forgets_slots() -> None:
    client = QueryClient()

    async def fetch() -> str:
        return "value"

    observer = QueryObserver(
        client, QueryDefinition(key=query_key("system-health"), fetch=fetch, refetch_interval_s=60)
    ).mount()
    await client.wait_idle()
    assert client.keys() == [query_key("system-health")]

    await client.aclose()
    assert observer.is_mounted is False
    assert client.keys() == []


@pytest.mark.asyncio
async def test_transient_failures_are_retried() -> None:
    client = QueryClient(retry_policy=RetryPolicy(max_attempts=2, backoff_ms=1))
    calls = {"count": 0}

    async def flaky() -> str:
        calls["count"] += 1
        if calls["count"] < 2:
            raise ApiTransportError("connection reset")
        return "ok"

    try:
        assert await client.fetch_query(query_key("error-rates"), flaky) == "ok"
        assert calls["count"] == 2
        assert counters_snapshot()["query_retries_total"] == 1
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    client = QueryClient(retry_policy=RetryPolicy(max_attempts=3, backoff_ms=1))
    calls = {"count": 0}

    async def missing() -> str:
        calls["count"] += 1
        raise ApiError(404, "Anomaly not found")

    try:
        with pytest.raises(ApiError):
            await client.fetch_query(query_key("anomaly", "missing"), missing)
        assert calls["count"] == 1
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_distinct_parameters_never_share_a_slot() -> None:
    client = QueryClient(stale_time_s=60)
    calls: list[int] = []

    def trends(days: int):
        async def fetch() -> list[int]:
            calls.append(days)
            return [days]

        return fetch

    try:
        await client.fetch_query(query_key("ai-usage-trends", 7), trends(7))
        assert client.is_fresh(query_key("ai-usage-trends", 7))
        assert not client.is_fresh(query_key("ai-usage-trends", 30))
        assert await client.ensure_query_data(query_key("ai-usage-trends", 30), trends(30)) == [30]
        assert calls == [7, 30]
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_refetch_interrupted_by_clear_returns_quietly(query_client: QueryClient) -> None:
    gate = asyncio.Event()

    async def fetch() -> str:
        await gate.wait()
        return "late"

    observer = QueryObserver(query_client, QueryDefinition(key=query_key("system-health"), fetch=fetch))
    pending = asyncio.create_task(observer.refetch())
    await asyncio.sleep(0)
    assert observer.is_fetching

    # Teardown cancels the request; the caller of refetch() sees no exception.
    query_client.clear()
    state = await pending

    assert state.status == "idle"
    assert observer.is_error is False
    assert query_client.keys() == []


@pytest.mark.asyncio
async def test_cancelling_the_caller_still_propagates(query_client: QueryClient) -> None:
    gate = asyncio.Event()

    async def fetch() -> str:
        await gate.wait()
        return "late"

    observer = QueryObserver(query_client, QueryDefinition(key=query_key("system-health"), fetch=fetch))
    pending = asyncio.create_task(observer.refetch())
    await asyncio.sleep(0)
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    # The shared request survives its caller and still settles.
    gate.set()
    await query_client.wait_idle()
    assert query_client.get_query_data(query_key("system-health")) == "late"
