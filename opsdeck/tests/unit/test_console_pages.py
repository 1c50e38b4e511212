from __future__ import annotations

import asyncio

import pytest
from rich.console import Console

from opsdeck.apps.console import render
from opsdeck.apps.console.cards import CardState, card_state, error_message
from opsdeck.apps.console.pages import CostsPage, DashboardPage, InfrastructurePage, UsagePage
from opsdeck.core.errors import ApiError
from opsdeck.services.costs.thresholds import CostBand, CostThresholds
from opsdeck.services.monitoring.health import HealthBand
from opsdeck.services.query import QueryClient, QueryDefinition, QueryObserver, query_key


@pytest.mark.asyncio
async def test_dashboard_bands(monitoring) -> None:
    async with DashboardPage(monitoring.hooks, CostThresholds(100.0, 150.0)) as page:
        await monitoring.client.wait_idle()
        assert page.cost_band is CostBand.WARNING
        assert page.health_band is HealthBand.HEALTHY
        assert page.summary.data.total_calls == 1200

        monitoring.state.month_to_date_cost = 150.0
        monitoring.state.system["cpuUsagePercent"] = 95.0
        await page.refresh()
        assert page.cost_band is CostBand.CRITICAL
        assert page.health_band is HealthBand.CRITICAL


@pytest.mark.asyncio
async def test_costs_page_projection(monitoring) -> None:
    monitoring.state.month_to_date_cost = 75.0
    monitoring.state.daily_costs = [6.0] * 30
    async with CostsPage(monitoring.hooks, CostThresholds(100.0, 150.0)) as page:
        await monitoring.client.wait_idle()
        assert page.band is CostBand.OK
        assert page.percent_of_warning == 75.0
        assert page.percent_of_critical == 50.0
        assert page.projected_monthly == 180.0
        assert page.projected_band is CostBand.CRITICAL


@pytest.mark.asyncio
async def test_infrastructure_page(monitoring) -> None:
    async with InfrastructurePage(monitoring.hooks) as page:
        await monitoring.client.wait_idle()
        assert page.health_band is HealthBand.HEALTHY
        assert [row.endpoint for row in page.failing_endpoints] == ["POST /api/ai/chat"]
        assert page.slow_queries.data[0].duration_ms == 640.0


@pytest.mark.asyncio
async def test_pages_render_without_errors(monitoring) -> None:
    console = Console(record=True, width=160)
    pages = [
        (DashboardPage(monitoring.hooks), render.render_dashboard),
        (UsagePage(monitoring.hooks), render.render_usage),
        (CostsPage(monitoring.hooks), render.render_costs),
        (InfrastructurePage(monitoring.hooks), render.render_infrastructure),
    ]
    for page, draw in pages:
        async with page:
            await monitoring.client.wait_idle()
            draw(console, page)

    output = console.export_text()
    assert "Operations Dashboard" in output
    assert "ai-assistant" in output
    assert "POST /api/ai/chat" in output


@pytest.mark.asyncio
async def test_card_states(query_client: QueryClient) -> None:
    gate = asyncio.Event()
    failure = ApiError(500, "Upstream timeout")
    results: list[object] = [failure, [], ["row"], failure]

    async def fetch() -> object:
        await gate.wait()
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    observer = QueryObserver(query_client, QueryDefinition(key=query_key("slow-queries", 50, 100), fetch=fetch))
    assert card_state(observer) is CardState.EMPTY

    observer.mount()
    await asyncio.sleep(0)
    assert card_state(observer) is CardState.LOADING
    gate.set()
    await query_client.wait_idle()
    assert card_state(observer) is CardState.ERROR

    await observer.refetch()
    assert card_state(observer) is CardState.EMPTY

    await observer.refetch()
    assert card_state(observer) is CardState.READY

    # A later failure keeps the last good rows on screen.
    await observer.refetch()
    assert observer.is_error
    assert card_state(observer) is CardState.READY
    observer.unmount()


def test_error_message_prefers_api_message() -> None:
    assert error_message(ApiError(500, "Upstream timeout")) == "Upstream timeout"
    assert error_message(RuntimeError("boom")) == "boom"
    assert error_message(None) == "Failed to load data"
    assert error_message(RuntimeError(""), "Action failed") == "Action failed"
