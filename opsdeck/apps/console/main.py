from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable

import httpx
from rich.console import Console

from opsdeck.apps.console import render
from opsdeck.apps.console.pages import (
    AlertsPage,
    AnomaliesPage,
    CostsPage,
    DashboardPage,
    InfrastructurePage,
    Page,
    UsagePage,
)
from opsdeck.core.config import Settings, get_settings
from opsdeck.domain.schemas import AnomalyFilters
from opsdeck.services.assistant.session import AssistantSession
from opsdeck.services.http import ApiHttpClient
from opsdeck.services.monitoring.api import MonitoringApi
from opsdeck.services.monitoring.hooks import MonitoringHooks
from opsdeck.services.query import QueryClient


console = Console()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ops_console", description="Operations monitoring console")
    parser.add_argument("--base-url", default=None, help="Override OPSDECK_API_BASE_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Usage, cost, health and anomaly overview")
    usage = sub.add_parser("usage", help="AI usage summary and daily trend")
    usage.add_argument("--period", default="day", choices=["day", "week", "month"])
    usage.add_argument("--days", type=int, default=30)
    sub.add_parser("costs", help="Cost breakdown, thresholds and projection")
    sub.add_parser("infra", help="Latency, error rates, system health, slow queries")

    anomalies = sub.add_parser("anomalies", help="List anomalies")
    anomalies.add_argument("--category", default=None)
    anomalies.add_argument("--severity", default=None)
    anomalies.add_argument("--tenant-id", default=None)

    ack = sub.add_parser("ack", help="Acknowledge an open anomaly")
    ack.add_argument("anomaly_id")
    resolve = sub.add_parser("resolve", help="Resolve an acknowledged anomaly")
    resolve.add_argument("anomaly_id")
    resolve.add_argument("--resolution", default=None)
    false_positive = sub.add_parser("false-positive", help="Mark an anomaly as a false positive")
    false_positive.add_argument("anomaly_id")
    sub.add_parser("detect", help="Run anomaly detection now")

    sub.add_parser("alerts", help="Alert rules and delivery history")
    test_alert = sub.add_parser("test-alert", help="Send a test notification for a rule")
    test_alert.add_argument("rule_id")
    sub.add_parser("digest", help="Send the daily digest")

    ask = sub.add_parser("ask", help="Ask the monitoring assistant")
    ask.add_argument("message", nargs="+")
    return parser


async def _show(client: QueryClient, page: Page, draw: Callable[[Console, Page], None]) -> int:
    # One-shot render: mount, let the initial reads settle, draw, unmount.
    async with page:
        await client.wait_idle()
        draw(console, page)
    return 0


async def _anomaly_action(page: AnomaliesPage, action: Callable[[], Awaitable[bool]]) -> int:
    ok = await action()
    render.render_status(console, page.last_message or "Done", page.action_error)
    return 0 if ok else 1


async def _dispatch(args: argparse.Namespace, client: QueryClient, hooks: MonitoringHooks) -> int:
    command = args.command
    if command == "dashboard":
        return await _show(client, DashboardPage(hooks), render.render_dashboard)
    if command == "usage":
        return await _show(client, UsagePage(hooks, period=args.period, trend_days=args.days), render.render_usage)
    if command == "costs":
        return await _show(client, CostsPage(hooks), render.render_costs)
    if command == "infra":
        return await _show(client, InfrastructurePage(hooks), render.render_infrastructure)
    if command == "anomalies":
        filters = AnomalyFilters(category=args.category, severity=args.severity, tenant_id=args.tenant_id)
        return await _show(client, AnomaliesPage(hooks, filters), render.render_anomalies)

    if command in {"ack", "resolve", "false-positive", "detect"}:
        page = AnomaliesPage(hooks)
        if command == "ack":
            return await _anomaly_action(page, lambda: page.acknowledge(args.anomaly_id))
        if command == "resolve":
            return await _anomaly_action(page, lambda: page.resolve(args.anomaly_id, args.resolution))
        if command == "false-positive":
            return await _anomaly_action(page, lambda: page.mark_false_positive(args.anomaly_id))
        return await _anomaly_action(page, page.run_detection)

    if command == "alerts":
        return await _show(client, AlertsPage(hooks), render.render_alerts)
    if command == "test-alert":
        alerts = AlertsPage(hooks)
        result = await alerts.test(args.rule_id)
        if result is None:
            render.render_status(console, None, alerts.action_error)
            return 1
        render.render_status(console, result.message, None if result.success else result.message)
        return 0 if result.success else 1
    if command == "digest":
        alerts = AlertsPage(hooks)
        ok = await alerts.send_digest()
        render.render_status(console, alerts.last_message or "Daily digest sent", alerts.action_error)
        return 0 if ok else 1

    if command == "ask":
        session = AssistantSession(hooks.assistant_chat())
        reply = await session.send(" ".join(args.message))
        for message in session.messages:
            render.render_message(console, message)
        if session.suggested_follow_ups:
            console.print("[dim]Try next:[/] " + " | ".join(session.suggested_follow_ups))
        return 0 if reply is not None and session.conversation_id else 1

    raise ValueError(f"Unknown command: {command}")


async def run(
    args: argparse.Namespace,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    settings = settings or get_settings()
    if args.base_url:
        settings = settings.model_copy(update={"api_base_url": args.base_url})
    client = QueryClient()
    async with ApiHttpClient.from_settings(settings, transport=transport) as http:
        hooks = MonitoringHooks(client, MonitoringApi(http), settings)
        try:
            return await _dispatch(args, client, hooks)
        finally:
            await client.aclose()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except Exception as exc:  # noqa: BLE001 - one-line failure for operators
        print(f"ops_console failed: {exc}", file=sys.stderr)
        return 1
