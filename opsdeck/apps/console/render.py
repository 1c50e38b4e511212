from __future__ import annotations

from typing import Any, Callable

from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table

from opsdeck.apps.console.cards import CardState, card_state, error_message
from opsdeck.apps.console.pages import AlertsPage, AnomaliesPage, CostsPage, DashboardPage, InfrastructurePage, UsagePage
from opsdeck.domain.schemas import AssistantMessage
from opsdeck.services.costs.thresholds import CostBand
from opsdeck.services.monitoring.health import (
    HealthBand,
    error_rate_band,
    format_currency,
    format_megabytes,
    format_ms,
    format_uptime,
    p95_band,
    slow_query_band,
    truncate_query,
)
from opsdeck.services.query import QueryObserver


BAND_STYLES = {
    "ok": "green",
    "healthy": "green",
    "warning": "yellow",
    "critical": "red",
}

SEVERITY_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "blue",
}


def _styled(text: str, band: HealthBand | CostBand | None) -> str:
    style = BAND_STYLES.get(band.value, "white") if band is not None else "white"
    return f"[{style}]{text}[/]"


def card(title: str, observer: QueryObserver[Any], body: Callable[[Any], RenderableType]) -> Panel:
    # Every card renders one of four states from its query observer.
    state = card_state(observer)
    if state is CardState.LOADING:
        content: RenderableType = "[dim]Loading...[/]"
    elif state is CardState.ERROR:
        content = f"[red]{error_message(observer.error)}[/]"
    elif state is CardState.EMPTY:
        content = "[dim]No data available[/]"
    else:
        content = body(observer.data)
    return Panel(content, title=title, expand=True)


def render_dashboard(console: Console, page: DashboardPage) -> None:
    console.print("\n[bold blue]Operations Dashboard[/]\n")

    def _summary(summary: Any) -> RenderableType:
        table = Table.grid(padding=(0, 2))
        table.add_row("Calls", f"{summary.total_calls:,}")
        table.add_row("Tokens", f"{summary.total_tokens:,}")
        table.add_row("Cost", format_currency(summary.total_cost))
        table.add_row("Avg latency", format_ms(summary.avg_latency_ms))
        table.add_row("Success rate", f"{summary.success_rate:.1f}%")
        return table

    def _realtime(stats: Any) -> RenderableType:
        table = Table("Window", "Calls", "Tokens", "Cost")
        for label, window in (("5 min", stats.last_5_minutes), ("1 hour", stats.last_1_hour), ("Today", stats.today)):
            table.add_row(label, f"{window.calls:,}", f"{window.tokens:,}", format_currency(window.cost))
        return table

    def _costs(breakdown: Any) -> RenderableType:
        band = page.cost_band
        return f"Month to date: {_styled(format_currency(breakdown.total), band)} ({band.value if band else 'n/a'})"

    def _health(health: Any) -> RenderableType:
        band = page.health_band
        return (
            f"Status: {_styled(band.value if band else 'unknown', band)}\n"
            f"Memory {health.memory_usage_percent:.0f}%  CPU {health.cpu_usage_percent:.0f}%  "
            f"Event loop lag {format_ms(health.event_loop_lag_ms)}  Uptime {format_uptime(health.uptime_seconds)}"
        )

    def _anomalies(stats: Any) -> RenderableType:
        return (
            f"Open {stats.open}  Acknowledged {stats.acknowledged}  "
            f"Resolved {stats.resolved}  False positive {stats.false_positive}"
        )

    console.print(card("AI usage (today)", page.summary, _summary))
    console.print(card("Realtime usage", page.realtime, _realtime))
    console.print(card("AI cost", page.costs, _costs))
    console.print(card("System health", page.health, _health))
    console.print(card("Anomalies", page.anomaly_stats, _anomalies))


def render_usage(console: Console, page: UsagePage) -> None:
    console.print("\n[bold blue]AI Usage[/]\n")

    def _tools(summary: Any) -> RenderableType:
        table = Table(title="Top tools")
        table.add_column("Tool", style="cyan")
        table.add_column("Calls", justify="right")
        table.add_column("Cost", justify="right", style="green")
        for tool in summary.top_tools:
            table.add_row(tool.tool_id, f"{tool.calls:,}", format_currency(tool.cost))
        models = Table(title="Top models")
        models.add_column("Model", style="cyan")
        models.add_column("Calls", justify="right")
        models.add_column("Cost", justify="right", style="green")
        for model in summary.top_models:
            models.add_row(model.model, f"{model.calls:,}", format_currency(model.cost))
        grid = Table.grid(padding=(0, 4))
        grid.add_row(table, models)
        return grid

    def _trends(trends: Any) -> RenderableType:
        table = Table()
        table.add_column("Date", style="dim")
        table.add_column("Calls", justify="right")
        table.add_column("Tokens", justify="right")
        table.add_column("Cost", justify="right", style="green")
        for point in trends:
            table.add_row(point.date, f"{point.calls:,}", f"{point.tokens:,}", format_currency(point.cost))
        return table

    console.print(card("Usage summary", page.summary, _tools))
    console.print(card("Daily trend", page.trends, _trends))


def render_costs(console: Console, page: CostsPage) -> None:
    console.print("\n[bold blue]AI Costs[/]\n")

    def _breakdown(breakdown: Any) -> RenderableType:
        band = page.band
        lines = Table.grid(padding=(0, 2))
        lines.add_row("Month to date", _styled(format_currency(breakdown.total), band))
        lines.add_row("Warning threshold", f"{format_currency(page.thresholds.warning_monthly_usd)} ({page.percent_of_warning:.0f}%)")
        lines.add_row("Critical threshold", f"{format_currency(page.thresholds.critical_monthly_usd)} ({page.percent_of_critical:.0f}%)")
        lines.add_row("Projected (30 days)", _styled(format_currency(page.projected_monthly), page.projected_band))

        table = Table(title="By model")
        table.add_column("Model", style="cyan")
        table.add_column("Cost", justify="right", style="green")
        table.add_column("Share", justify="right")
        for row in breakdown.by_model:
            table.add_row(row.model, format_currency(row.cost), f"{row.percentage:.1f}%")
        tools = Table(title="By tool")
        tools.add_column("Tool", style="cyan")
        tools.add_column("Cost", justify="right", style="green")
        tools.add_column("Share", justify="right")
        for row in breakdown.by_tool:
            tools.add_row(row.tool_id, format_currency(row.cost), f"{row.percentage:.1f}%")
        grid = Table.grid(padding=(1, 4))
        grid.add_row(lines)
        grid.add_row(table, tools)
        return grid

    console.print(card("Cost breakdown", page.breakdown, _breakdown))


def render_infrastructure(console: Console, page: InfrastructurePage) -> None:
    console.print("\n[bold blue]Infrastructure[/]\n")

    def _metrics(metrics: Any) -> RenderableType:
        system = metrics.system
        band = page.health_band
        header = (
            f"Status: {_styled(band.value if band else 'unknown', band)}  "
            f"Memory {format_megabytes(system.memory_used_mb)}/{format_megabytes(system.memory_total_mb)}  "
            f"Heap {format_megabytes(system.heap_used_mb)}/{format_megabytes(system.heap_total_mb)}  "
            f"CPU {system.cpu_usage_percent:.0f}%"
        )
        latency = Table(title="Endpoint latency")
        latency.add_column("Endpoint", style="cyan")
        latency.add_column("Avg", justify="right")
        latency.add_column("p95", justify="right")
        latency.add_column("p99", justify="right")
        latency.add_column("Requests", justify="right")
        for row in metrics.latency:
            latency.add_row(
                row.endpoint,
                format_ms(row.avg_ms),
                _styled(format_ms(row.p95_ms), p95_band(row)),
                format_ms(row.p99_ms),
                f"{row.count:,}",
            )
        errors = Table(title="Failing endpoints")
        errors.add_column("Endpoint", style="cyan")
        errors.add_column("Errors", justify="right")
        errors.add_column("Rate", justify="right")
        for row in page.failing_endpoints:
            errors.add_row(row.endpoint, f"{row.error_count}/{row.total_count}", _styled(f"{row.error_rate:.1f}%", error_rate_band(row)))
        grid = Table.grid(padding=(1, 0))
        grid.add_row(header)
        grid.add_row(latency)
        grid.add_row(errors)
        return grid

    def _slow(queries: Any) -> RenderableType:
        table = Table()
        table.add_column("Duration", justify="right")
        table.add_column("Query")
        for row in queries:
            table.add_row(_styled(format_ms(row.duration_ms), slow_query_band(row.duration_ms)), truncate_query(row.query, 120))
        return table

    console.print(card("Infrastructure metrics", page.metrics, _metrics))
    console.print(card("Slow queries", page.slow_queries, _slow))


def render_anomalies(console: Console, page: AnomaliesPage) -> None:
    console.print("\n[bold blue]Anomalies[/]\n")

    def _list(anomalies: Any) -> RenderableType:
        table = Table()
        table.add_column("ID", style="dim")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Status")
        table.add_column("Message")
        table.add_column("Actions", style="cyan")
        for anomaly in anomalies:
            style = SEVERITY_STYLES.get(anomaly.severity, "white")
            actions = ", ".join(action.value for action in page.available_actions(anomaly))
            table.add_row(
                anomaly.id,
                f"[{style}]{anomaly.severity}[/]",
                anomaly.category,
                anomaly.status,
                anomaly.message,
                actions or "-",
            )
        return table

    def _stats(stats: Any) -> RenderableType:
        return (
            f"Total {stats.total}  Open {stats.open}  Acknowledged {stats.acknowledged}  "
            f"Resolved {stats.resolved}  False positive {stats.false_positive}"
        )

    console.print(card("Summary", page.stats, _stats))
    console.print(card("Anomalies", page.anomalies, _list))


def render_alerts(console: Console, page: AlertsPage) -> None:
    console.print("\n[bold blue]Alerts[/]\n")

    def _rules(rules: Any) -> RenderableType:
        table = Table()
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Enabled")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Channel")
        table.add_column("Throttle", justify="right")
        for rule in rules:
            table.add_row(
                rule.id,
                rule.name,
                "[green]yes[/]" if rule.enabled else "[dim]no[/]",
                ", ".join(rule.severity),
                ", ".join(rule.category),
                rule.channel,
                f"{rule.throttle_minutes}m",
            )
        return table

    def _history(history: Any) -> RenderableType:
        table = Table()
        table.add_column("Sent", style="dim")
        table.add_column("Rule")
        table.add_column("Channel")
        table.add_column("Recipient")
        table.add_column("Status")
        for row in history:
            status = f"[red]{row.status}[/]" if row.error_message else row.status
            table.add_row(
                row.sent_at.strftime("%Y-%m-%d %H:%M"),
                row.rule.name if row.rule else row.rule_id,
                row.channel,
                row.recipient,
                status,
            )
        return table

    console.print(card("Alert rules", page.rules, _rules))
    console.print(card("Alert history", page.history, _history))


def render_message(console: Console, message: AssistantMessage) -> None:
    speaker = "[bold cyan]you[/]" if message.role == "user" else "[bold green]assistant[/]"
    console.print(f"{speaker}: {message.content}")


def render_status(console: Console, message: str | None, error: str | None = None) -> None:
    if error:
        console.print(f"[red]Error:[/] {error}")
    elif message:
        console.print(f"[green]v[/] {message}")
