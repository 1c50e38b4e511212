from __future__ import annotations

from enum import Enum

from opsdeck.domain.schemas import EndpointErrorRate, EndpointLatency, SystemHealth


class HealthBand(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


def system_health_band(health: SystemHealth) -> HealthBand:
    if (
        health.memory_usage_percent > 90
        or health.cpu_usage_percent > 90
        or health.event_loop_lag_ms > 100
    ):
        return HealthBand.CRITICAL
    if (
        health.memory_usage_percent > 75
        or health.cpu_usage_percent > 75
        or health.event_loop_lag_ms > 50
    ):
        return HealthBand.WARNING
    return HealthBand.HEALTHY


def _band(value: float, warning: float, critical: float) -> HealthBand:
    if value > critical:
        return HealthBand.CRITICAL
    if value > warning:
        return HealthBand.WARNING
    return HealthBand.HEALTHY


def event_loop_lag_band(lag_ms: float) -> HealthBand:
    return _band(lag_ms, 50, 100)


def p95_band(latency: EndpointLatency) -> HealthBand:
    return _band(latency.p95_ms, 500, 1000)


def p99_band(latency: EndpointLatency) -> HealthBand:
    return _band(latency.p99_ms, 1000, 2000)


def error_rate_band(errors: EndpointErrorRate) -> HealthBand:
    # errorRate is already a percentage.
    return _band(errors.error_rate, 5, 10)


def slow_query_band(duration_ms: float) -> HealthBand:
    return _band(duration_ms, 500, 1000)


def failing_endpoints(errors: list[EndpointErrorRate]) -> list[EndpointErrorRate]:
    return [row for row in errors if row.error_rate > 0]


def format_ms(ms: float) -> str:
    if ms < 1000:
        return f"{round(ms)}ms"
    return f"{ms / 1000:.2f}s"


def format_megabytes(mb: float) -> str:
    if mb < 1024:
        return f"{round(mb)}MB"
    return f"{mb / 1024:.2f}GB"


def format_uptime(seconds: float) -> str:
    total = int(seconds)
    days = total // 86400
    hours = (total % 86400) // 3600
    minutes = (total % 3600) // 60
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def truncate_query(sql: str, limit: int = 500) -> str:
    if len(sql) > limit:
        return f"{sql[:limit]}..."
    return sql
