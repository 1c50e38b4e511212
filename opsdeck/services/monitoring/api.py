from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from opsdeck.core.errors import ApiResponseError
from opsdeck.domain.schemas import (
    AICostBreakdown,
    AIUsageSummary,
    AIUsageTrend,
    AlertHistory,
    AlertHistoryFilters,
    AlertRule,
    AlertRuleInput,
    AlertTestResult,
    Anomaly,
    AnomalyFilters,
    AnomalyRule,
    AnomalyStats,
    AssistantSuggestions,
    ChatRequest,
    ChatResponse,
    DataEnvelope,
    EndpointErrorRate,
    EndpointLatency,
    InfrastructureMetrics,
    RealtimeUsageStats,
    SlowQuery,
    SystemHealth,
)
from opsdeck.services.http import ApiHttpClient


T = TypeVar("T")

_adapters: dict[Any, TypeAdapter[Any]] = {}


def _envelope_adapter(model: Any) -> TypeAdapter[Any]:
    # Build each envelope adapter once; pydantic schema generation is not free.
    adapter = _adapters.get(model)
    if adapter is None:
        adapter = TypeAdapter(DataEnvelope[model])
        _adapters[model] = adapter
    return adapter


def unwrap(payload: Any, model: Any) -> Any:
    # Validate a {"data": ...} envelope and return the typed payload.
    if not isinstance(payload, dict) or "data" not in payload:
        raise ApiResponseError("Response is missing the data envelope")
    try:
        return _envelope_adapter(model).validate_python(payload).data
    except ValidationError as exc:
        raise ApiResponseError(f"Malformed response payload: {exc}") from exc


def _ack_message(payload: Any) -> str | None:
    # Action endpoints answer {"message": "..."}; surface it for status lines.
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return None


class MonitoringApi:
    """Typed wrappers for the AI and infrastructure monitoring endpoints."""

    def __init__(self, http: ApiHttpClient) -> None:
        self._http = http

    # -- AI usage and cost ----------------------------------------------------

    async def usage_summary(self, period: str = "day") -> AIUsageSummary:
        payload = await self._http.get("/ai-monitoring/usage/summary", params={"period": period})
        return unwrap(payload, AIUsageSummary)

    async def realtime_usage(self) -> RealtimeUsageStats:
        payload = await self._http.get("/ai-monitoring/usage/realtime")
        return unwrap(payload, RealtimeUsageStats)

    async def usage_trends(self, days: int = 30) -> list[AIUsageTrend]:
        payload = await self._http.get("/ai-monitoring/usage/trends", params={"days": days})
        return unwrap(payload, list[AIUsageTrend])

    async def cost_breakdown(self, period: str = "month") -> AICostBreakdown:
        payload = await self._http.get("/ai-monitoring/costs/breakdown", params={"period": period})
        return unwrap(payload, AICostBreakdown)

    async def global_cost_breakdown(self, period: str = "month") -> AICostBreakdown:
        payload = await self._http.get("/ai-monitoring/costs/global", params={"period": period})
        return unwrap(payload, AICostBreakdown)

    # -- Infrastructure -------------------------------------------------------

    async def infrastructure(self) -> InfrastructureMetrics:
        payload = await self._http.get("/monitoring/infrastructure")
        return unwrap(payload, InfrastructureMetrics)

    async def latency(self) -> list[EndpointLatency]:
        payload = await self._http.get("/monitoring/infrastructure/latency")
        return unwrap(payload, list[EndpointLatency])

    async def error_rates(self) -> list[EndpointErrorRate]:
        payload = await self._http.get("/monitoring/infrastructure/errors")
        return unwrap(payload, list[EndpointErrorRate])

    async def system_health(self) -> SystemHealth:
        payload = await self._http.get("/monitoring/infrastructure/system")
        return unwrap(payload, SystemHealth)

    async def slow_queries(self, limit: int = 50, min_duration: int = 100) -> list[SlowQuery]:
        payload = await self._http.get(
            "/monitoring/infrastructure/slow-queries",
            params={"limit": limit, "minDuration": min_duration},
        )
        return unwrap(payload, list[SlowQuery])

    # -- Anomalies ------------------------------------------------------------

    async def anomalies(self, filters: AnomalyFilters | None = None) -> list[Anomaly]:
        params = filters.to_payload() if filters else None
        payload = await self._http.get("/monitoring/anomalies", params=params)
        return unwrap(payload, list[Anomaly])

    async def anomaly_stats(self) -> AnomalyStats:
        payload = await self._http.get("/monitoring/anomalies/stats")
        return unwrap(payload, AnomalyStats)

    async def anomaly_rules(self) -> list[AnomalyRule]:
        payload = await self._http.get("/monitoring/anomalies/rules")
        return unwrap(payload, list[AnomalyRule])

    async def anomaly(self, anomaly_id: str) -> Anomaly:
        payload = await self._http.get(f"/monitoring/anomalies/{anomaly_id}")
        return unwrap(payload, Anomaly)

    async def acknowledge_anomaly(self, anomaly_id: str) -> str | None:
        return _ack_message(await self._http.post(f"/monitoring/anomalies/{anomaly_id}/acknowledge"))

    async def resolve_anomaly(self, anomaly_id: str, resolution: str | None = None) -> str | None:
        body = {"resolution": resolution} if resolution is not None else {}
        return _ack_message(await self._http.post(f"/monitoring/anomalies/{anomaly_id}/resolve", json=body))

    async def mark_false_positive(self, anomaly_id: str) -> str | None:
        return _ack_message(await self._http.post(f"/monitoring/anomalies/{anomaly_id}/false-positive"))

    async def run_detection(self) -> str | None:
        return _ack_message(await self._http.post("/monitoring/anomalies/detect"))

    # -- Alerts ---------------------------------------------------------------

    async def alert_rules(self) -> list[AlertRule]:
        payload = await self._http.get("/monitoring/alerts/rules")
        return unwrap(payload, list[AlertRule])

    async def create_alert_rule(self, data: AlertRuleInput) -> AlertRule:
        payload = await self._http.post("/monitoring/alerts/rules", json=data.to_payload())
        return unwrap(payload, AlertRule)

    async def update_alert_rule(self, rule_id: str, data: AlertRuleInput) -> str | None:
        return _ack_message(await self._http.put(f"/monitoring/alerts/rules/{rule_id}", json=data.to_payload()))

    async def delete_alert_rule(self, rule_id: str) -> str | None:
        return _ack_message(await self._http.delete(f"/monitoring/alerts/rules/{rule_id}"))

    async def test_alert(self, rule_id: str) -> AlertTestResult:
        payload = await self._http.post(f"/monitoring/alerts/rules/{rule_id}/test")
        try:
            return AlertTestResult.model_validate(payload)
        except ValidationError as exc:
            raise ApiResponseError(f"Malformed test alert response: {exc}") from exc

    async def alert_history(self, filters: AlertHistoryFilters | None = None) -> list[AlertHistory]:
        params = filters.to_payload() if filters else None
        payload = await self._http.get("/monitoring/alerts/history", params=params)
        return unwrap(payload, list[AlertHistory])

    async def send_daily_digest(self) -> str | None:
        return _ack_message(await self._http.post("/monitoring/alerts/digest"))

    # -- Assistant ------------------------------------------------------------

    async def assistant_chat(self, request: ChatRequest) -> ChatResponse:
        payload = await self._http.post("/ai-monitoring/assistant/chat", json=request.to_payload())
        return unwrap(payload, ChatResponse)

    async def assistant_suggestions(self) -> AssistantSuggestions:
        payload = await self._http.get("/ai-monitoring/assistant/suggestions")
        return unwrap(payload, AssistantSuggestions)
