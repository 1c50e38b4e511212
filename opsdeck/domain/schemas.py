from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class ApiModel(BaseModel):
    # Accept camelCase wire names, expose snake_case attributes, ignore unknown server fields.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        # Serialize with wire names and without unset optionals for request bodies.
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DataEnvelope(BaseModel, Generic[T]):
    # Every read endpoint wraps its payload in {"data": ...}.
    data: T


# ---------------------------------------------------------------------------
# AI usage and cost
# ---------------------------------------------------------------------------


class ToolUsage(ApiModel):
    tool_id: str
    calls: int
    cost: float


class ModelUsage(ApiModel):
    model: str
    calls: int
    cost: float


class AIUsageSummary(ApiModel):
    total_calls: int
    total_tokens: int
    total_cost: float
    avg_latency_ms: float
    success_rate: float
    top_tools: list[ToolUsage] = Field(default_factory=list)
    top_models: list[ModelUsage] = Field(default_factory=list)


class AIUsageTrend(ApiModel):
    date: str
    calls: int
    tokens: int
    cost: float


class UsageWindow(ApiModel):
    calls: int
    tokens: int
    cost: float


class RealtimeUsageStats(ApiModel):
    last_5_minutes: UsageWindow = Field(alias="last5Minutes")
    last_1_hour: UsageWindow = Field(alias="last1Hour")
    today: UsageWindow
    active_tools: list[str] = Field(default_factory=list)


class ToolCost(ApiModel):
    tool_id: str
    cost: float
    percentage: float


class ModelCost(ApiModel):
    model: str
    cost: float
    percentage: float


class TenantCost(ApiModel):
    tenant_id: str
    cost: float
    percentage: float


class AICostBreakdown(ApiModel):
    by_tool: list[ToolCost] = Field(default_factory=list)
    by_model: list[ModelCost] = Field(default_factory=list)
    by_tenant: list[TenantCost] = Field(default_factory=list)
    total: float


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


class EndpointLatency(ApiModel):
    endpoint: str
    avg_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float
    count: int


class EndpointErrorRate(ApiModel):
    endpoint: str
    error_count: int
    total_count: int
    error_rate: float


class SystemHealth(ApiModel):
    memory_used_mb: float = Field(alias="memoryUsedMB")
    memory_total_mb: float = Field(alias="memoryTotalMB")
    memory_usage_percent: float
    heap_used_mb: float = Field(alias="heapUsedMB")
    heap_total_mb: float = Field(alias="heapTotalMB")
    cpu_usage_percent: float
    event_loop_lag_ms: float
    uptime_seconds: float


class SlowQuery(ApiModel):
    id: str
    query: str
    duration_ms: float
    timestamp: datetime


class InfrastructureMetrics(ApiModel):
    latency: list[EndpointLatency] = Field(default_factory=list)
    errors: list[EndpointErrorRate] = Field(default_factory=list)
    system: SystemHealth
    slow_queries: list[SlowQuery] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Anomalies and alerting
# ---------------------------------------------------------------------------


class UserRef(ApiModel):
    id: int
    name: str
    email: str


class Anomaly(ApiModel):
    id: str
    type: str
    category: str
    severity: str
    status: str
    metric: str
    current_value: float
    expected_value: float
    deviation: float
    message: str
    tenant_id: str | None = None
    tool_id: str | None = None
    detected_at: datetime
    acknowledged_at: datetime | None = None
    acknowledged_by_user: UserRef | None = None
    resolved_at: datetime | None = None
    resolved_by_user: UserRef | None = None
    resolution: str | None = None


class AnomalyStats(ApiModel):
    total: int
    open: int
    acknowledged: int
    resolved: int
    false_positive: int
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)


class AnomalyRule(ApiModel):
    type: str
    category: str
    metric: str
    method: str
    severity: str
    description: str


class AnomalyFilters(ApiModel):
    category: str | None = None
    severity: str | None = None
    tenant_id: str | None = None


class AlertRule(ApiModel):
    id: str
    name: str
    description: str | None = None
    enabled: bool
    severity: list[str] = Field(default_factory=list)
    category: list[str] = Field(default_factory=list)
    channel: str
    recipients: list[str] = Field(default_factory=list)
    throttle_minutes: int
    created_at: datetime
    updated_at: datetime


class AlertRuleInput(ApiModel):
    # Partial rule payload for create and update calls.
    name: str | None = None
    description: str | None = None
    enabled: bool | None = None
    severity: list[str] | None = None
    category: list[str] | None = None
    channel: str | None = None
    recipients: list[str] | None = None
    throttle_minutes: int | None = None

    @classmethod
    def defaults(cls) -> "AlertRuleInput":
        # Starting values of the "new rule" form.
        return cls(
            name="",
            description="",
            enabled=True,
            severity=["CRITICAL", "HIGH"],
            category=["COST", "USAGE", "PERFORMANCE", "HEALTH"],
            channel="EMAIL",
            recipients=[],
            throttle_minutes=60,
        )

    @classmethod
    def from_rule(cls, rule: AlertRule) -> "AlertRuleInput":
        return cls(
            name=rule.name,
            description=rule.description,
            enabled=rule.enabled,
            severity=list(rule.severity),
            category=list(rule.category),
            channel=rule.channel,
            recipients=list(rule.recipients),
            throttle_minutes=rule.throttle_minutes,
        )


class AlertHistory(ApiModel):
    id: str
    rule_id: str
    anomaly_id: str
    channel: str
    recipient: str
    status: str
    sent_at: datetime
    error_message: str | None = None
    rule: AlertRule | None = None
    anomaly: Anomaly | None = None


class AlertHistoryFilters(ApiModel):
    rule_id: str | None = None
    status: str | None = None
    limit: int | None = None


class AlertTestResult(ApiModel):
    success: bool
    message: str


# ---------------------------------------------------------------------------
# Monitoring assistant
# ---------------------------------------------------------------------------


class MessageMetadata(ApiModel):
    tokens_used: int | None = None
    latency_ms: float | None = None


class AssistantMessage(ApiModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    metadata: MessageMetadata | None = None


class ChatRequest(ApiModel):
    message: str
    conversation_id: str | None = None


class ChatResponse(ApiModel):
    conversation_id: str
    message: AssistantMessage
    suggested_follow_ups: list[str] = Field(default_factory=list)


class SuggestionBasis(ApiModel):
    has_anomalies: bool = False
    has_cost_warning: bool = False
    has_performance_issues: bool = False


class AssistantSuggestions(ApiModel):
    suggestions: list[str] = Field(default_factory=list)
    based_on: SuggestionBasis = Field(default_factory=SuggestionBasis)
