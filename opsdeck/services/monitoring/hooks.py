from __future__ import annotations

from typing import Any

from opsdeck.core.config import Settings, get_settings
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
    EndpointErrorRate,
    EndpointLatency,
    InfrastructureMetrics,
    RealtimeUsageStats,
    SlowQuery,
    SystemHealth,
)
from opsdeck.services.monitoring.api import MonitoringApi
from opsdeck.services.query import (
    Mutation,
    MutationDefinition,
    QueryClient,
    QueryDefinition,
    QueryObserver,
    query_key,
)
from opsdeck.services.query.mutation import ErrorCallback, SuccessCallback


# Root keys; mutations invalidate by these prefixes.
AI_USAGE_SUMMARY = "ai-usage-summary"
AI_USAGE_REALTIME = "ai-usage-realtime"
AI_COST_BREAKDOWN = "ai-cost-breakdown"
AI_USAGE_TRENDS = "ai-usage-trends"
AI_GLOBAL_COST = "ai-global-cost"
INFRASTRUCTURE_METRICS = "infrastructure-metrics"
API_LATENCY = "api-latency"
ERROR_RATES = "error-rates"
SYSTEM_HEALTH = "system-health"
SLOW_QUERIES = "slow-queries"
ANOMALIES = "anomalies"
ANOMALY_STATS = "anomaly-stats"
ANOMALY_RULES = "anomaly-rules"
ANOMALY = "anomaly"
ALERT_RULES = "alert-rules"
ALERT_HISTORY = "alert-history"
ASSISTANT_SUGGESTIONS = "monitoring-assistant-suggestions"

ANOMALY_MUTATION_TARGETS = (query_key(ANOMALIES), query_key(ANOMALY_STATS))
ALERT_RULE_MUTATION_TARGETS = (query_key(ALERT_RULES),)


class MonitoringHooks:
    """One read or write hook per monitoring API operation.

    Read hooks return unmounted ``QueryObserver`` objects; write hooks return
    ``Mutation`` objects. Both share the injected ``QueryClient``, so
    identical reads from different views share a slot and its request.
    """

    def __init__(self, client: QueryClient, api: MonitoringApi, settings: Settings | None = None) -> None:
        self.client = client
        self.api = api
        self._settings = settings or get_settings()

    def _observe(self, definition: QueryDefinition[Any]) -> QueryObserver[Any]:
        return QueryObserver(self.client, definition)

    def _mutation(
        self,
        definition: MutationDefinition[Any, Any],
        on_success: SuccessCallback | None,
        on_error: ErrorCallback | None,
    ) -> Mutation[Any, Any]:
        return Mutation(self.client, definition, on_success=on_success, on_error=on_error)

    # -- AI monitoring --------------------------------------------------------

    def ai_usage_summary(self, period: str = "day") -> QueryObserver[AIUsageSummary]:
        return self._observe(
            QueryDefinition(
                key=query_key(AI_USAGE_SUMMARY, period),
                fetch=lambda: self.api.usage_summary(period),
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )

    def realtime_usage_stats(self) -> QueryObserver[RealtimeUsageStats]:
        return self._observe(
            QueryDefinition(
                key=query_key(AI_USAGE_REALTIME),
                fetch=self.api.realtime_usage,
                refetch_interval_s=self._settings.refetch_realtime_s,
            )
        )

    def ai_cost_breakdown(self, period: str = "month") -> QueryObserver[AICostBreakdown]:
        return self._observe(
            QueryDefinition(
                key=query_key(AI_COST_BREAKDOWN, period),
                fetch=lambda: self.api.cost_breakdown(period),
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )

    def ai_usage_trends(self, days: int = 30) -> QueryObserver[list[AIUsageTrend]]:
        return self._observe(
            QueryDefinition(
                key=query_key(AI_USAGE_TRENDS, days),
                fetch=lambda: self.api.usage_trends(days),
            )
        )

    def global_cost_breakdown(self, period: str = "month") -> QueryObserver[AICostBreakdown]:
        return self._observe(
            QueryDefinition(
                key=query_key(AI_GLOBAL_COST, period),
                fetch=lambda: self.api.global_cost_breakdown(period),
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )

    # -- Infrastructure -------------------------------------------------------

    def infrastructure_metrics(self) -> QueryObserver[InfrastructureMetrics]:
        return self._observe(
            QueryDefinition(
                key=query_key(INFRASTRUCTURE_METRICS),
                fetch=self.api.infrastructure,
                refetch_interval_s=self._settings.refetch_fast_s,
            )
        )

    def api_latency_stats(self) -> QueryObserver[list[EndpointLatency]]:
        return self._observe(
            QueryDefinition(
                key=query_key(API_LATENCY),
                fetch=self.api.latency,
                refetch_interval_s=self._settings.refetch_fast_s,
            )
        )

    def error_rates(self) -> QueryObserver[list[EndpointErrorRate]]:
        return self._observe(
            QueryDefinition(
                key=query_key(ERROR_RATES),
                fetch=self.api.error_rates,
                refetch_interval_s=self._settings.refetch_fast_s,
            )
        )

    def system_health(self) -> QueryObserver[SystemHealth]:
        return self._observe(
            QueryDefinition(
                key=query_key(SYSTEM_HEALTH),
                fetch=self.api.system_health,
                refetch_interval_s=self._settings.refetch_realtime_s,
            )
        )

    def slow_queries(self, limit: int = 50, min_duration: int = 100) -> QueryObserver[list[SlowQuery]]:
        return self._observe(
            QueryDefinition(
                key=query_key(SLOW_QUERIES, limit, min_duration),
                fetch=lambda: self.api.slow_queries(limit, min_duration),
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )

    # -- Anomalies ------------------------------------------------------------

    def anomalies(self, filters: AnomalyFilters | None = None) -> QueryObserver[list[Anomaly]]:
        filters = filters or AnomalyFilters()
        return self._observe(
            QueryDefinition(
                key=query_key(ANOMALIES, filters),
                fetch=lambda: self.api.anomalies(filters),
                refetch_interval_s=self._settings.refetch_fast_s,
            )
        )

    def anomaly_stats(self) -> QueryObserver[AnomalyStats]:
        return self._observe(
            QueryDefinition(
                key=query_key(ANOMALY_STATS),
                fetch=self.api.anomaly_stats,
                refetch_interval_s=self._settings.refetch_fast_s,
            )
        )

    def anomaly_rules(self) -> QueryObserver[list[AnomalyRule]]:
        return self._observe(QueryDefinition(key=query_key(ANOMALY_RULES), fetch=self.api.anomaly_rules))

    def anomaly_detail(self, anomaly_id: str | None) -> QueryObserver[Anomaly]:
        # Without an id there is nothing to fetch.
        return self._observe(
            QueryDefinition(
                key=query_key(ANOMALY, anomaly_id),
                fetch=lambda: self.api.anomaly(str(anomaly_id)),
                enabled=bool(anomaly_id),
            )
        )

    def acknowledge_anomaly(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[str, str | None]:
        return self._mutation(
            MutationDefinition(
                name="acknowledge_anomaly",
                fn=self.api.acknowledge_anomaly,
                invalidates=ANOMALY_MUTATION_TARGETS,
            ),
            on_success,
            on_error,
        )

    def resolve_anomaly(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[tuple[str, str | None], str | None]:
        # Variables are (anomaly_id, resolution text or None).
        async def _resolve(variables: tuple[str, str | None]) -> str | None:
            anomaly_id, resolution = variables
            return await self.api.resolve_anomaly(anomaly_id, resolution)

        return self._mutation(
            MutationDefinition(name="resolve_anomaly", fn=_resolve, invalidates=ANOMALY_MUTATION_TARGETS),
            on_success,
            on_error,
        )

    def mark_false_positive(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[str, str | None]:
        return self._mutation(
            MutationDefinition(
                name="mark_false_positive",
                fn=self.api.mark_false_positive,
                invalidates=ANOMALY_MUTATION_TARGETS,
            ),
            on_success,
            on_error,
        )

    def run_anomaly_detection(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[None, str | None]:
        # Created anomalies are only observable by re-reading the list.
        return self._mutation(
            MutationDefinition(
                name="run_anomaly_detection",
                fn=lambda _variables: self.api.run_detection(),
                invalidates=ANOMALY_MUTATION_TARGETS,
            ),
            on_success,
            on_error,
        )

    # -- Alerts ---------------------------------------------------------------

    def alert_rules(self) -> QueryObserver[list[AlertRule]]:
        return self._observe(QueryDefinition(key=query_key(ALERT_RULES), fetch=self.api.alert_rules))

    def create_alert_rule(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[AlertRuleInput, AlertRule]:
        return self._mutation(
            MutationDefinition(
                name="create_alert_rule",
                fn=self.api.create_alert_rule,
                invalidates=ALERT_RULE_MUTATION_TARGETS,
            ),
            on_success,
            on_error,
        )

    def update_alert_rule(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[tuple[str, AlertRuleInput], str | None]:
        # Variables are (rule_id, partial rule).
        async def _update(variables: tuple[str, AlertRuleInput]) -> str | None:
            rule_id, data = variables
            return await self.api.update_alert_rule(rule_id, data)

        return self._mutation(
            MutationDefinition(name="update_alert_rule", fn=_update, invalidates=ALERT_RULE_MUTATION_TARGETS),
            on_success,
            on_error,
        )

    def delete_alert_rule(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[str, str | None]:
        return self._mutation(
            MutationDefinition(
                name="delete_alert_rule",
                fn=self.api.delete_alert_rule,
                invalidates=ALERT_RULE_MUTATION_TARGETS,
            ),
            on_success,
            on_error,
        )

    def test_alert(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[str, AlertTestResult]:
        return self._mutation(
            MutationDefinition(name="test_alert", fn=self.api.test_alert),
            on_success,
            on_error,
        )

    def alert_history(self, filters: AlertHistoryFilters | None = None) -> QueryObserver[list[AlertHistory]]:
        filters = filters or AlertHistoryFilters()
        return self._observe(
            QueryDefinition(
                key=query_key(ALERT_HISTORY, filters),
                fetch=lambda: self.api.alert_history(filters),
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )

    def send_daily_digest(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[None, str | None]:
        return self._mutation(
            MutationDefinition(name="send_daily_digest", fn=lambda _variables: self.api.send_daily_digest()),
            on_success,
            on_error,
        )

    # -- Assistant ------------------------------------------------------------

    def assistant_chat(
        self,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Mutation[ChatRequest, ChatResponse]:
        return self._mutation(
            MutationDefinition(name="assistant_chat", fn=self.api.assistant_chat),
            on_success,
            on_error,
        )

    def assistant_suggestions(self) -> QueryObserver[AssistantSuggestions]:
        return self._observe(
            QueryDefinition(
                key=query_key(ASSISTANT_SUGGESTIONS),
                fetch=self.api.assistant_suggestions,
                refetch_interval_s=self._settings.refetch_standard_s,
            )
        )
