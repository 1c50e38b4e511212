from __future__ import annotations

import asyncio
import logging
from typing import Any

from opsdeck.apps.console.cards import error_message
from opsdeck.domain.schemas import (
    AICostBreakdown,
    AlertHistoryFilters,
    AlertRule,
    AlertRuleInput,
    AlertTestResult,
    Anomaly,
    AnomalyFilters,
)
from opsdeck.domain.state import AnomalyAction, allowed_actions
from opsdeck.services.costs.thresholds import (
    CostBand,
    CostThresholds,
    evaluate_spend,
    percent_of_threshold,
    project_monthly_spend,
    projected_band,
)
from opsdeck.services.monitoring.health import HealthBand, failing_endpoints, system_health_band
from opsdeck.services.monitoring.hooks import MonitoringHooks
from opsdeck.services.query import QueryObserver


logger = logging.getLogger(__name__)


class Page:
    """A set of read hooks mounted and unmounted together."""

    def __init__(self, hooks: MonitoringHooks) -> None:
        self.hooks = hooks
        self._observers: list[QueryObserver[Any]] = []
        self._mounted = False

    def _watch(self, observer: QueryObserver[Any]) -> QueryObserver[Any]:
        self._observers.append(observer)
        if self._mounted:
            observer.mount()
        return observer

    def _forget(self, observer: QueryObserver[Any]) -> None:
        observer.unmount()
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> list[QueryObserver[Any]]:
        return list(self._observers)

    def mount(self) -> "Page":
        self._mounted = True
        for observer in self._observers:
            observer.mount()
        return self

    def unmount(self) -> None:
        self._mounted = False
        for observer in self._observers:
            observer.unmount()

    async def refresh(self) -> None:
        await asyncio.gather(*(observer.refetch() for observer in self._observers))

    async def __aenter__(self) -> "Page":
        return self.mount()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.unmount()


class DashboardPage(Page):
    def __init__(self, hooks: MonitoringHooks, thresholds: CostThresholds | None = None) -> None:
        super().__init__(hooks)
        self.thresholds = thresholds or CostThresholds.from_settings()
        self.summary = self._watch(hooks.ai_usage_summary("day"))
        self.realtime = self._watch(hooks.realtime_usage_stats())
        self.costs = self._watch(hooks.ai_cost_breakdown("month"))
        self.health = self._watch(hooks.system_health())
        self.anomaly_stats = self._watch(hooks.anomaly_stats())

    @property
    def cost_band(self) -> CostBand | None:
        breakdown: AICostBreakdown | None = self.costs.data
        if breakdown is None:
            return None
        return evaluate_spend(breakdown.total, self.thresholds)

    @property
    def health_band(self) -> HealthBand | None:
        if self.health.data is None:
            return None
        return system_health_band(self.health.data)


class UsagePage(Page):
    def __init__(self, hooks: MonitoringHooks, *, period: str = "day", trend_days: int = 30) -> None:
        super().__init__(hooks)
        self.summary = self._watch(hooks.ai_usage_summary(period))
        self.realtime = self._watch(hooks.realtime_usage_stats())
        self.trends = self._watch(hooks.ai_usage_trends(trend_days))


class CostsPage(Page):
    def __init__(
        self,
        hooks: MonitoringHooks,
        thresholds: CostThresholds | None = None,
        *,
        period: str = "month",
        trend_days: int = 30,
    ) -> None:
        super().__init__(hooks)
        self.thresholds = thresholds or CostThresholds.from_settings()
        self.breakdown = self._watch(hooks.ai_cost_breakdown(period))
        self.trends = self._watch(hooks.ai_usage_trends(trend_days))

    @property
    def current_spend(self) -> float:
        breakdown: AICostBreakdown | None = self.breakdown.data
        return breakdown.total if breakdown is not None else 0.0

    @property
    def band(self) -> CostBand:
        return evaluate_spend(self.current_spend, self.thresholds)

    @property
    def percent_of_warning(self) -> float:
        return percent_of_threshold(self.current_spend, self.thresholds.warning_monthly_usd)

    @property
    def percent_of_critical(self) -> float:
        return percent_of_threshold(self.current_spend, self.thresholds.critical_monthly_usd)

    @property
    def projected_monthly(self) -> float:
        trends = self.trends.data or []
        return project_monthly_spend(point.cost for point in trends)

    @property
    def projected_band(self) -> CostBand:
        return projected_band(self.projected_monthly, self.thresholds)


class InfrastructurePage(Page):
    def __init__(self, hooks: MonitoringHooks, *, slow_query_limit: int = 50, min_duration_ms: int = 100) -> None:
        super().__init__(hooks)
        self.metrics = self._watch(hooks.infrastructure_metrics())
        self.slow_queries = self._watch(hooks.slow_queries(slow_query_limit, min_duration_ms))

    @property
    def health_band(self) -> HealthBand | None:
        if self.metrics.data is None:
            return None
        return system_health_band(self.metrics.data.system)

    @property
    def failing_endpoints(self) -> list[Any]:
        if self.metrics.data is None:
            return []
        return failing_endpoints(self.metrics.data.errors)


class AnomaliesPage(Page):
    """Anomaly list, stats and an optional detail view with lifecycle actions.

    Actions never change cached anomalies locally: each one calls the server
    and relies on invalidation to refetch. A successful action on the anomaly
    shown in the detail view closes it; a failed one leaves it open with
    ``action_error`` set.
    """

    def __init__(self, hooks: MonitoringHooks, filters: AnomalyFilters | None = None) -> None:
        super().__init__(hooks)
        self.filters = filters or AnomalyFilters()
        self.anomalies = self._watch(hooks.anomalies(self.filters))
        self.stats = self._watch(hooks.anomaly_stats())
        self.detail: QueryObserver[Anomaly] | None = None
        self.selected_id: str | None = None
        self.action_error: str | None = None
        self.last_message: str | None = None

        self._acknowledge = hooks.acknowledge_anomaly(on_success=self._after_action)
        self._resolve = hooks.resolve_anomaly(on_success=self._after_resolve)
        self._false_positive = hooks.mark_false_positive(on_success=self._after_action)
        self._detect = hooks.run_anomaly_detection()

    def select(self, anomaly_id: str | None) -> QueryObserver[Anomaly] | None:
        self.close_detail()
        if not anomaly_id:
            return None
        self.selected_id = anomaly_id
        self.detail = self._watch(self.hooks.anomaly_detail(anomaly_id))
        return self.detail

    def close_detail(self) -> None:
        if self.detail is not None:
            self._forget(self.detail)
        self.detail = None
        self.selected_id = None
        self.action_error = None

    def available_actions(self, anomaly: Anomaly) -> tuple[AnomalyAction, ...]:
        return allowed_actions(anomaly.status)

    def _after_action(self, message: str | None, anomaly_id: str) -> None:
        self.last_message = message
        if anomaly_id == self.selected_id:
            self.close_detail()

    def _after_resolve(self, message: str | None, variables: tuple[str, str | None]) -> None:
        self._after_action(message, variables[0])

    async def _run(self, mutation: Any, variables: Any) -> bool:
        self.action_error = None
        try:
            await mutation.mutate_async(variables)
        except Exception as exc:  # noqa: BLE001 - shown next to the action
            self.action_error = error_message(exc, "Action failed")
            logger.info("anomaly_action_failed name=%s error=%s", mutation.definition.name, exc)
            return False
        return True

    async def acknowledge(self, anomaly_id: str) -> bool:
        return await self._run(self._acknowledge, anomaly_id)

    async def resolve(self, anomaly_id: str, resolution: str | None = None) -> bool:
        # Blank resolution text is sent as no resolution at all.
        return await self._run(self._resolve, (anomaly_id, (resolution or "").strip() or None))

    async def mark_false_positive(self, anomaly_id: str) -> bool:
        return await self._run(self._false_positive, anomaly_id)

    async def run_detection(self) -> bool:
        ok = await self._run(self._detect, None)
        if ok:
            self.last_message = self._detect.data
        return ok


class AlertsPage(Page):
    """Alert rules, delivery history and the create/edit rule modal."""

    def __init__(self, hooks: MonitoringHooks, history_filters: AlertHistoryFilters | None = None) -> None:
        super().__init__(hooks)
        self.rules = self._watch(hooks.alert_rules())
        self.history = self._watch(hooks.alert_history(history_filters or AlertHistoryFilters(limit=50)))
        self.modal_open = False
        self.editing: AlertRule | None = None
        self.form: AlertRuleInput = AlertRuleInput.defaults()
        self.form_error: str | None = None
        self.action_error: str | None = None
        self.last_message: str | None = None

        self._create = hooks.create_alert_rule()
        self._update = hooks.update_alert_rule()
        self._delete = hooks.delete_alert_rule()
        self._test = hooks.test_alert()
        self._digest = hooks.send_daily_digest()

    @property
    def is_saving(self) -> bool:
        return self._create.is_pending or self._update.is_pending

    def open_create(self) -> None:
        self.editing = None
        self.form = AlertRuleInput.defaults()
        self.form_error = None
        self.modal_open = True

    def open_edit(self, rule: AlertRule) -> None:
        self.editing = rule
        self.form = AlertRuleInput.from_rule(rule)
        self.form_error = None
        self.modal_open = True

    def close_modal(self) -> None:
        self.modal_open = False
        self.editing = None
        self.form_error = None

    async def save(self) -> bool:
        # The modal closes only once the server accepted the rule.
        self.form_error = None
        try:
            if self.editing is not None:
                await self._update.mutate_async((self.editing.id, self.form))
            else:
                await self._create.mutate_async(self.form)
        except Exception as exc:  # noqa: BLE001 - kept on the open form
            self.form_error = error_message(exc, "Failed to save alert rule")
            return False
        self.close_modal()
        return True

    async def toggle(self, rule: AlertRule) -> bool:
        try:
            await self._update.mutate_async((rule.id, AlertRuleInput(enabled=not rule.enabled)))
        except Exception as exc:  # noqa: BLE001 - shown in the page banner
            self.action_error = error_message(exc, "Failed to update alert rule")
            return False
        return True

    async def delete(self, rule_id: str) -> bool:
        try:
            self.last_message = await self._delete.mutate_async(rule_id)
        except Exception as exc:  # noqa: BLE001 - shown in the page banner
            self.action_error = error_message(exc, "Failed to delete alert rule")
            return False
        return True

    async def test(self, rule_id: str) -> AlertTestResult | None:
        try:
            result = await self._test.mutate_async(rule_id)
        except Exception as exc:  # noqa: BLE001 - shown in the page banner
            self.action_error = error_message(exc, "Failed to send test alert")
            return None
        self.last_message = result.message
        return result

    async def send_digest(self) -> bool:
        try:
            self.last_message = await self._digest.mutate_async(None)
        except Exception as exc:  # noqa: BLE001 - shown in the page banner
            self.action_error = error_message(exc, "Failed to send daily digest")
            return False
        return True
