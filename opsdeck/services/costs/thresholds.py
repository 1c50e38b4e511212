from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from opsdeck.core.config import Settings, get_settings


class CostBand(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class CostThresholds:
    # Single source for monthly spend bands; mirrors the server's alerting configuration.
    warning_monthly_usd: float
    critical_monthly_usd: float

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CostThresholds":
        settings = settings or get_settings()
        return cls(
            warning_monthly_usd=settings.cost_warning_monthly_usd,
            critical_monthly_usd=settings.cost_critical_monthly_usd,
        )


def percent_of_threshold(current_spend: float, threshold: float) -> float:
    if threshold <= 0:
        return float("inf") if current_spend > 0 else 0.0
    return (current_spend / threshold) * 100


def evaluate_cost_band(current_spend: float, warning_threshold: float, critical_threshold: float) -> CostBand:
    # Critical is checked first so spend above both thresholds never reads as a warning.
    if percent_of_threshold(current_spend, critical_threshold) >= 100:
        return CostBand.CRITICAL
    if percent_of_threshold(current_spend, warning_threshold) >= 100:
        return CostBand.WARNING
    return CostBand.OK


def evaluate_spend(current_spend: float, thresholds: CostThresholds) -> CostBand:
    return evaluate_cost_band(current_spend, thresholds.warning_monthly_usd, thresholds.critical_monthly_usd)


def project_monthly_spend(daily_costs: Iterable[float], days_in_month: int = 30) -> float:
    # Mean daily cost over the trend window times a 30-day month.
    values = list(daily_costs)
    if not values:
        return 0.0
    return (sum(values) / len(values)) * days_in_month


def projected_band(projected_monthly: float, thresholds: CostThresholds) -> CostBand:
    # Projections only flag once they strictly exceed a threshold.
    if projected_monthly > thresholds.critical_monthly_usd:
        return CostBand.CRITICAL
    if projected_monthly > thresholds.warning_monthly_usd:
        return CostBand.WARNING
    return CostBand.OK
