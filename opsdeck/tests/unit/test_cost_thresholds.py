from __future__ import annotations

import math

import pytest

from opsdeck.core.config import Settings
from opsdeck.services.costs.thresholds import (
    CostBand,
    CostThresholds,
    evaluate_cost_band,
    evaluate_spend,
    percent_of_threshold,
    project_monthly_spend,
    projected_band,
)


@pytest.mark.parametrize(
    ("spend", "band"),
    [
        (0.0, CostBand.OK),
        (50.0, CostBand.OK),
        (99.99, CostBand.OK),
        (100.0, CostBand.WARNING),
        (149.99, CostBand.WARNING),
        (150.0, CostBand.CRITICAL),
        (200.0, CostBand.CRITICAL),
    ],
)
def test_spend_bands(spend: float, band: CostBand) -> None:
    assert evaluate_cost_band(spend, 100.0, 150.0) is band


def test_thresholds_follow_settings() -> None:
    thresholds = CostThresholds.from_settings(Settings(cost_warning_monthly_usd=200, cost_critical_monthly_usd=400))
    assert evaluate_spend(250.0, thresholds) is CostBand.WARNING
    assert evaluate_spend(150.0, thresholds) is CostBand.OK


def test_percent_of_zero_threshold() -> None:
    assert percent_of_threshold(0.0, 0.0) == 0.0
    assert math.isinf(percent_of_threshold(1.0, 0.0))
    assert percent_of_threshold(75.0, 150.0) == 50.0


def test_monthly_projection() -> None:
    assert project_monthly_spend([]) == 0.0
    assert project_monthly_spend([4.0, 6.0]) == 150.0

    thresholds = CostThresholds(warning_monthly_usd=100.0, critical_monthly_usd=150.0)
    # Projections flag only when strictly above a threshold.
    assert projected_band(100.0, thresholds) is CostBand.OK
    assert projected_band(150.0, thresholds) is CostBand.WARNING
    assert projected_band(150.01, thresholds) is CostBand.CRITICAL
