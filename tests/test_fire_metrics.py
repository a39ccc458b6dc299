"""
Tests for point-in-time FIRE metrics.
"""

import math

import pytest
from pydantic import ValidationError

from app.models.fire_metrics import (
    FireProjectionScenarios,
    FireScenario,
    calculate_fire_metrics,
    calculate_fire_number,
    calculate_planned_fire_metrics,
    calculate_progress_to_fi,
    get_default_scenarios,
)


class TestCalculateFireMetrics:
    """Test calculate_fire_metrics."""

    def test_standard_case(self):
        """500k net worth, 40k expenses, 4% withdrawal rate."""
        metrics = calculate_fire_metrics(500_000, 40_000, 4)

        assert metrics.fire_number == 1_000_000
        assert metrics.progress_to_fi == 50
        assert metrics.annual_allowance == 20_000
        assert abs(metrics.monthly_allowance - 20_000 / 12) < 0.01
        assert abs(metrics.daily_allowance - 20_000 / 365) < 0.01
        assert metrics.current_wr == 8
        assert metrics.years_of_expenses == 12.5

    def test_inputs_echoed(self):
        metrics = calculate_fire_metrics(500_000, 40_000, 4)

        assert metrics.current_net_worth == 500_000
        assert metrics.annual_expenses == 40_000
        assert metrics.withdrawal_rate == 4

    def test_progress_above_100_not_clamped(self):
        """FIRE already reached: progress exceeds 100."""
        metrics = calculate_fire_metrics(1_200_000, 40_000, 4)

        assert abs(metrics.progress_to_fi - 120) < 1e-9

    def test_zero_withdrawal_rate(self):
        """Zero withdrawal rate degrades to zeros."""
        for net_worth, expenses in [(500_000, 40_000), (0, 0), (-10_000, 25_000)]:
            metrics = calculate_fire_metrics(net_worth, expenses, 0)
            assert metrics.fire_number == 0
            assert metrics.progress_to_fi == 0
            assert metrics.annual_allowance == 0

    def test_zero_net_worth(self):
        """A brand-new portfolio yields zeros, never NaN or infinity."""
        metrics = calculate_fire_metrics(0, 40_000, 4)

        assert metrics.progress_to_fi == 0
        assert metrics.current_wr == 0
        assert metrics.years_of_expenses == 0
        assert metrics.annual_allowance == 0
        for value in metrics.model_dump().values():
            assert math.isfinite(value)

    def test_zero_expenses(self):
        metrics = calculate_fire_metrics(500_000, 0, 4)

        assert metrics.fire_number == 0
        assert metrics.progress_to_fi == 0
        assert metrics.current_wr == 0
        assert metrics.years_of_expenses == 0

    def test_malformed_input_rejected(self):
        """Non-numeric and non-finite values fail fast."""
        with pytest.raises(ValidationError):
            calculate_fire_metrics("lots", 40_000, 4)
        with pytest.raises(ValidationError):
            calculate_fire_metrics(float("nan"), 40_000, 4)
        with pytest.raises(ValidationError):
            calculate_fire_metrics(500_000, float("inf"), 4)

    def test_withdrawal_rate_out_of_range(self):
        with pytest.raises(ValidationError):
            calculate_fire_metrics(500_000, 40_000, -1)
        with pytest.raises(ValidationError):
            calculate_fire_metrics(500_000, 40_000, 150)

    def test_idempotent(self):
        assert calculate_fire_metrics(123_456.78, 34_567.89, 3.5) == calculate_fire_metrics(
            123_456.78, 34_567.89, 3.5
        )


class TestPlannedFireMetrics:
    """Test calculate_planned_fire_metrics."""

    def test_planned_expenses(self):
        planned = calculate_planned_fire_metrics(500_000, 30_000, 4)

        assert planned.planned_annual_expenses == 30_000
        assert planned.planned_fire_number == 750_000
        assert abs(planned.planned_progress_to_fi - 500_000 / 750_000 * 100) < 1e-9

    def test_planned_zero_withdrawal_rate(self):
        planned = calculate_planned_fire_metrics(500_000, 30_000, 0)

        assert planned.planned_fire_number == 0
        assert planned.planned_progress_to_fi == 0


class TestHelpers:
    """Test the FIRE number and progress helpers."""

    def test_calculate_fire_number(self):
        assert calculate_fire_number(40_000, 4) == 1_000_000
        assert calculate_fire_number(40_000, 0) == 0

    def test_calculate_progress_to_fi(self):
        assert calculate_progress_to_fi(250_000, 1_000_000) == 25
        assert calculate_progress_to_fi(250_000, 0) == 0


class TestDefaultScenarios:
    """Test default bear/base/bull scenarios."""

    def test_growth_ordering(self):
        scenarios = get_default_scenarios()

        assert scenarios.bull.growth_rate > scenarios.base.growth_rate > scenarios.bear.growth_rate

    def test_inflation_ordering(self):
        scenarios = get_default_scenarios()

        assert (
            scenarios.bear.inflation_rate
            > scenarios.base.inflation_rate
            > scenarios.bull.inflation_rate
        )

    def test_scenario_items_order(self):
        keys = [key for key, _ in get_default_scenarios().scenario_items()]

        assert keys == ["bear", "base", "bull"]

    def test_all_three_scenarios_required(self):
        bear = FireScenario(name="Bear", growth_rate=4, inflation_rate=3.5)
        with pytest.raises(ValidationError):
            FireProjectionScenarios(bear=bear, base=bear)
        with pytest.raises(ValidationError):
            FireProjectionScenarios.model_validate({})

    def test_scenario_rates_must_be_finite(self):
        with pytest.raises(ValidationError):
            FireScenario(name="Bad", growth_rate=float("nan"), inflation_rate=2)
