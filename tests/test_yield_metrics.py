"""
Tests for yield on cost and current yield.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from app.models.yield_metrics import (
    Asset,
    Dividend,
    calculate_current_yield_metrics,
    calculate_yoc_metrics,
)


@pytest.fixture
def assets():
    """Two dividend payers and one non-payer."""
    return [
        Asset(id="a1", ticker="AAA", quantity=100, current_price=60, average_cost=50),
        Asset(id="a2", ticker="BBB", quantity=50, current_price=40, average_cost=20),
        Asset(id="a3", ticker="CCC", quantity=10, current_price=100, average_cost=80),
    ]


@pytest.fixture
def dividends():
    """Dividends for a1 and a2 in 2024 plus one outside the window."""
    return [
        Dividend(asset_id="a1", ex_date=date(2024, 3, 15), gross_amount=100, net_amount=85),
        Dividend(asset_id="a1", ex_date=date(2024, 9, 15), gross_amount=100, net_amount=85),
        Dividend(asset_id="a2", ex_date=date(2024, 6, 1), gross_amount=50, net_amount=40),
        Dividend(asset_id="a1", ex_date=date(2023, 12, 31), gross_amount=999, net_amount=999),
    ]


class TestYieldOnCost:
    """Test calculate_yoc_metrics."""

    def test_full_year(self, dividends, assets):
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        # Cost basis of paying assets only: 100 * 50 + 50 * 20
        assert metrics.basis == "cost"
        assert metrics.denominator == 6_000
        assert metrics.dividends_gross == 250
        assert metrics.dividends_net == 210
        assert metrics.asset_count == 2
        assert abs(metrics.gross_yield - 250 / 6_000 * 100) < 1e-9
        assert abs(metrics.net_yield - 210 / 6_000 * 100) < 1e-9

    def test_annualization(self, dividends, assets):
        """Six months of dividends are doubled."""
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 6, 30), 6
        )

        assert metrics.dividends_gross == 150
        assert abs(metrics.gross_yield - (150 / 6 * 12) / 6_000 * 100) < 1e-9

    def test_window_bounds_inclusive(self, dividends, assets):
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 3, 15), date(2024, 6, 1), 3
        )

        assert metrics.dividends_gross == 150
        assert metrics.asset_count == 2

    def test_datetime_ex_dates_compared_by_day(self, assets):
        dividends = [
            Dividend(
                asset_id="a1",
                ex_date=datetime(2024, 12, 31, 18, 30),
                gross_amount=40,
                net_amount=30,
            )
        ]
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert metrics.dividends_gross == 40

    def test_unknown_asset_ignored(self, assets):
        dividends = [
            Dividend(asset_id="sold", ex_date=date(2024, 5, 1), gross_amount=70, net_amount=60)
        ]
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert metrics.dividends_gross == 0
        assert metrics.asset_count == 0
        assert metrics.gross_yield == 0

    def test_asset_without_cost_basis_excluded(self, dividends):
        assets = [Asset(id="a1", quantity=100, current_price=60)]
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert metrics.denominator == 0
        assert metrics.gross_yield == 0
        assert metrics.net_yield == 0

    def test_zero_quantity_excluded(self, dividends):
        assets = [Asset(id="a1", quantity=0, current_price=60, average_cost=50)]
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert metrics.asset_count == 0
        assert metrics.gross_yield == 0

    def test_empty_inputs(self):
        metrics = calculate_yoc_metrics([], [], date(2024, 1, 1), date(2024, 12, 31), 12)

        assert metrics.gross_yield == 0
        assert metrics.denominator == 0
        assert metrics.asset_count == 0

    def test_accepts_plain_mappings(self):
        metrics = calculate_yoc_metrics(
            [{"asset_id": "x", "ex_date": "2024-02-01", "gross_amount": 10, "net_amount": 8}],
            [{"id": "x", "quantity": 10, "current_price": 12, "average_cost": 10}],
            date(2024, 1, 1),
            date(2024, 12, 31),
            12,
        )

        assert abs(metrics.gross_yield - 10.0) < 1e-9
        assert abs(metrics.net_yield - 8.0) < 1e-9


class TestCurrentYield:
    """Test calculate_current_yield_metrics."""

    def test_market_value_denominator(self, dividends, assets):
        metrics = calculate_current_yield_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        # Market value of paying assets only: 100 * 60 + 50 * 40
        assert metrics.basis == "market"
        assert metrics.denominator == 8_000
        assert metrics.dividends_gross == 250
        assert abs(metrics.gross_yield - 250 / 8_000 * 100) < 1e-9

    def test_asset_without_cost_counts_for_current_yield(self, dividends):
        assets = [Asset(id="a1", quantity=100, current_price=60)]
        metrics = calculate_current_yield_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert metrics.asset_count == 1
        assert metrics.denominator == 6_000

    def test_same_shape_as_yoc(self, dividends, assets):
        yoc = calculate_yoc_metrics(dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12)
        current = calculate_current_yield_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert set(yoc.model_dump()) == set(current.model_dump())
        assert yoc.dividends_gross == current.dividends_gross


class TestAssetBreakdown:
    """Test the per-asset yield breakdown."""

    def test_entries_sorted_by_yield_on_cost(self, dividends, assets):
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert [entry.asset_id for entry in metrics.assets] == ["a2", "a1"]

        a2, a1 = metrics.assets
        # a2: 50 on cost 1,000 and market value 2,000
        assert a2.ticker == "BBB"
        assert a2.dividends_gross == 50
        assert a2.dividends_net == 40
        assert abs(a2.yield_on_cost - 5) < 1e-9
        assert abs(a2.current_yield - 2.5) < 1e-9
        assert abs(a2.difference - 2.5) < 1e-9
        # a1: 200 on cost 5,000 and market value 6,000
        assert a1.quantity == 100
        assert a1.average_cost == 50
        assert a1.current_price == 60
        assert abs(a1.yield_on_cost - 4) < 1e-9
        assert abs(a1.current_yield - 200 / 6_000 * 100) < 1e-9

    def test_entries_add_up_to_portfolio_totals(self, dividends, assets):
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        assert sum(entry.dividends_gross for entry in metrics.assets) == metrics.dividends_gross
        assert len(metrics.assets) == metrics.asset_count

    def test_entries_annualized(self, dividends, assets):
        metrics = calculate_yoc_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 6, 30), 6
        )

        a2 = next(entry for entry in metrics.assets if entry.asset_id == "a2")
        assert abs(a2.yield_on_cost - 10) < 1e-9

    def test_current_yield_entry_without_cost(self, dividends):
        assets = [Asset(id="a1", quantity=100, current_price=60)]
        metrics = calculate_current_yield_metrics(
            dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 12
        )

        entry = metrics.assets[0]
        assert entry.average_cost is None
        assert entry.yield_on_cost == 0
        assert abs(entry.current_yield - 200 / 6_000 * 100) < 1e-9

    def test_no_dividends_no_entries(self, assets):
        metrics = calculate_yoc_metrics([], assets, date(2024, 1, 1), date(2024, 12, 31), 12)

        assert metrics.assets == []


class TestValidation:
    """Test window validation."""

    def test_number_of_months_must_be_positive(self, dividends, assets):
        with pytest.raises(ValidationError):
            calculate_yoc_metrics(dividends, assets, date(2024, 1, 1), date(2024, 12, 31), 0)

    def test_end_before_start_rejected(self, dividends, assets):
        with pytest.raises(ValidationError, match="End date must be >= start date"):
            calculate_current_yield_metrics(
                dividends, assets, date(2024, 12, 31), date(2024, 1, 1), 12
            )

    def test_non_numeric_amount_rejected(self, assets):
        with pytest.raises(ValidationError):
            calculate_yoc_metrics(
                [{"asset_id": "a1", "ex_date": "2024-02-01", "gross_amount": "lots", "net_amount": 1}],
                assets,
                date(2024, 1, 1),
                date(2024, 12, 31),
                12,
            )


def test_half_year_yield_on_cost():
    """300 gross over six months on a 10,000 cost basis is 6% a year."""
    metrics = calculate_yoc_metrics(
        [Dividend(asset_id="x", ex_date=date(2024, 4, 1), gross_amount=300, net_amount=255)],
        [Asset(id="x", quantity=200, current_price=55, average_cost=50)],
        date(2024, 1, 1),
        date(2024, 6, 30),
        6,
    )

    assert abs(metrics.gross_yield - 6) < 1e-9
    assert abs(metrics.net_yield - 5.1) < 1e-9
