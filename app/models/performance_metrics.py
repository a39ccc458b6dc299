"""
Portfolio return and risk metrics from monthly net worth snapshots.

Returns are adjusted for external cash flows (salary in, expenses out) so
that contributions are not mistaken for investment performance. Dividends are
portfolio returns and are therefore not part of the net cash flow.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, computed_field

from .doubling_time import NetWorthPoint
from .time_grid import format_month_label, months_between, shift_month

logger = logging.getLogger(__name__)

TimePeriod = Literal["YTD", "1Y", "3Y", "5Y", "ALL", "CUSTOM"]

PERIOD_MONTHS: Dict[str, int] = {"1Y": 12, "3Y": 36, "5Y": 60}
EXTREME_MONTHLY_RETURN = 50.0
IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-6


class CashFlow(BaseModel):
    """External cash flows for one month."""

    year: int = Field(..., ge=1900, le=2200)
    month: int = Field(..., ge=1, le=12)
    income: float = Field(default=0.0, allow_inf_nan=False, description="External income")
    expenses: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Expenses")
    dividend_income: float = Field(
        default=0.0, allow_inf_nan=False, description="Dividends (portfolio return)"
    )

    @computed_field  # type: ignore[misc]
    @property
    def net_cash_flow(self) -> float:
        """Income minus expenses, dividends excluded."""
        return self.income - self.expenses


class PerformanceMetrics(BaseModel):
    """Return and risk metrics for one time period."""

    time_period: TimePeriod
    start_net_worth: Optional[float] = None
    end_net_worth: Optional[float] = None
    number_of_months: int = 0

    roi: Optional[float] = Field(None, description="Simple ROI (%)")
    cagr: Optional[float] = Field(None, description="Compound annual growth rate (%)")
    time_weighted_return: Optional[float] = Field(None, description="Annualized TWR (%)")
    money_weighted_return: Optional[float] = Field(None, description="Annualized IRR (%)")
    sharpe_ratio: Optional[float] = None
    volatility: Optional[float] = Field(None, description="Annualized volatility (%)")
    max_drawdown: Optional[float] = Field(None, description="Maximum drawdown (%)")
    max_drawdown_date: Optional[str] = Field(None, description="Trough month (MM/YY)")

    risk_free_rate: float = 0.0
    total_contributions: float = 0.0
    total_withdrawals: float = 0.0
    net_cash_flow: float = 0.0
    total_dividend_income: float = 0.0
    has_insufficient_data: bool = False


def _cash_flow_map(cash_flows: Iterable[CashFlow]) -> Dict[Tuple[int, int], float]:
    flows: Dict[Tuple[int, int], float] = {}
    for cf in cash_flows:
        key = (cf.year, cf.month)
        flows[key] = flows.get(key, 0.0) + cf.net_cash_flow
    return flows


def _annualized_growth(ratio: float, years: float) -> Optional[float]:
    """Annualized growth (%) of a total growth ratio; None when not finite."""
    with np.errstate(over="ignore"):
        growth = (np.power(ratio, 1 / years) - 1) * 100
    return float(growth) if np.isfinite(growth) else None


def calculate_roi(start_nw: float, end_nw: float, net_cash_flow: float) -> Optional[float]:
    """
    Simple ROI: ((end - start - net cash flow) / start) * 100.

    Returns None when the starting net worth is 0.
    """
    if start_nw == 0:
        return None
    gain = end_nw - start_nw - net_cash_flow
    return (gain / start_nw) * 100


def calculate_cagr(
    start_nw: float, end_nw: float, net_cash_flow: float, number_of_months: int
) -> Optional[float]:
    """
    Compound annual growth rate, with cash flows added to the starting value.

    Args:
        start_nw: Starting net worth
        end_nw: Ending net worth
        net_cash_flow: Total net cash flow in the period
        number_of_months: Period length in months

    Returns:
        CAGR in percent, or None if it cannot be computed
    """
    if number_of_months < 1:
        return None
    adjusted_start = start_nw + net_cash_flow
    if adjusted_start <= 0:
        return None

    years = number_of_months / 12
    ratio = end_nw / adjusted_start
    if ratio < 0:
        return None
    return _annualized_growth(ratio, years)


def calculate_time_weighted_return(
    snapshots: Sequence[NetWorthPoint], cash_flows: Iterable[CashFlow]
) -> Optional[float]:
    """
    Annualized time-weighted return.

    Each month's return is (end - cash flow) / start - 1; monthly returns are
    linked geometrically and annualized over len(snapshots) - 1 months.
    """
    if len(snapshots) < 2:
        return None

    flows = _cash_flow_map(cash_flows)
    linked = 1.0
    for prev, curr in zip(snapshots, snapshots[1:]):
        if prev.net_worth == 0:
            continue
        cash_flow = flows.get((curr.year, curr.month), 0.0)
        linked *= (curr.net_worth - cash_flow) / prev.net_worth

    years = (len(snapshots) - 1) / 12
    if linked < 0:
        return None
    return _annualized_growth(linked, years)


def calculate_money_weighted_return(
    start_nw: float,
    end_nw: float,
    cash_flows: Sequence[CashFlow],
    number_of_months: int,
    start_year: Optional[int] = None,
    start_month: Optional[int] = None,
) -> Optional[float]:
    """
    Annualized money-weighted return (IRR) via Newton-Raphson.

    Seen from the investor: the starting net worth is an outflow at month 0,
    contributions are outflows and withdrawals inflows at their month offset
    from the start, and the ending net worth is an inflow at number_of_months.

    Returns:
        IRR in percent, or None if the solver does not converge
    """
    if number_of_months < 1 or start_nw == 0:
        return None

    if start_year is None or start_month is None:
        if cash_flows:
            start_year, start_month = cash_flows[0].year, cash_flows[0].month
        else:
            start_year, start_month = 2000, 1

    amounts = [-start_nw]
    offsets = [0.0]
    for cf in cash_flows:
        amounts.append(-cf.net_cash_flow)
        offsets.append(
            float(months_between(start_year, start_month, cf.year, cf.month))
        )
    amounts.append(end_nw)
    offsets.append(float(number_of_months))

    amount_arr = np.array(amounts, dtype=np.float64)
    years_arr = np.array(offsets, dtype=np.float64) / 12

    rate = 0.1
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(IRR_MAX_ITERATIONS):
            discount = np.power(1 + rate, -years_arr)
            npv = float(np.sum(amount_arr * discount))
            if abs(npv) < IRR_TOLERANCE:
                return rate * 100
            derivative = float(np.sum(-amount_arr * years_arr * discount / (1 + rate)))
            if derivative == 0 or not np.isfinite(derivative):
                break
            rate -= npv / derivative
            if rate < -0.99:
                rate = -0.99

    logger.debug("IRR did not converge")
    return None


def calculate_sharpe_ratio(
    portfolio_return: float, risk_free_rate: float, volatility: float
) -> Optional[float]:
    """(return - risk free) / volatility; None when volatility is 0."""
    if volatility == 0:
        return None
    return (portfolio_return - risk_free_rate) / volatility


def calculate_volatility(
    snapshots: Sequence[NetWorthPoint], cash_flows: Iterable[CashFlow]
) -> Optional[float]:
    """
    Annualized volatility of cash-flow-adjusted monthly returns (%).

    Monthly returns of 50% or more in absolute value are dropped; they come
    from large deposits or withdrawals rather than market moves.
    """
    if len(snapshots) < 2:
        return None

    flows = _cash_flow_map(cash_flows)
    monthly_returns: List[float] = []
    for prev, curr in zip(snapshots, snapshots[1:]):
        if prev.net_worth == 0:
            continue
        cash_flow = flows.get((curr.year, curr.month), 0.0)
        monthly_return = ((curr.net_worth - cash_flow) / prev.net_worth - 1) * 100
        if abs(monthly_return) < EXTREME_MONTHLY_RETURN:
            monthly_returns.append(monthly_return)

    if len(monthly_returns) < 2:
        return None

    return float(np.std(monthly_returns, ddof=1) * np.sqrt(12))


def calculate_max_drawdown(
    snapshots: Sequence[NetWorthPoint], cash_flows: Iterable[CashFlow]
) -> Tuple[Optional[float], Optional[str]]:
    """
    Largest peak-to-trough decline of net worth net of cumulative cash flows.

    Returns:
        Tuple of (drawdown as a negative percentage, trough month MM/YY), or
        (None, None) when the adjusted series never declines
    """
    if len(snapshots) < 2:
        return None, None

    flows = _cash_flow_map(cash_flows)
    cumulative = 0.0
    adjusted: List[float] = []
    for snapshot in snapshots:
        cumulative += flows.get((snapshot.year, snapshot.month), 0.0)
        adjusted.append(snapshot.net_worth - cumulative)

    peak = adjusted[0]
    max_drawdown = 0.0
    trough_index: Optional[int] = None
    for index, value in enumerate(adjusted):
        if value > peak:
            peak = value
        if peak > 0:
            drawdown = (value - peak) / peak * 100
            if drawdown < max_drawdown:
                max_drawdown = drawdown
                trough_index = index

    if trough_index is None:
        return None, None
    trough = snapshots[trough_index]
    return max_drawdown, format_month_label(trough.year, trough.month)


def get_snapshots_for_period(
    snapshots: Iterable[Union[NetWorthPoint, dict]],
    period: TimePeriod,
    today: date,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> List[NetWorthPoint]:
    """
    Select the snapshots belonging to a reporting period.

    1Y, 3Y and 5Y include the current month, so 1Y is the last 12 months.

    Raises:
        ValueError: For CUSTOM without both dates or an unknown period
    """
    ordered = sorted(
        (NetWorthPoint.model_validate(s) for s in snapshots),
        key=lambda s: (s.year, s.month),
    )
    if period == "ALL":
        return ordered

    end_key = (today.year, today.month)
    if period == "YTD":
        start_key = (today.year, 1)
    elif period in PERIOD_MONTHS:
        start = shift_month(today.year, today.month, -(PERIOD_MONTHS[period] - 1))
        start_key = (start.year, start.month)
    elif period == "CUSTOM":
        if custom_start is None or custom_end is None:
            raise ValueError("CUSTOM period requires custom_start and custom_end")
        start_key = (custom_start.year, custom_start.month)
        end_key = (custom_end.year, custom_end.month)
    else:
        raise ValueError(f"Unknown time period: {period}")

    return [s for s in ordered if start_key <= (s.year, s.month) <= end_key]


def calculate_performance_for_period(
    snapshots: Iterable[Union[NetWorthPoint, dict]],
    cash_flows: Iterable[Union[CashFlow, dict]],
    period: TimePeriod,
    today: date,
    risk_free_rate: float = 0.0,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> PerformanceMetrics:
    """
    Calculate every return and risk metric for one reporting period.

    Args:
        snapshots: Full monthly net worth history
        cash_flows: Monthly external cash flows
        period: Reporting period
        today: Reference date for relative periods
        risk_free_rate: Risk-free rate (%) for the Sharpe ratio
        custom_start: Start of a CUSTOM period
        custom_end: End of a CUSTOM period

    Returns:
        PerformanceMetrics; has_insufficient_data is set when the period
        holds fewer than two snapshots
    """
    selected = get_snapshots_for_period(snapshots, period, today, custom_start, custom_end)
    if len(selected) < 2:
        return PerformanceMetrics(
            time_period=period,
            risk_free_rate=risk_free_rate,
            has_insufficient_data=True,
        )

    first, last = selected[0], selected[-1]
    # The first snapshot is the opening balance, its month's flows are already in it
    flows = [
        cf
        for cf in (CashFlow.model_validate(c) for c in cash_flows)
        if (first.year, first.month) < (cf.year, cf.month) <= (last.year, last.month)
    ]
    number_of_months = months_between(first.year, first.month, last.year, last.month)

    net_cash_flow = sum(cf.net_cash_flow for cf in flows)
    total_contributions = sum(cf.net_cash_flow for cf in flows if cf.net_cash_flow > 0)
    total_withdrawals = sum(-cf.net_cash_flow for cf in flows if cf.net_cash_flow < 0)

    twr = calculate_time_weighted_return(selected, flows)
    volatility = calculate_volatility(selected, flows)
    sharpe = (
        calculate_sharpe_ratio(twr, risk_free_rate, volatility)
        if twr is not None and volatility is not None
        else None
    )
    max_drawdown, trough_label = calculate_max_drawdown(selected, flows)

    return PerformanceMetrics(
        time_period=period,
        start_net_worth=first.net_worth,
        end_net_worth=last.net_worth,
        number_of_months=number_of_months,
        roi=calculate_roi(first.net_worth, last.net_worth, net_cash_flow),
        cagr=calculate_cagr(first.net_worth, last.net_worth, net_cash_flow, number_of_months),
        time_weighted_return=twr,
        money_weighted_return=calculate_money_weighted_return(
            first.net_worth,
            last.net_worth,
            flows,
            number_of_months,
            start_year=first.year,
            start_month=first.month,
        ),
        sharpe_ratio=sharpe,
        volatility=volatility,
        max_drawdown=max_drawdown,
        max_drawdown_date=trough_label,
        risk_free_rate=risk_free_rate,
        total_contributions=total_contributions,
        total_withdrawals=total_withdrawals,
        net_cash_flow=net_cash_flow,
        total_dividend_income=sum(cf.dividend_income for cf in flows),
        has_insufficient_data=False,
    )
