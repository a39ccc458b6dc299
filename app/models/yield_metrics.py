"""
Dividend yield metrics over a reporting window.

Yield on cost (YOC) divides annualized dividends by the cost basis of the
assets that paid them; current yield divides by their market value. Both
share the same filtering and annualization, only the denominator differs.
"""

import logging
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .time_grid import to_date

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class Dividend(BaseModel):
    """A dividend received for an asset."""

    asset_id: str = Field(..., min_length=1, description="ID of the paying asset")
    ex_date: DateLike = Field(..., description="Ex-dividend date")
    payment_date: Optional[DateLike] = Field(None, description="Payment date")
    gross_amount: float = Field(..., allow_inf_nan=False, description="Gross amount")
    net_amount: float = Field(..., allow_inf_nan=False, description="Amount after tax")


class Asset(BaseModel):
    """Position data needed for yield calculations."""

    id: str = Field(..., min_length=1, description="Asset ID")
    ticker: Optional[str] = Field(None, description="Ticker symbol")
    quantity: float = Field(..., allow_inf_nan=False, description="Units held")
    current_price: float = Field(..., allow_inf_nan=False, description="Current unit price")
    average_cost: Optional[float] = Field(
        None, allow_inf_nan=False, description="Average purchase price per unit"
    )

    @property
    def cost_basis(self) -> float:
        """Quantity times average purchase price (0 when unknown)."""
        return self.quantity * (self.average_cost or 0.0)

    @property
    def market_value(self) -> float:
        """Quantity times current price."""
        return self.quantity * self.current_price


class YieldWindow(BaseModel):
    """Reporting window and annualization factor."""

    start_date: DateLike = Field(..., description="First day of the window")
    end_date: DateLike = Field(..., description="Last day of the window (inclusive)")
    number_of_months: int = Field(
        ..., gt=0, description="Months used to annualize the dividends"
    )

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: DateLike, info: ValidationInfo) -> DateLike:
        start = info.data.get("start_date")
        if start is not None and to_date(v) < to_date(start):
            raise ValueError("End date must be >= start date")
        return v


class AssetYield(BaseModel):
    """Yield of one dividend-paying asset over the window."""

    asset_id: str
    ticker: Optional[str] = None
    quantity: float
    average_cost: Optional[float] = None
    current_price: float
    dividends_gross: float = Field(..., description="Gross dividends in the window")
    dividends_net: float = Field(..., description="Net dividends in the window")
    yield_on_cost: float = Field(..., description="Annualized gross yield on cost (%)")
    current_yield: float = Field(
        ..., description="Annualized gross yield on market value (%)"
    )
    difference: float = Field(..., description="Yield on cost minus current yield")


class YieldMetrics(BaseModel):
    """Annualized dividend yield for a window."""

    basis: Literal["cost", "market"] = Field(
        ..., description="Denominator used: cost basis (YOC) or market value"
    )
    gross_yield: float = Field(..., description="Annualized gross yield (%)")
    net_yield: float = Field(..., description="Annualized net yield (%)")
    dividends_gross: float = Field(..., description="Gross dividends in the window")
    dividends_net: float = Field(..., description="Net dividends in the window")
    denominator: float = Field(..., description="Cost basis or market value used")
    asset_count: int = Field(..., ge=0, description="Dividend-paying assets included")
    assets: List[AssetYield] = Field(
        default_factory=list, description="Per-asset breakdown, highest yield on cost first"
    )


def _annualized_yield(total: float, number_of_months: int, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return (total / number_of_months * 12) / denominator * 100


def _calculate_yield(
    basis: Literal["cost", "market"],
    dividends: Iterable[Union[Dividend, dict]],
    assets: Iterable[Union[Asset, dict]],
    start_date: DateLike,
    end_date: DateLike,
    number_of_months: int,
) -> YieldMetrics:
    window = YieldWindow(
        start_date=start_date, end_date=end_date, number_of_months=number_of_months
    )
    start, end = to_date(window.start_date), to_date(window.end_date)
    months = window.number_of_months

    asset_models = [Asset.model_validate(a) for a in assets]
    dividend_models = [Dividend.model_validate(d) for d in dividends]

    if basis == "cost":
        is_eligible: Callable[[Asset], bool] = lambda a: (
            a.quantity > 0 and (a.average_cost or 0) > 0
        )
        value_of: Callable[[Asset], float] = lambda a: a.cost_basis
    else:
        is_eligible = lambda a: a.quantity > 0 and a.current_price > 0
        value_of = lambda a: a.market_value

    eligible: Dict[str, Asset] = {a.id: a for a in asset_models if is_eligible(a)}

    # asset id -> [gross, net], in order of first dividend
    per_asset: Dict[str, List[float]] = {}
    for dividend in dividend_models:
        if not start <= to_date(dividend.ex_date) <= end:
            continue
        if dividend.asset_id not in eligible:
            continue
        totals = per_asset.setdefault(dividend.asset_id, [0.0, 0.0])
        totals[0] += dividend.gross_amount
        totals[1] += dividend.net_amount

    dividends_gross = sum(gross for gross, _ in per_asset.values())
    dividends_net = sum(net for _, net in per_asset.values())
    denominator = sum(value_of(eligible[asset_id]) for asset_id in per_asset)

    breakdown: List[AssetYield] = []
    for asset_id, (gross, net) in per_asset.items():
        asset = eligible[asset_id]
        yield_on_cost = _annualized_yield(gross, months, asset.cost_basis)
        current_yield = _annualized_yield(gross, months, asset.market_value)
        breakdown.append(
            AssetYield(
                asset_id=asset_id,
                ticker=asset.ticker,
                quantity=asset.quantity,
                average_cost=asset.average_cost,
                current_price=asset.current_price,
                dividends_gross=gross,
                dividends_net=net,
                yield_on_cost=yield_on_cost,
                current_yield=current_yield,
                difference=yield_on_cost - current_yield,
            )
        )
    breakdown.sort(key=lambda entry: entry.yield_on_cost, reverse=True)

    logger.debug(
        f"{basis} yield window {start} - {end}: {len(per_asset)} assets, "
        f"gross={dividends_gross:.2f}, denominator={denominator:.2f}"
    )

    return YieldMetrics(
        basis=basis,
        gross_yield=_annualized_yield(dividends_gross, months, denominator),
        net_yield=_annualized_yield(dividends_net, months, denominator),
        dividends_gross=dividends_gross,
        dividends_net=dividends_net,
        denominator=denominator,
        asset_count=len(per_asset),
        assets=breakdown,
    )


def calculate_yoc_metrics(
    dividends: Iterable[Union[Dividend, dict]],
    assets: Iterable[Union[Asset, dict]],
    start_date: DateLike,
    end_date: DateLike,
    number_of_months: int,
) -> YieldMetrics:
    """
    Calculate yield on cost for dividends with ex-date in [start_date, end_date].

    Only assets with a positive quantity and a known average cost count. The
    caller supplies number_of_months so the window (which may be capped at
    today) and the annualization factor can differ.

    Args:
        dividends: Dividend history
        assets: Current positions
        start_date: Window start (inclusive)
        end_date: Window end (inclusive)
        number_of_months: Months used for annualization

    Returns:
        YieldMetrics with basis "cost"
    """
    return _calculate_yield("cost", dividends, assets, start_date, end_date, number_of_months)


def calculate_current_yield_metrics(
    dividends: Iterable[Union[Dividend, dict]],
    assets: Iterable[Union[Asset, dict]],
    start_date: DateLike,
    end_date: DateLike,
    number_of_months: int,
) -> YieldMetrics:
    """
    Calculate current yield (dividends over market value) for a window.

    Same filtering and annualization as calculate_yoc_metrics, with the
    denominator being quantity times current price of the paying assets.
    """
    return _calculate_yield(
        "market", dividends, assets, start_date, end_date, number_of_months
    )
