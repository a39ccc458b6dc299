"""
Analytics service coordinating the FIRE and performance engines.

Blueprints hand raw JSON payloads to this service. It validates them into
request models, applies configured defaults, runs the engine and returns
JSON-ready dictionaries.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.config import Settings
from app.models.doubling_time import DoublingMode, NetWorthPoint, calculate_doubling_time
from app.models.fire_metrics import (
    FireProjectionScenarios,
    calculate_fire_metrics,
    calculate_planned_fire_metrics,
    get_default_scenarios,
)
from app.models.fire_projection import calculate_fire_projection
from app.models.performance_metrics import (
    CashFlow,
    TimePeriod,
    calculate_performance_for_period,
)
from app.models.time_grid import get_today
from app.models.yield_metrics import (
    Asset,
    Dividend,
    calculate_current_yield_metrics,
    calculate_yoc_metrics,
)

logger = logging.getLogger(__name__)


class FireMetricsRequest(BaseModel):
    """Payload for current and planned FIRE metrics."""

    net_worth: float = Field(..., allow_inf_nan=False)
    annual_expenses: float = Field(..., allow_inf_nan=False)
    withdrawal_rate: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    planned_annual_expenses: Optional[float] = Field(None, allow_inf_nan=False)


class FireProjectionRequest(BaseModel):
    """Payload for a bear/base/bull projection."""

    initial_net_worth: float = Field(..., allow_inf_nan=False)
    initial_expenses: float = Field(..., allow_inf_nan=False)
    annual_savings: float = Field(..., allow_inf_nan=False)
    withdrawal_rate: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    scenarios: Optional[FireProjectionScenarios] = None
    horizon_years: Optional[int] = Field(None, ge=0)
    start_year: Optional[int] = None


class YieldRequest(BaseModel):
    """Payload for yield on cost and current yield."""

    dividends: List[Dividend] = Field(default_factory=list)
    assets: List[Asset] = Field(default_factory=list)
    start_date: date
    end_date: date
    number_of_months: int = Field(..., gt=0)


class PerformanceRequest(BaseModel):
    """Payload for period return and risk metrics."""

    snapshots: List[NetWorthPoint]
    cash_flows: List[CashFlow] = Field(default_factory=list)
    period: TimePeriod = "ALL"
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None
    risk_free_rate: Optional[float] = Field(None, allow_inf_nan=False)


class DoublingTimeRequest(BaseModel):
    """Payload for doubling time analysis."""

    snapshots: List[NetWorthPoint]
    mode: DoublingMode = "geometric"
    thresholds: Optional[List[float]] = None


class AnalyticsService:
    """Service running the engines for API requests."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the analytics service.

        Args:
            settings: Application settings providing defaults and limits
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    def fire_metrics(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Current FIRE metrics, plus planned metrics when requested."""
        request = FireMetricsRequest.model_validate(payload)
        withdrawal_rate = self._withdrawal_rate(request.withdrawal_rate)

        metrics = calculate_fire_metrics(
            request.net_worth, request.annual_expenses, withdrawal_rate
        )
        response: Dict[str, Any] = {"metrics": metrics.model_dump(mode="json")}
        if request.planned_annual_expenses is not None:
            planned = calculate_planned_fire_metrics(
                request.net_worth, request.planned_annual_expenses, withdrawal_rate
            )
            response["planned"] = planned.model_dump(mode="json")

        self.logger.info(
            f"Calculated FIRE metrics: progress {metrics.progress_to_fi:.1f}% "
            f"of {metrics.fire_number:,.0f}"
        )
        return response

    def default_scenarios(self) -> Dict[str, Any]:
        """The default bear/base/bull scenarios."""
        return get_default_scenarios().model_dump(mode="json")

    def fire_projection(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a FIRE projection.

        Raises:
            ValueError: If the horizon exceeds MAX_PROJECTION_YEARS
        """
        request = FireProjectionRequest.model_validate(payload)
        horizon = (
            request.horizon_years
            if request.horizon_years is not None
            else self.settings.default_projection_years
        )
        if horizon > self.settings.max_projection_years:
            raise ValueError(
                f"horizon_years must be <= {self.settings.max_projection_years}"
            )

        result = calculate_fire_projection(
            request.initial_net_worth,
            request.initial_expenses,
            request.annual_savings,
            self._withdrawal_rate(request.withdrawal_rate),
            request.scenarios or get_default_scenarios(),
            horizon,
            start_year=request.start_year,
        )

        self.logger.info(
            f"Projected {len(result.yearly_data)} years: years to FIRE "
            f"bear={result.bear_years_to_fire}, base={result.base_years_to_fire}, "
            f"bull={result.bull_years_to_fire}"
        )
        return result.model_dump(mode="json")

    def yield_on_cost(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Yield on cost for the requested window."""
        request = YieldRequest.model_validate(payload)
        metrics = calculate_yoc_metrics(
            request.dividends,
            request.assets,
            request.start_date,
            request.end_date,
            request.number_of_months,
        )
        self.logger.info(
            f"Calculated YOC {metrics.gross_yield:.2f}% over {metrics.asset_count} assets"
        )
        return metrics.model_dump(mode="json")

    def current_yield(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Current yield for the requested window."""
        request = YieldRequest.model_validate(payload)
        metrics = calculate_current_yield_metrics(
            request.dividends,
            request.assets,
            request.start_date,
            request.end_date,
            request.number_of_months,
        )
        self.logger.info(
            f"Calculated current yield {metrics.gross_yield:.2f}% "
            f"over {metrics.asset_count} assets"
        )
        return metrics.model_dump(mode="json")

    def performance(self, payload: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
        """Return and risk metrics for one period."""
        request = PerformanceRequest.model_validate(payload)
        risk_free_rate = (
            request.risk_free_rate
            if request.risk_free_rate is not None
            else self.settings.risk_free_rate
        )
        metrics = calculate_performance_for_period(
            request.snapshots,
            request.cash_flows,
            request.period,
            today or get_today(),
            risk_free_rate=risk_free_rate,
            custom_start=request.custom_start,
            custom_end=request.custom_end,
        )
        if metrics.has_insufficient_data:
            self.logger.warning(f"Not enough snapshots for period {request.period}")
        return metrics.model_dump(mode="json")

    def doubling_time(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Doubling time summary for a net worth history."""
        request = DoublingTimeRequest.model_validate(payload)
        thresholds = request.thresholds
        if request.mode == "threshold" and thresholds is None:
            thresholds = self.settings.doubling_thresholds

        summary = calculate_doubling_time(request.snapshots, request.mode, thresholds)
        self.logger.info(
            f"Doubling time ({request.mode}): {summary.total_doublings} milestones"
        )
        return summary.model_dump(mode="json")

    def _withdrawal_rate(self, requested: Optional[float]) -> float:
        if requested is None:
            return self.settings.default_withdrawal_rate
        return requested
