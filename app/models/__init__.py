"""Calculation engines for FIRE tracking and portfolio analytics."""

from .fire_metrics import (
    FireMetrics,
    FireProjectionScenarios,
    FireScenario,
    PlannedFireMetrics,
    calculate_fire_metrics,
    calculate_planned_fire_metrics,
    get_default_scenarios,
)
from .fire_projection import (
    FireProjectionResult,
    ProjectionYear,
    ScenarioYear,
    calculate_fire_projection,
    generate_projection_report,
)
from .yield_metrics import (
    Asset,
    AssetYield,
    Dividend,
    YieldMetrics,
    calculate_current_yield_metrics,
    calculate_yoc_metrics,
)
from .doubling_time import (
    DoublingMilestone,
    DoublingTimeSummary,
    NetWorthPoint,
    calculate_doubling_time,
)
from .performance_metrics import (
    CashFlow,
    PerformanceMetrics,
    calculate_performance_for_period,
)

__all__ = [
    "FireMetrics",
    "FireProjectionScenarios",
    "FireScenario",
    "PlannedFireMetrics",
    "calculate_fire_metrics",
    "calculate_planned_fire_metrics",
    "get_default_scenarios",
    "FireProjectionResult",
    "ProjectionYear",
    "ScenarioYear",
    "calculate_fire_projection",
    "generate_projection_report",
    "Asset",
    "AssetYield",
    "Dividend",
    "YieldMetrics",
    "calculate_current_yield_metrics",
    "calculate_yoc_metrics",
    "DoublingMilestone",
    "DoublingTimeSummary",
    "NetWorthPoint",
    "calculate_doubling_time",
    "CashFlow",
    "PerformanceMetrics",
    "calculate_performance_for_period",
]
