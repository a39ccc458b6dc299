"""
Net worth doubling time analysis.

Scans a monthly net worth history once, front to back, and records the
months needed to reach each milestone. Two milestone ladders are supported:

- geometric: 2x, 4x, 8x... of the first positive net worth
- threshold: fixed levels such as 100k, 200k, 500k, 1M, 2M

Levels already reached by the first snapshot are never reported, and a level
is evaluated only once so an oscillating net worth cannot record it twice.
"""

import logging
from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field

from .time_grid import MonthRef, format_period_label

logger = logging.getLogger(__name__)

DoublingMode = Literal["geometric", "threshold"]

DEFAULT_THRESHOLDS: List[float] = [100_000, 200_000, 500_000, 1_000_000, 2_000_000]


class NetWorthPoint(BaseModel):
    """Net worth at the end of a calendar month."""

    year: int = Field(..., ge=1900, le=2200, description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")
    net_worth: float = Field(..., allow_inf_nan=False, description="Total net worth")

    @property
    def month_ref(self) -> MonthRef:
        return MonthRef(year=self.year, month=self.month)


class DoublingMilestone(BaseModel):
    """A completed or in-progress milestone."""

    milestone_number: int = Field(..., ge=1, description="1st, 2nd, 3rd... milestone")
    milestone_type: DoublingMode = Field(..., description="Milestone ladder")
    multiplier: Optional[float] = Field(
        None, description="Multiple of the baseline (geometric only)"
    )
    threshold_value: Optional[float] = Field(
        None, description="Absolute level (threshold only)"
    )
    start_value: float = Field(..., description="Net worth at the start")
    end_value: float = Field(..., description="Net worth at the end (or latest)")
    start_date: MonthRef
    end_date: MonthRef
    duration_months: int = Field(..., ge=0, description="Elapsed months")
    period_label: str = Field(..., description="MM/YY - MM/YY")
    is_complete: bool = Field(..., description="False for the milestone in progress")
    progress_percentage: Optional[float] = Field(
        None, ge=0, le=100, description="Progress toward an incomplete milestone"
    )


class DoublingTimeSummary(BaseModel):
    """Milestones plus aggregate statistics."""

    milestones: List[DoublingMilestone] = Field(default_factory=list)
    fastest_doubling: Optional[DoublingMilestone] = None
    average_months: Optional[float] = None
    total_doublings: int = 0
    current_doubling_in_progress: Optional[DoublingMilestone] = None


class _MilestoneTracker:
    """Last completed milestone: the start of the next one."""

    def __init__(self, point: NetWorthPoint):
        self.value = point.net_worth
        self.date = point.month_ref

    def complete(
        self,
        point: NetWorthPoint,
        number: int,
        mode: DoublingMode,
        multiplier: Optional[float] = None,
        threshold_value: Optional[float] = None,
    ) -> DoublingMilestone:
        end = point.month_ref
        milestone = DoublingMilestone(
            milestone_number=number,
            milestone_type=mode,
            multiplier=multiplier,
            threshold_value=threshold_value,
            start_value=self.value,
            end_value=point.net_worth,
            start_date=self.date,
            end_date=end,
            duration_months=end.index - self.date.index,
            period_label=format_period_label(self.date, end),
            is_complete=True,
        )
        self.value = point.net_worth
        self.date = end
        return milestone

    def in_progress(
        self,
        latest: NetWorthPoint,
        target_value: float,
        number: int,
        mode: DoublingMode,
        multiplier: Optional[float] = None,
        threshold_value: Optional[float] = None,
    ) -> Optional[DoublingMilestone]:
        if latest.net_worth <= 0 or target_value <= self.value:
            return None
        progress = (latest.net_worth - self.value) / (target_value - self.value) * 100
        end = latest.month_ref
        return DoublingMilestone(
            milestone_number=number,
            milestone_type=mode,
            multiplier=multiplier,
            threshold_value=threshold_value,
            start_value=self.value,
            end_value=latest.net_worth,
            start_date=self.date,
            end_date=end,
            duration_months=end.index - self.date.index,
            period_label=format_period_label(self.date, end),
            is_complete=False,
            progress_percentage=float(np.clip(progress, 0, 100)),
        )


def _prepare_points(points: Iterable[Union[NetWorthPoint, dict]]) -> List[NetWorthPoint]:
    models = [NetWorthPoint.model_validate(p) for p in points]
    ordered = sorted(models, key=lambda p: (p.year, p.month))
    if ordered != models:
        logger.warning("Net worth history was not in chronological order, sorting it")
    return ordered


def calculate_geometric_milestones(
    points: Sequence[NetWorthPoint],
) -> Tuple[List[DoublingMilestone], Optional[DoublingMilestone]]:
    """
    Detect 2x, 4x, 8x... crossings of the first positive net worth.

    Args:
        points: Chronologically ordered history

    Returns:
        Tuple of (completed milestones, milestone in progress)
    """
    baseline_index = next(
        (i for i, p in enumerate(points) if p.net_worth > 0), None
    )
    if baseline_index is None:
        return [], None

    baseline = points[baseline_index].net_worth
    tracker = _MilestoneTracker(points[baseline_index])
    multiplier = 2.0
    milestones: List[DoublingMilestone] = []

    for point in points[baseline_index + 1 :]:
        if point.net_worth < baseline * multiplier:
            continue
        reached = multiplier
        while point.net_worth >= baseline * reached * 2:
            reached *= 2
        milestones.append(
            tracker.complete(point, len(milestones) + 1, "geometric", multiplier=reached)
        )
        multiplier = reached * 2

    in_progress = tracker.in_progress(
        points[-1],
        baseline * multiplier,
        len(milestones) + 1,
        "geometric",
        multiplier=multiplier,
    )
    return milestones, in_progress


def calculate_threshold_milestones(
    points: Sequence[NetWorthPoint],
    thresholds: Optional[Sequence[float]] = None,
) -> Tuple[List[DoublingMilestone], Optional[DoublingMilestone]]:
    """
    Detect crossings of fixed net worth levels.

    Levels at or below the first snapshot are skipped: they were reached
    before the history starts and have no measurable duration.

    Args:
        points: Chronologically ordered history
        thresholds: Absolute levels (defaults to 100k, 200k, 500k, 1M, 2M)

    Returns:
        Tuple of (completed milestones, milestone in progress)
    """
    levels = sorted(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
    first = points[0]
    pending = [level for level in levels if level > first.net_worth]

    tracker = _MilestoneTracker(first)
    milestones: List[DoublingMilestone] = []

    for point in points[1:]:
        if not pending:
            break
        crossed = [level for level in pending if point.net_worth >= level]
        if not crossed:
            continue
        milestones.append(
            tracker.complete(
                point, len(milestones) + 1, "threshold", threshold_value=crossed[-1]
            )
        )
        pending = pending[len(crossed) :]

    in_progress = None
    if pending:
        in_progress = tracker.in_progress(
            points[-1],
            pending[0],
            len(milestones) + 1,
            "threshold",
            threshold_value=pending[0],
        )
    return milestones, in_progress


def calculate_doubling_time(
    points: Iterable[Union[NetWorthPoint, dict]],
    mode: DoublingMode = "geometric",
    thresholds: Optional[Sequence[float]] = None,
) -> DoublingTimeSummary:
    """
    Analyze how long net worth takes to reach successive milestones.

    Args:
        points: Monthly net worth history
        mode: "geometric" (2x, 4x, 8x...) or "threshold" (fixed levels)
        thresholds: Levels for threshold mode

    Returns:
        DoublingTimeSummary; empty when fewer than two snapshots are given

    Raises:
        ValueError: If mode is unknown or a threshold is not positive
    """
    if mode not in ("geometric", "threshold"):
        raise ValueError(f"Unknown doubling mode: {mode}")
    if thresholds is not None and any(
        not np.isfinite(level) or level <= 0 for level in thresholds
    ):
        raise ValueError("Thresholds must be positive numbers")

    ordered = _prepare_points(points)
    if len(ordered) < 2:
        return DoublingTimeSummary()

    if mode == "geometric":
        milestones, in_progress = calculate_geometric_milestones(ordered)
    else:
        milestones, in_progress = calculate_threshold_milestones(ordered, thresholds)

    fastest = min(milestones, key=lambda m: m.duration_months) if milestones else None
    average = (
        float(np.mean([m.duration_months for m in milestones])) if milestones else None
    )

    logger.debug(
        f"Doubling time ({mode}): {len(milestones)} milestones over {len(ordered)} snapshots"
    )

    return DoublingTimeSummary(
        milestones=milestones,
        fastest_doubling=fastest,
        average_months=average,
        total_doublings=len(milestones),
        current_doubling_in_progress=in_progress,
    )
