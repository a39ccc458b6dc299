"""
Point-in-time FIRE metrics.

Computes the FIRE number, progress toward financial independence and the
spendable allowance implied by a withdrawal rate. All rates are expressed in
percent units (4 means 4%). Divisions by zero degrade to 0 because a zero net
worth or a zero withdrawal rate is a normal state for a new portfolio.
"""

import logging
from typing import Annotated, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, validate_call

logger = logging.getLogger(__name__)

FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]
Percent = Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]

DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12


class FireScenario(BaseModel):
    """Growth and inflation assumptions for one projection scenario."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Scenario name")
    growth_rate: float = Field(
        ..., ge=-100, le=100, allow_inf_nan=False, description="Annual growth rate (%)"
    )
    inflation_rate: float = Field(
        ..., ge=-100, le=100, allow_inf_nan=False, description="Annual inflation rate (%)"
    )


class FireProjectionScenarios(BaseModel):
    """The three scenarios a projection is run against."""

    model_config = ConfigDict(frozen=True)

    bear: FireScenario = Field(..., description="Pessimistic scenario")
    base: FireScenario = Field(..., description="Expected scenario")
    bull: FireScenario = Field(..., description="Optimistic scenario")

    def scenario_items(self) -> List[Tuple[str, FireScenario]]:
        """Iterate (key, scenario) pairs in bear, base, bull order."""
        return [("bear", self.bear), ("base", self.base), ("bull", self.bull)]


class FireMetrics(BaseModel):
    """FIRE metrics derived from net worth, expenses and withdrawal rate."""

    current_net_worth: float = Field(..., description="Current net worth")
    annual_expenses: float = Field(..., description="Annual expenses")
    withdrawal_rate: float = Field(..., description="Withdrawal rate (%)")

    fire_number: float = Field(..., description="Net worth needed for FIRE")
    progress_to_fi: float = Field(
        ..., description="Net worth as a percentage of the FIRE number (unclamped)"
    )
    annual_allowance: float = Field(..., description="Sustainable annual spending")
    monthly_allowance: float = Field(..., description="Sustainable monthly spending")
    daily_allowance: float = Field(..., description="Sustainable daily spending")
    current_wr: float = Field(
        ..., description="Expenses as a percentage of current net worth"
    )
    years_of_expenses: float = Field(
        ..., description="Years of expenses covered by current net worth"
    )


class PlannedFireMetrics(BaseModel):
    """FIRE number and progress for a planned post-retirement expense level."""

    planned_annual_expenses: float = Field(..., description="Planned annual expenses")
    planned_fire_number: float = Field(..., description="FIRE number for planned expenses")
    planned_progress_to_fi: float = Field(
        ..., description="Progress toward the planned FIRE number (%)"
    )


def calculate_fire_number(annual_expenses: float, withdrawal_rate: float) -> float:
    """
    FIRE number for an expense level.

    Args:
        annual_expenses: Annual expenses
        withdrawal_rate: Withdrawal rate in percent

    Returns:
        annual_expenses / (withdrawal_rate / 100), or 0 when the rate is 0
    """
    if withdrawal_rate == 0:
        return 0.0
    return annual_expenses / (withdrawal_rate / 100)


def calculate_progress_to_fi(net_worth: float, fire_number: float) -> float:
    """Net worth as a percentage of the FIRE number, 0 when the number is 0."""
    if fire_number == 0:
        return 0.0
    return (net_worth / fire_number) * 100


@validate_call
def calculate_fire_metrics(
    net_worth: FiniteFloat,
    annual_expenses: FiniteFloat,
    withdrawal_rate: Percent,
) -> FireMetrics:
    """
    Calculate FIRE metrics for the current situation.

    Args:
        net_worth: Current net worth
        annual_expenses: Current annual expenses
        withdrawal_rate: Safe withdrawal rate in percent (4 = 4%)

    Returns:
        FireMetrics with every derived value

    Raises:
        pydantic.ValidationError: If an input is not a finite number or the
            withdrawal rate is outside 0-100
    """
    fire_number = calculate_fire_number(annual_expenses, withdrawal_rate)
    progress_to_fi = calculate_progress_to_fi(net_worth, fire_number)

    annual_allowance = net_worth * (withdrawal_rate / 100)
    monthly_allowance = annual_allowance / MONTHS_PER_YEAR
    daily_allowance = annual_allowance / DAYS_PER_YEAR

    current_wr = 0.0 if net_worth == 0 else (annual_expenses / net_worth) * 100
    years_of_expenses = 0.0 if current_wr == 0 else 1 / (current_wr / 100)

    logger.debug(
        f"FIRE metrics: net_worth={net_worth}, fire_number={fire_number}, "
        f"progress={progress_to_fi:.2f}%"
    )

    return FireMetrics(
        current_net_worth=net_worth,
        annual_expenses=annual_expenses,
        withdrawal_rate=withdrawal_rate,
        fire_number=fire_number,
        progress_to_fi=progress_to_fi,
        annual_allowance=annual_allowance,
        monthly_allowance=monthly_allowance,
        daily_allowance=daily_allowance,
        current_wr=current_wr,
        years_of_expenses=years_of_expenses,
    )


@validate_call
def calculate_planned_fire_metrics(
    net_worth: FiniteFloat,
    planned_annual_expenses: FiniteFloat,
    withdrawal_rate: Percent,
) -> PlannedFireMetrics:
    """
    Calculate the FIRE number and progress for planned retirement expenses.

    Args:
        net_worth: Current net worth
        planned_annual_expenses: Expected annual expenses once retired
        withdrawal_rate: Safe withdrawal rate in percent

    Returns:
        PlannedFireMetrics
    """
    planned_fire_number = calculate_fire_number(planned_annual_expenses, withdrawal_rate)
    return PlannedFireMetrics(
        planned_annual_expenses=planned_annual_expenses,
        planned_fire_number=planned_fire_number,
        planned_progress_to_fi=calculate_progress_to_fi(net_worth, planned_fire_number),
    )


def get_default_scenarios() -> FireProjectionScenarios:
    """Default bear/base/bull scenarios (growth %, inflation %)."""
    return FireProjectionScenarios(
        bear=FireScenario(name="Bear", growth_rate=4.0, inflation_rate=3.5),
        base=FireScenario(name="Base", growth_rate=7.0, inflation_rate=2.5),
        bull=FireScenario(name="Bull", growth_rate=10.0, inflation_rate=1.5),
    )
