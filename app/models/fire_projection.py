"""
Deterministic FIRE projection across bear, base and bull scenarios.

Each scenario compounds net worth with its own growth rate, inflates expenses
with its own inflation rate and tracks the first year in which net worth
covers the inflated FIRE number. Savings stop once a scenario reaches FIRE.
The run ends early once every scenario has reached FIRE and five more years
have been shown.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .fire_metrics import FireProjectionScenarios, FireScenario, calculate_fire_number
from .time_grid import CurrencyFormatter, get_current_year

logger = logging.getLogger(__name__)

MAX_PROJECTION_YEARS = 100
POST_FIRE_YEARS_SHOWN = 5


class FireProjectionConfig(BaseModel):
    """Validated inputs of a projection run."""

    initial_net_worth: float = Field(
        ..., allow_inf_nan=False, description="Net worth at the start of the projection"
    )
    initial_expenses: float = Field(
        ..., allow_inf_nan=False, description="Annual expenses at the start"
    )
    annual_savings: float = Field(
        ..., allow_inf_nan=False, description="Savings added each year until FIRE"
    )
    withdrawal_rate: float = Field(
        ..., ge=0, le=100, allow_inf_nan=False, description="Withdrawal rate (%)"
    )
    scenarios: FireProjectionScenarios = Field(..., description="Bear/base/bull scenarios")
    horizon_years: int = Field(
        ..., ge=0, le=MAX_PROJECTION_YEARS, description="Maximum years to project"
    )
    start_year: Optional[int] = Field(
        default=None, ge=1900, le=2200, description="Calendar year before year 1"
    )


class ScenarioYear(BaseModel):
    """One scenario's state at the end of a projected year."""

    net_worth: float = Field(..., description="Net worth at year end")
    expenses: float = Field(..., description="Inflated annual expenses")
    fire_number: float = Field(..., description="FIRE number for inflated expenses")
    fire_reached: bool = Field(..., description="Net worth covers the FIRE number")


class ProjectionYear(BaseModel):
    """All three scenarios for one projected year."""

    year: int = Field(..., ge=1, description="Projection year (1-indexed)")
    calendar_year: int = Field(..., description="Calendar year")
    bear: ScenarioYear
    base: ScenarioYear
    bull: ScenarioYear


class FireProjectionResult(BaseModel):
    """Result of a FIRE projection run."""

    yearly_data: List[ProjectionYear] = Field(..., description="Per-year results")
    bear_years_to_fire: Optional[int] = Field(
        None, description="First year the bear scenario reaches FIRE"
    )
    base_years_to_fire: Optional[int] = Field(
        None, description="First year the base scenario reaches FIRE"
    )
    bull_years_to_fire: Optional[int] = Field(
        None, description="First year the bull scenario reaches FIRE"
    )
    annual_savings: float
    initial_net_worth: float
    initial_expenses: float
    withdrawal_rate: float
    scenarios: FireProjectionScenarios


class _ScenarioState:
    """Running state of a single scenario during the projection loop."""

    def __init__(self, scenario: FireScenario, net_worth: float, expenses: float):
        self.scenario = scenario
        self.net_worth = net_worth
        self.expenses = expenses
        self.years_to_fire: Optional[int] = None

    def advance(self, year: int, annual_savings: float, withdrawal_rate: float) -> ScenarioYear:
        """Apply one year of growth, savings and inflation."""
        self.net_worth *= 1 + self.scenario.growth_rate / 100
        # Portfolio is self-sustaining after FIRE
        if self.years_to_fire is None:
            self.net_worth += annual_savings
        self.expenses *= 1 + self.scenario.inflation_rate / 100

        fire_number = calculate_fire_number(self.expenses, withdrawal_rate)
        fire_reached = self.net_worth >= fire_number
        if self.years_to_fire is None and fire_reached:
            self.years_to_fire = year

        return ScenarioYear(
            net_worth=self.net_worth,
            expenses=self.expenses,
            fire_number=fire_number,
            fire_reached=fire_reached,
        )


def calculate_fire_projection(
    initial_net_worth: float,
    initial_expenses: float,
    annual_savings: float,
    withdrawal_rate: float,
    scenarios: FireProjectionScenarios,
    horizon_years: int,
    start_year: Optional[int] = None,
) -> FireProjectionResult:
    """
    Project net worth year by year under bear, base and bull scenarios.

    Args:
        initial_net_worth: Net worth today
        initial_expenses: Annual expenses today
        annual_savings: Amount invested each year until FIRE is reached
        withdrawal_rate: Withdrawal rate in percent used for the FIRE number
        scenarios: Bear/base/bull scenarios (model or plain mapping)
        horizon_years: Maximum number of years to simulate (0-100)
        start_year: Calendar year preceding year 1 (defaults to current year)

    Returns:
        FireProjectionResult with the per-year data and years to FIRE

    Raises:
        pydantic.ValidationError: If any input is malformed
    """
    config = FireProjectionConfig(
        initial_net_worth=initial_net_worth,
        initial_expenses=initial_expenses,
        annual_savings=annual_savings,
        withdrawal_rate=withdrawal_rate,
        scenarios=scenarios,
        horizon_years=horizon_years,
        start_year=start_year,
    )
    base_year = config.start_year if config.start_year is not None else get_current_year()

    states = {
        key: _ScenarioState(scenario, config.initial_net_worth, config.initial_expenses)
        for key, scenario in config.scenarios.scenario_items()
    }

    yearly_data: List[ProjectionYear] = []
    for year in range(1, config.horizon_years + 1):
        scenario_years = {
            key: state.advance(year, config.annual_savings, config.withdrawal_rate)
            for key, state in states.items()
        }
        yearly_data.append(
            ProjectionYear(year=year, calendar_year=base_year + year, **scenario_years)
        )

        years_to_fire = [state.years_to_fire for state in states.values()]
        if all(y is not None for y in years_to_fire):
            if year >= max(years_to_fire) + POST_FIRE_YEARS_SHOWN:
                logger.debug(f"All scenarios reached FIRE, stopping at year {year}")
                break

    logger.debug(
        f"Projection finished after {len(yearly_data)} years: "
        f"bear={states['bear'].years_to_fire}, base={states['base'].years_to_fire}, "
        f"bull={states['bull'].years_to_fire}"
    )

    return FireProjectionResult(
        yearly_data=yearly_data,
        bear_years_to_fire=states["bear"].years_to_fire,
        base_years_to_fire=states["base"].years_to_fire,
        bull_years_to_fire=states["bull"].years_to_fire,
        annual_savings=config.annual_savings,
        initial_net_worth=config.initial_net_worth,
        initial_expenses=config.initial_expenses,
        withdrawal_rate=config.withdrawal_rate,
        scenarios=config.scenarios,
    )


def generate_projection_report(
    result: FireProjectionResult, formatter: Optional[CurrencyFormatter] = None
) -> str:
    """
    Generate a human-readable projection summary.

    Args:
        result: Projection result
        formatter: Currency formatter (defaults to euro, no decimals)

    Returns:
        Formatted report string
    """
    formatter = formatter or CurrencyFormatter()

    def years_text(value: Optional[int]) -> str:
        return f"{value} years" if value is not None else "not reached"

    lines = [
        "=== FIRE Projection ===",
        "",
        f"Initial Net Worth: {formatter.format_currency(result.initial_net_worth)}",
        f"Initial Expenses:  {formatter.format_currency(result.initial_expenses)}",
        f"Annual Savings:    {formatter.format_currency(result.annual_savings)}",
        f"Withdrawal Rate:   {formatter.format_percentage(result.withdrawal_rate)}",
        "",
        "Years to FIRE:",
    ]
    for key, scenario in result.scenarios.scenario_items():
        value = getattr(result, f"{key}_years_to_fire")
        lines.append(
            f"  {scenario.name} ({formatter.format_percentage(scenario.growth_rate, 1)} growth, "
            f"{formatter.format_percentage(scenario.inflation_rate, 1)} inflation): "
            f"{years_text(value)}"
        )

    if result.yearly_data:
        last = result.yearly_data[-1]
        lines.append("")
        lines.append(f"Net Worth in {last.calendar_year}:")
        for key, scenario in result.scenarios.scenario_items():
            lines.append(
                f"  {scenario.name}: {formatter.format_currency(getattr(last, key).net_worth)}"
            )

    return "\n".join(lines) + "\n"
