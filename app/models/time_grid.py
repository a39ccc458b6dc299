"""
Monthly time grid and display helpers for FIRE calculations.

Snapshots, dividends and milestones are all keyed by calendar month. This
module provides month arithmetic, the MM/YY labels used by reports, and
currency/percentage formatting for plain-text summaries.
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MonthRef(BaseModel):
    """A calendar month."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1900, le=2200, description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")

    @property
    def index(self) -> int:
        """Absolute month index, used for month differences."""
        return self.year * 12 + (self.month - 1)

    def label(self) -> str:
        """Format as MM/YY."""
        return format_month_label(self.year, self.month)


class CurrencyFormatter(BaseModel):
    """Formats currency and percentage values for display."""

    currency_symbol: str = Field(default="€", description="Currency symbol")
    decimal_places: int = Field(
        default=0, ge=0, le=10, description="Number of decimal places"
    )
    show_currency_symbol: bool = Field(
        default=True, description="Whether to show currency symbol"
    )

    def format_currency(self, amount: float, show_symbol: Optional[bool] = None) -> str:
        """
        Format a currency amount for display.

        Args:
            amount: The amount to format
            show_symbol: Override the default symbol display setting

        Returns:
            Formatted currency string
        """
        show_symbol = (
            show_symbol if show_symbol is not None else self.show_currency_symbol
        )

        rounded = round(amount, self.decimal_places)
        if self.decimal_places > 0:
            formatted = f"{rounded:,.{self.decimal_places}f}"
        else:
            formatted = f"{int(rounded):,}"

        if show_symbol:
            return f"{self.currency_symbol}{formatted}"
        return formatted

    def format_percentage(self, percent: float, decimal_places: int = 2) -> str:
        """
        Format a percentage for display.

        Args:
            percent: The value in percent units (4 = 4%)
            decimal_places: Number of decimal places to show

        Returns:
            Formatted percentage string
        """
        return f"{percent:.{decimal_places}f}%"


def months_between(start_year: int, start_month: int, end_year: int, end_month: int) -> int:
    """
    Calendar month difference between two months.

    Jan 2024 -> Jan 2025 is 12. Snapshots are treated as monthly even when
    spacing is irregular, so this is the duration used for milestones.
    """
    return (end_year - start_year) * 12 + (end_month - start_month)


def shift_month(year: int, month: int, delta: int) -> MonthRef:
    """Move a month forward (positive delta) or backward (negative delta)."""
    index = year * 12 + (month - 1) + delta
    return MonthRef(year=index // 12, month=index % 12 + 1)


def format_month_label(year: int, month: int) -> str:
    """Format a month as MM/YY."""
    return f"{month:02d}/{year % 100:02d}"


def format_period_label(start: MonthRef, end: MonthRef) -> str:
    """Format a period as 'MM/YY - MM/YY'."""
    return f"{start.label()} - {end.label()}"


def to_date(value: Union[date, datetime]) -> date:
    """Normalize a date or datetime to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def get_current_year() -> int:
    """Get the current year."""
    return datetime.now().year


def get_today() -> date:
    """Get today's date."""
    return date.today()
