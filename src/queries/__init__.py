"""Report building package."""

from src.queries.reports import (
    InvalidRangeError,
    available_years,
    monthly_report,
    parse_period,
    parse_year,
    yearly_summary,
)

__all__ = [
    "InvalidRangeError",
    "available_years",
    "monthly_report",
    "parse_period",
    "parse_year",
    "yearly_summary",
]
