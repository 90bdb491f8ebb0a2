"""
Prorata temporis for rent and charges (jours d'occupation / jours de l'année).
Both boundary days are counted as occupied.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

RATIO_PRECISION = Decimal("0.0001")


@dataclass(frozen=True)
class ProrataResult:
    occupied_days: int
    total_days_in_year: int
    ratio: Decimal


def days_in_year(year: int) -> int:
    # Simplified rule: century years (e.g. 2100) are counted as leap years.
    return 366 if year % 4 == 0 else 365


def _as_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _occupied_days(start: date, end: date, window_start: date, window_end: date) -> int:
    effective_start = max(start, window_start)
    effective_end = min(end, window_end)
    return max(0, (effective_end - effective_start).days + 1)


def compute_prorata(start_date, end_date, year: int) -> ProrataResult:
    """
    Compute the share of `year` covered by the occupancy window [start_date, end_date].

    Dates are `date` or `datetime` objects, or ISO strings (YYYY-MM-DD). A window lying outside
    the year, or ending before it starts, yields 0 days.

    Malformed dates, or a year outside the calendar range, do not raise: the
    ratio is NaN while occupied_days stays an integer (0), as callers are
    expected to validate their input.
    """
    total_days = days_in_year(year)
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start is None or end is None or not MINYEAR <= year <= MAXYEAR:
        logger.warning("Prorata: date invalide (%r, %r, %r)", start_date, end_date, year)
        return ProrataResult(occupied_days=0, total_days_in_year=total_days, ratio=Decimal("NaN"))

    occupied = _occupied_days(start, end, date(year, 1, 1), date(year, 12, 31))
    ratio = (Decimal(occupied) / Decimal(total_days)).quantize(RATIO_PRECISION, rounding=ROUND_HALF_UP)
    return ProrataResult(occupied_days=occupied, total_days_in_year=total_days, ratio=ratio)


def month_prorata(period: str, start_date, end_date) -> Decimal:
    """
    Share of the billing month `period` (YYYY-MM) covered by the occupancy window.
    Returned at full precision; amounts derived from it are rounded by the caller.
    NaN for malformed dates.
    """
    year, month = (int(part) for part in period.split("-"))
    month_days = calendar.monthrange(year, month)[1]
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start is None or end is None:
        logger.warning("Prorata mensuel: date invalide (%r, %r)", start_date, end_date)
        return Decimal("NaN")
    occupied = _occupied_days(
        start,
        end,
        date(year, month, 1),
        date(year, month, month_days),
    )
    return Decimal(occupied) / Decimal(month_days)
