"""
Time range resolution and month arithmetic for the evolution view.

Range presets only move the window bounds; bucketing is always monthly.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

RANGE_ALL = "all"
RANGE_CUSTOM = "custom"

# Months back from today for each rolling preset
ROLLING_PRESETS = {"6m": 6, "12m": 12, "24m": 24}

RANGE_LABELS = {
    "6m": "Últimos 6 meses",
    "12m": "Últimos 12 meses",
    "24m": "Últimos 24 meses",
    "ytd": "Año actual (YTD)",
    RANGE_CUSTOM: "Rango personalizado",
    RANGE_ALL: "Todo el historial",
}


@dataclass(frozen=True)
class RangeSpec:
    """A requested window: a preset name, or explicit ISO dates (which win when both are given)."""
    preset: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass(frozen=True)
class ResolvedRange:
    key: str
    label: str
    start: Optional[date]  # None = unbounded ("all")
    end: date


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_start(day: date) -> date:
    return day.replace(day=1)


def iter_month_starts(start: date, end: date) -> Iterator[date]:
    """First day of every month from start's month to end's month, inclusive."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def _parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def _all_range(today: date) -> ResolvedRange:
    return ResolvedRange(key=RANGE_ALL, label=RANGE_LABELS[RANGE_ALL], start=None, end=today)


def resolve_range(spec: Optional[RangeSpec], today: date, default_preset: str = "12m") -> ResolvedRange:
    """
    Turn a RangeSpec into concrete dates.

    Explicit start/end dates take precedence over the preset. Anything that
    cannot be understood (unknown preset, unparseable or inverted dates)
    resolves to the full history instead of failing the request.
    """
    spec = spec or RangeSpec()

    if spec.start_date and spec.end_date:
        start = _parse_iso_date(spec.start_date)
        end = _parse_iso_date(spec.end_date)
        if start is None or end is None or start > end:
            logger.warning(
                f"Invalid custom range startDate={spec.start_date!r} endDate={spec.end_date!r}; "
                f"falling back to full history"
            )
            return _all_range(today)
        return ResolvedRange(key=RANGE_CUSTOM, label=RANGE_LABELS[RANGE_CUSTOM], start=start, end=end)

    preset = spec.preset if spec.preset is not None else default_preset

    if preset in ROLLING_PRESETS:
        start = add_months(today, -ROLLING_PRESETS[preset])
        return ResolvedRange(key=preset, label=RANGE_LABELS[preset], start=start, end=today)

    if preset == "ytd":
        return ResolvedRange(key=preset, label=RANGE_LABELS[preset], start=date(today.year, 1, 1), end=today)

    if preset != RANGE_ALL:
        logger.warning(f"Unrecognized evolution range {preset!r}; falling back to full history")
    return _all_range(today)
