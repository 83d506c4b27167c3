"""Time range presets and calendar period bucketing."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from .utils import parse_date


MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"
GRANULARITIES = (MONTHLY, QUARTERLY, YEARLY)

# Lookback in months from the reference date; ALL is handled separately
PRESET_LOOKBACK_MONTHS = {
    "1M": 1,
    "3M": 3,
    "6M": 6,
    "1Y": 12,
    "2Y": 24,
    "3Y": 36,
    "5Y": 60,
}

PRESET_GRANULARITY = {
    "1M": MONTHLY,
    "3M": MONTHLY,
    "6M": MONTHLY,
    "1Y": QUARTERLY,
    "2Y": QUARTERLY,
    "3Y": YEARLY,
    "5Y": YEARLY,
    "ALL": YEARLY,
}

PRESET_LABELS = {
    "1M": "Last Month",
    "3M": "Last 3 Months",
    "6M": "Last 6 Months",
    "1Y": "Last Year",
    "2Y": "Last 2 Years",
    "3Y": "Last 3 Years",
    "5Y": "Last 5 Years",
    "ALL": "All Time",
}

# Far enough back for any realistic data
ALL_TIME_START = datetime(2000, 1, 1)

MONTH_ABBREVS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                 "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_STEP_MONTHS = {MONTHLY: 1, QUARTERLY: 3, YEARLY: 12}


class InvalidPresetError(ValueError):
    """Unrecognized time range preset."""

    pass


@dataclass(frozen=True)
class TimeRange:
    """Closed interval [start, end] used for filtering and bucketing."""

    start: datetime
    end: datetime
    label: str = ""
    granularity: str | None = None

    def contains(self, moment: datetime) -> bool:
        """Check if a moment falls inside the range (inclusive)."""
        return self.start <= moment <= self.end

    def to_dict(self) -> dict[str, Any]:
        """Serialize the range with ISO calendar days."""
        return {
            "start": self.start.date().isoformat(),
            "end": self.end.date().isoformat(),
            "label": self.label,
            "granularity": self.granularity,
        }


@dataclass(frozen=True)
class PeriodBucket:
    """One calendar-aligned bucket; the label doubles as its key."""

    label: str
    start: datetime
    end: datetime


def to_day(value: date | datetime | str | None = None) -> datetime:
    """Normalize a reference date to midnight; None means today."""
    if value is None:
        today = date.today()
        return datetime(today.year, today.month, today.day)
    return parse_date(value)


def end_of_day(moment: datetime) -> datetime:
    """Return 23:59:59.999 on the same calendar day."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move a datetime by whole months, clamping the day to the month length."""
    month_index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def get_granularity(preset: str) -> str:
    """Get bucket granularity for a preset.

    1M, 3M, 6M -> monthly; 1Y, 2Y -> quarterly; 3Y, 5Y, ALL -> yearly.

    Raises:
        InvalidPresetError: If the preset is unknown.
    """
    try:
        return PRESET_GRANULARITY[preset]
    except (KeyError, TypeError):
        raise InvalidPresetError(f"Unknown time range preset: {preset!r}") from None


def resolve_time_range(
    preset: str,
    reference_date: date | datetime | str | None = None,
) -> TimeRange:
    """Convert a preset into a concrete interval and granularity.

    Args:
        preset: One of "1M", "3M", "6M", "1Y", "2Y", "3Y", "5Y", "ALL".
        reference_date: Last day of the range (defaults to today).

    Returns:
        TimeRange from the lookback day at 00:00:00.000 to the reference day
        at 23:59:59.999.

    Raises:
        InvalidPresetError: If the preset is unknown.
    """
    granularity = get_granularity(preset)
    day = to_day(reference_date)

    if preset == "ALL":
        start = ALL_TIME_START
    else:
        start = shift_months(day, -PRESET_LOOKBACK_MONTHS[preset])

    return TimeRange(
        start=start,
        end=end_of_day(day),
        label=PRESET_LABELS[preset],
        granularity=granularity,
    )


def _check_granularity(granularity: str) -> None:
    if granularity not in _STEP_MONTHS:
        raise ValueError(f"Unknown granularity: {granularity!r}")


def get_start_of_period(moment: datetime, granularity: str) -> datetime:
    """Get the calendar-aligned start of the period containing a moment."""
    _check_granularity(granularity)
    if granularity == MONTHLY:
        month = moment.month
    elif granularity == QUARTERLY:
        month = (moment.month - 1) // 3 * 3 + 1
    else:
        month = 1
    return datetime(moment.year, month, 1)


def get_end_of_period(moment: datetime, granularity: str) -> datetime:
    """Get the nominal last millisecond of the period containing a moment."""
    start = get_start_of_period(moment, granularity)
    return shift_months(start, _STEP_MONTHS[granularity]) - timedelta(milliseconds=1)


def format_period_label(moment: datetime, granularity: str) -> str:
    """Format a period label: "Nov 2024", "Q4 2024" or "2024"."""
    _check_granularity(granularity)
    if granularity == MONTHLY:
        return f"{MONTH_ABBREVS[moment.month - 1]} {moment.year}"
    if granularity == QUARTERLY:
        return f"Q{(moment.month - 1) // 3 + 1} {moment.year}"
    return str(moment.year)


def generate_buckets(
    start: datetime,
    end: datetime,
    granularity: str,
) -> list[PeriodBucket]:
    """Enumerate contiguous calendar buckets covering [start, end].

    The first bucket starts at the boundary containing `start`; the last
    bucket's end is clamped to `end`.

    Raises:
        ValueError: If the granularity is unknown.
    """
    _check_granularity(granularity)
    step = _STEP_MONTHS[granularity]
    buckets: list[PeriodBucket] = []

    current = get_start_of_period(start, granularity)
    while current <= end:
        next_start = shift_months(current, step)
        bucket_end = next_start - timedelta(milliseconds=1)
        buckets.append(PeriodBucket(
            label=format_period_label(current, granularity),
            start=current,
            end=min(bucket_end, end),
        ))
        current = next_start

    return buckets


def get_ytd_range(reference_date: date | datetime | str | None = None) -> TimeRange:
    """Get Jan 1 through the reference day of the reference year."""
    day = to_day(reference_date)
    return TimeRange(
        start=datetime(day.year, 1, 1),
        end=end_of_day(day),
        label=f"YTD {day.year}",
    )


def get_previous_ytd_range(reference_date: date | datetime | str | None = None) -> TimeRange:
    """Get the prior year's window with the same day-of-year count.

    The end is Jan 1 of the prior year plus (day_of_year - 1) days. Leap
    years are not corrected; the window never runs past Dec 31.
    """
    day = to_day(reference_date)
    day_of_year = day.timetuple().tm_yday
    start = datetime(day.year - 1, 1, 1)
    last_day = min(
        start + timedelta(days=day_of_year - 1),
        datetime(day.year - 1, 12, 31),
    )
    return TimeRange(
        start=start,
        end=end_of_day(last_day),
        label=f"YTD {day.year - 1}",
    )


def get_month_range(year: int, month: int) -> TimeRange:
    """Get the full calendar month as a range labeled "December 2024"."""
    start = datetime(year, month, 1)
    last_day = calendar.monthrange(year, month)[1]
    return TimeRange(
        start=start,
        end=end_of_day(datetime(year, month, last_day)),
        label=f"{calendar.month_name[month]} {year}",
        granularity=MONTHLY,
    )


def get_last_month_range(reference_date: date | datetime | str | None = None) -> TimeRange:
    """Get the calendar month preceding the reference month."""
    previous = shift_months(to_day(reference_date).replace(day=1), -1)
    return get_month_range(previous.year, previous.month)


def get_month_before_last_range(reference_date: date | datetime | str | None = None) -> TimeRange:
    """Get the calendar month two months before the reference month."""
    previous = shift_months(to_day(reference_date).replace(day=1), -2)
    return get_month_range(previous.year, previous.month)


def get_previous_period_range(time_range: TimeRange) -> TimeRange:
    """Get the equally long window ending just before the range starts."""
    duration = time_range.end - time_range.start
    end = time_range.start - timedelta(milliseconds=1)
    return TimeRange(
        start=end - duration,
        end=end,
        label="Previous Period",
        granularity=time_range.granularity,
    )
