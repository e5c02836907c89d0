"""Pure reductions over already-fetched score rows.

Rows may be ``HealthScore`` instances, SQLAlchemy result rows or plain dicts;
only ``score_date``, ``total_score``, ``health_level`` and (for tie-breaks)
``created_at`` are read. Weeks start on Monday.
"""

import calendar
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .engine import field_value, round_half_up
from .exceptions import InvalidPeriodError
from .levels import LEVELS, HealthLevelPolicy

DISTRIBUTION_PERIODS = ("week", "month", "quarter", "year")
AVERAGE_TREND_TYPES = ("week", "month")

TREND_THRESHOLD = 10


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def average_score(values: Sequence[float]) -> float:
    """Mean rounded to 2 dp; 0 for an empty sequence."""
    return round_half_up(mean(values), 2) if values else 0


def classify_trend(scores: Sequence[float]) -> str:
    """Compare the mean of the first half against the rest.

    For odd counts the second half gets the extra element.
    """
    if len(scores) < 2:
        return "stable"
    half = len(scores) // 2
    diff = mean(scores[half:]) - mean(scores[:half])
    if diff > TREND_THRESHOLD:
        return "improving"
    if diff < -TREND_THRESHOLD:
        return "declining"
    return "stable"


# --- Calendar windows ---

def week_bounds(day: date) -> Tuple[date, date]:
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def quarter_bounds(day: date) -> Tuple[date, date]:
    first_month = 3 * ((day.month - 1) // 3) + 1
    start = date(day.year, first_month, 1)
    _, end = month_bounds(day.year, first_month + 2)
    return start, end


def period_bounds(period: str, day: date) -> Tuple[date, date]:
    if period == "week":
        return week_bounds(day)
    if period == "month":
        return month_bounds(day.year, day.month)
    if period == "quarter":
        return quarter_bounds(day)
    if period == "year":
        return date(day.year, 1, 1), date(day.year, 12, 31)
    raise InvalidPeriodError(period, DISTRIBUTION_PERIODS)


def shift_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def average_trend_windows(kind: str, count: int, today: date) -> List[Dict[str, Any]]:
    """Oldest-first windows ending with the one that contains ``today``."""
    if kind not in AVERAGE_TREND_TYPES:
        raise InvalidPeriodError(kind, AVERAGE_TREND_TYPES)
    windows = []
    for i in range(count - 1, -1, -1):
        if kind == "week":
            start, end = week_bounds(today - timedelta(weeks=i))
            label = f"Week {start.isocalendar()[1]}"
        else:
            year, month = shift_months(today.year, today.month, -i)
            start, end = month_bounds(year, month)
            label = start.strftime("%Y-%m")
        windows.append({"start": start, "end": end, "label": label})
    return windows


# --- Row helpers ---

def _day(row: Any) -> Optional[date]:
    return field_value(row, "score_date", "date")


def _score(row: Any) -> int:
    return field_value(row, "total_score", "score", default=0) or 0


def _level(row: Any) -> Optional[str]:
    return field_value(row, "health_level", "level")


def latest_per_day(rows: Iterable[Any]) -> Dict[date, Any]:
    """One row per date; on duplicates the newest ``created_at`` wins."""
    by_day: Dict[date, Any] = {}
    for row in rows:
        day = _day(row)
        current = by_day.get(day)
        if current is None:
            by_day[day] = row
            continue
        created, current_created = field_value(row, "created_at"), field_value(current, "created_at")
        if created is not None and (current_created is None or created > current_created):
            by_day[day] = row
    return by_day


def trend_point(row: Any) -> Dict[str, Any]:
    return {"date": _day(row).isoformat(), "score": _score(row), "level": _level(row)}


def in_range(rows: Iterable[Any], start: date, end: date) -> List[Any]:
    return [row for row in rows if start <= _day(row) <= end]


# --- Rollups ---

def build_week_rollup(rows: Iterable[Any], day: date) -> Dict[str, Any]:
    start, end = week_bounds(day)
    by_day = latest_per_day(in_range(rows, start, end))

    daily = []
    for offset in range(7):
        current = start + timedelta(days=offset)
        row = by_day.get(current)
        daily.append({
            "date": current.isoformat(),
            "day_of_week": current.strftime("%A"),
            "total_score": _score(row) if row is not None else 0,
            "health_level": _level(row) if row is not None else None,
            "has_record": row is not None,
        })

    present = [_score(row) for row in by_day.values()]
    return {
        "week_range": {"start": start.isoformat(), "end": end.isoformat()},
        "average_score": average_score(present),
        "daily_scores": daily,
        "total_days_recorded": len(present),
    }


def build_month_rollup(rows: Iterable[Any], year: int, month: int) -> Dict[str, Any]:
    month_start, month_end = month_bounds(year, month)
    by_day = latest_per_day(in_range(rows, month_start, month_end))
    ordered = [by_day[d] for d in sorted(by_day)]

    weekly = []
    week_start, _ = week_bounds(month_start)
    while week_start <= month_end:
        # Clip the Monday..Sunday window to the month on both sides
        window_start = max(week_start, month_start)
        window_end = min(week_start + timedelta(days=6), month_end)
        week_rows = in_range(ordered, window_start, window_end)
        weekly.append({
            "week_range": {"start": window_start.isoformat(), "end": window_end.isoformat()},
            "average_score": average_score([_score(r) for r in week_rows]),
            "days_recorded": len(week_rows),
            "scores": [trend_point(r) for r in week_rows],
        })
        week_start += timedelta(weeks=1)

    return {
        "month": {"year": year, "month": month, "display": month_start.strftime("%B %Y")},
        "total_average_score": average_score([_score(r) for r in ordered]),
        "total_days_recorded": len(ordered),
        "weekly_data": weekly,
        "daily_scores": [trend_point(r) for r in ordered],
    }


def level_distribution(rows: Iterable[Any], policy: Optional[HealthLevelPolicy] = None) -> Dict[str, Any]:
    """Count per level over every known level; rows with unknown levels count
    towards the total but not towards any level."""
    policy = policy or HealthLevelPolicy
    counts = {level: 0 for level in LEVELS}
    total = 0
    for row in rows:
        total += 1
        level = _level(row)
        if level in counts:
            counts[level] += 1

    return {
        "distribution": [
            {
                "level": level,
                "level_name": policy.level_name(level),
                "count": count,
                "percentage": round_half_up(count / total * 100) if total else 0,
            }
            for level, count in counts.items()
        ],
        "total_records": total,
    }


def bucket_average_trend(windows: List[Dict[str, Any]], rows: Iterable[Any]) -> List[Dict[str, Any]]:
    rows = list(rows)
    trends = []
    for window in windows:
        scores = [_score(r) for r in in_range(rows, window["start"], window["end"])]
        trends.append({
            "period": {
                "start": window["start"].isoformat(),
                "end": window["end"].isoformat(),
                "label": window["label"],
            },
            "average_score": average_score(scores),
            "records_count": len(scores),
        })
    return trends


# --- Period comparison over records ---

def summarize_period(start: date, end: date, records: Sequence[Any]) -> Dict[str, Any]:
    """Summary of the records in one period.

    ``records`` carry ``frequency`` and the ``total_score`` of their current
    score (None when unscored, counted as 0). Averages are omitted for an
    empty period.
    """
    summary: Dict[str, Any] = {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "total_records": len(records),
    }
    if records:
        summary["average_frequency"] = round_half_up(
            mean([field_value(r, "frequency", default=0) or 0 for r in records]), 1
        )
        summary["average_health_score"] = round_half_up(mean([_score(r) for r in records]))
    return summary


def compare_summaries(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
    """Changes from ``first`` to ``second``."""
    comparison: Dict[str, Any] = {
        "record_count_change": second["total_records"] - first["total_records"],
    }
    if "average_health_score" in first and "average_health_score" in second:
        comparison["score_change"] = second["average_health_score"] - first["average_health_score"]
        comparison["frequency_change"] = round_half_up(
            second["average_frequency"] - first["average_frequency"], 1
        )
    return {"period_1": first, "period_2": second, "comparison": comparison}
