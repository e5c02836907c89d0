from __future__ import annotations

import logging
import math
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guthealth import crud
from guthealth.core.config import settings
from guthealth.models.health_record import HealthRecord
from guthealth.services.notification_service import NotificationService
from guthealth.utils.timezone import today_local, to_local_date
from .advice import generate_advice
from .engine import calculate_score, field_value
from .exceptions import InvalidPeriodError, NotFoundError, ValidationError
from .levels import HealthLevelPolicy, default_policy
from .metrics import health_scores_computed_total
from .models import HealthScore
from .repository import ScoreRepository
from . import trends

logger = logging.getLogger(__name__)

DATE_RANGE_PATTERN = re.compile(r"^(\d{1,3})days$")


def _record_summary(record: HealthRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "record_time": record.record_time.isoformat(sep=" ", timespec="seconds"),
        "color": record.color,
        "shape": record.shape,
        "feeling": record.feeling,
        "symptoms": record.symptoms or [],
        "frequency": record.frequency,
        "has_blood": record.has_blood,
        "has_mucus": record.has_mucus,
        "notes": record.notes,
    }


def _details(score: HealthScore) -> Dict[str, Any]:
    return {
        "poop_health_score": score.poop_health_score,
        "frequency_health_score": score.frequency_health_score,
        "symptom_health_score": score.symptom_health_score,
    }


class HealthScoreService:
    def __init__(self, db: Session, policy: Optional[HealthLevelPolicy] = None):
        self.db = db
        self.policy = policy or default_policy()
        self.repo = ScoreRepository(db)

    # Scoring pipeline
    def score_record(self, record: HealthRecord, notify: bool = True) -> HealthScore:
        """Score ``record`` and make it the live score of its day."""
        result = calculate_score(record, self.policy)
        score = self.repo.save_score(record.user_id, record.record_date, result, record.id)
        health_scores_computed_total.labels(level=result.level).inc()
        if notify:
            self._remind_if_needed(record, score)
        return score

    def _remind_if_needed(self, record: HealthRecord, score: HealthScore) -> None:
        user = crud.user.get(self.db, record.user_id)
        if user is not None and not user.notifications_enabled:
            return
        day = score.score_date
        recent = self.repo.find_range(
            record.user_id, day - timedelta(days=settings.ADVICE_LOOKBACK_DAYS), day, fields=["total_score"]
        )
        health_data = {
            "score": score.total_score,
            "health_level": score.health_level,
            "trend": trends.classify_trend([r["total_score"] for r in recent]),
            "days_without_record": 0,
            "record_id": record.id,
        }
        # Reminders are best-effort; a failure must not undo the stored score
        try:
            NotificationService(self.db).create_health_reminder(record.user_id, health_data)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create health reminder for user {record.user_id}")

    def refresh_day(self, user_id: int, day: date) -> Optional[HealthScore]:
        """Re-derive a day's score from its latest live record if the day has none."""
        if self.repo.find_one(user_id, day) is not None:
            return None
        record = crud.health_record.latest_for_day(self.db, user_id=user_id, day=day)
        if record is None:
            return None
        return self.score_record(record, notify=False)

    def on_record_updated(self, record: HealthRecord, previous_day: date) -> HealthScore:
        self.repo.soft_delete_for_record(record.user_id, record.id)
        score = self.score_record(record)
        if previous_day != record.record_date:
            self.refresh_day(record.user_id, previous_day)
        return score

    def on_record_deleted(self, record: HealthRecord) -> None:
        self.repo.soft_delete_for_record(record.user_id, record.id)
        self.refresh_day(record.user_id, record.record_date)

    def recalculate(self, user_id: int, day: date) -> Dict[str, Any]:
        record = crud.health_record.latest_for_day(self.db, user_id=user_id, day=day)
        if record is None:
            raise NotFoundError(f"No health record on {day.isoformat()}")
        score = self.score_record(record, notify=False)
        return self._score_data(score)

    # Daily lookup
    def _score_data(self, score: HealthScore) -> Dict[str, Any]:
        record = score.record
        return {
            "id": score.id,
            "total_score": score.total_score,
            "health_level": score.health_level,
            "level_name": self.policy.level_name(score.health_level),
            "score_date": score.score_date.isoformat(),
            "details": _details(score),
            "health_description": score.health_description,
            "recommendations": score.recommendations or [],
            "related_records": [_record_summary(record)] if record is not None and record.deleted_at is None else [],
        }

    def get_daily_score(self, user_id: int, day: date) -> Dict[str, Any]:
        score = self.repo.find_one(user_id, day)
        if score is None:
            return {"exists": False, "message": f"No health score for {day.isoformat()}"}
        return {"exists": True, "data": self._score_data(score)}

    def get_today_score(self, user_id: int) -> Dict[str, Any]:
        return self.get_daily_score(user_id, today_local())

    # Rollups
    def get_week_trend(self, user_id: int, day: Optional[date] = None) -> Dict[str, Any]:
        day = day or today_local()
        start, end = trends.week_bounds(day)
        rows = self.repo.find_range(user_id, start, end, fields=["total_score", "health_level"])
        return trends.build_week_rollup(rows, day)

    def get_month_trend(self, user_id: int, year: Optional[int] = None, month: Optional[int] = None) -> Dict[str, Any]:
        today = today_local()
        year = year or today.year
        month = month or today.month
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}")
        start, end = trends.month_bounds(year, month)
        rows = self.repo.find_range(user_id, start, end, fields=["total_score", "health_level"])
        return trends.build_month_rollup(rows, year, month)

    def get_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Dict[str, Any]:
        rows, total = self.repo.paginate(user_id, page, limit, start, end)
        return {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
            "data": [
                {
                    "id": s.id,
                    "date": s.score_date.isoformat(),
                    "total_score": s.total_score,
                    "health_level": s.health_level,
                    "details": _details(s),
                }
                for s in rows
            ],
        }

    def get_score_detail(self, user_id: int, score_id: int) -> Dict[str, Any]:
        score = self.repo.find_by_id(user_id, score_id)
        if score is None:
            raise NotFoundError("Health score not found")
        data = self._score_data(score)
        data.update({
            "date": data.pop("score_date"),
            "level_description": self.policy.level_description(score.health_level),
            "created_at": score.created_at.isoformat(sep=" ", timespec="seconds"),
            "updated_at": score.updated_at.isoformat(sep=" ", timespec="seconds"),
        })
        return data

    def get_level_distribution(self, user_id: int, period: str = "week", day: Optional[date] = None) -> Dict[str, Any]:
        day = day or today_local()
        try:
            start, end = trends.period_bounds(period, day)
        except InvalidPeriodError:
            logger.warning(f"Rejected distribution period {period!r} for user {user_id}")
            raise
        rows = self.repo.find_range(user_id, start, end, fields=["health_level"])
        result = trends.level_distribution(rows, self.policy)
        return {
            "period": period,
            "date_range": {"start": start.isoformat(), "end": end.isoformat()},
            **result,
        }

    def get_average_trend(self, user_id: int, type: str = "week", count: int = 4) -> Dict[str, Any]:
        try:
            windows = trends.average_trend_windows(type, count, today_local())
        except InvalidPeriodError:
            logger.warning(f"Rejected average trend type {type!r} for user {user_id}")
            raise
        if not windows:
            return {"type": type, "count": count, "trends": []}
        # One fetch covering every window, bucketed in memory
        rows = self.repo.find_range(user_id, windows[0]["start"], windows[-1]["end"], fields=["total_score"])
        return {"type": type, "count": count, "trends": trends.bucket_average_trend(windows, rows)}

    # Advice
    def get_health_advice(self, user_id: int) -> Dict[str, Any]:
        today = today_local()
        rows = self.repo.find_range(
            user_id,
            today - timedelta(days=settings.ADVICE_LOOKBACK_DAYS),
            today,
            fields=["total_score", "health_level", "recommendations"],
        )
        return generate_advice(rows)

    # Statistics
    def get_score_trend(self, user_id: int, days: int = 30) -> Dict[str, Any]:
        end = today_local()
        start = end - timedelta(days=days)
        rows = self.repo.find_range(user_id, start, end, fields=["total_score"])
        return {
            "trend": [{"date": r["score_date"].isoformat(), "score": r["total_score"]} for r in rows],
            "days": days,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }

    def get_average_score(self, user_id: int, date_range: str = "30days") -> Dict[str, Any]:
        """Mean live score over ``<N>days`` ending today, or over everything for ``all``."""
        end = today_local()
        if date_range == "all":
            start = date.min
        else:
            match = DATE_RANGE_PATTERN.match(date_range)
            if not match or int(match.group(1)) < 1:
                raise ValidationError(f"Invalid date range: {date_range!r}", {"date_range": date_range})
            start = end - timedelta(days=int(match.group(1)))
        rows = self.repo.find_range(user_id, start, end, fields=["total_score"])
        return {
            "average_score": trends.average_score([r["total_score"] for r in rows]),
            "date_range": date_range,
        }

    def compare_periods(
        self,
        user_id: int,
        start_1: date,
        end_1: date,
        start_2: date,
        end_2: date,
    ) -> Dict[str, Any]:
        for start, end in ((start_1, end_1), (start_2, end_2)):
            if start > end:
                raise ValidationError("start date must not be after end date",
                                      {"start_date": start.isoformat(), "end_date": end.isoformat()})
        first = crud.health_record.get_with_scores(self.db, user_id=user_id, start=start_1, end=end_1)
        second = crud.health_record.get_with_scores(self.db, user_id=user_id, start=start_2, end=end_2)
        return trends.compare_summaries(
            trends.summarize_period(start_1, end_1, first),
            trends.summarize_period(start_2, end_2, second),
        )

    # Reminders
    def check_reminders(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Evaluate the user's current state and raise a health reminder if warranted."""
        today = today_local()
        last_time = crud.health_record.latest_record_time(self.db, user_id=user_id)
        days_idle = (today - to_local_date(last_time)).days if last_time else 0
        recent = self.repo.find_range(
            user_id, today - timedelta(days=settings.ADVICE_LOOKBACK_DAYS), today,
            fields=["total_score", "health_level"],
        )
        latest = recent[-1] if recent else None
        health_data = {
            "score": field_value(latest, "total_score") if latest else None,
            "health_level": field_value(latest, "health_level") if latest else None,
            "trend": trends.classify_trend([r["total_score"] for r in recent]),
            "days_without_record": days_idle,
        }
        notification = NotificationService(self.db).create_health_reminder(user_id, health_data)
        return {"created": notification is not None, "notification_id": notification.id if notification else None,
                "health_data": health_data}
