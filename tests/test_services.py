"""
Service-level tests: scoring pipeline, lookups and reminders.
"""

from datetime import date, datetime, timedelta

import pytest

from guthealth import crud
from guthealth.health_scoring.exceptions import NotFoundError, ValidationError
from guthealth.health_scoring.services import HealthScoreService
from guthealth.models import Notification
from guthealth.services.notification_service import NotificationService, time_ago
from guthealth.utils.timezone import utcnow

BAD = {"shape": "type_1", "color": "red", "feeling": "painful", "frequency": 5, "has_blood": True, "has_pus": True}


def notifications_for(db, user):
    return db.query(Notification).filter(Notification.user_id == user.id).all()


class TestScoringPipeline:
    def test_score_record_stores_live_score(self, db, user, make_record):
        record = make_record(user)

        score = HealthScoreService(db).score_record(record)

        assert score.total_score == 98
        assert score.health_level == "excellent"
        assert score.record_id == record.id
        assert score.score_date == record.record_date
        assert notifications_for(db, user) == []

    def test_bad_record_raises_health_reminder(self, db, user, make_record):
        record = make_record(user, **BAD)

        HealthScoreService(db).score_record(record)

        [notification] = notifications_for(db, user)
        assert notification.type == "health"
        assert notification.related_id == record.id
        assert notification.params["health_level"] == "bad"
        assert notification.params["score"] == 1

    def test_disabled_notifications_are_respected(self, db, user, make_record):
        user.notifications_enabled = False
        db.commit()
        record = make_record(user, **BAD)

        HealthScoreService(db).score_record(record)

        assert notifications_for(db, user) == []

    def test_deleting_latest_record_rescores_day(self, db, user, make_record):
        service = HealthScoreService(db)
        first = make_record(user, datetime(2024, 5, 13, 8))
        second = make_record(user, datetime(2024, 5, 13, 9), color="red")
        service.score_record(first, notify=False)
        service.score_record(second, notify=False)
        assert service.repo.find_one(user.id, date(2024, 5, 13)).total_score == 77

        crud.health_record.soft_delete(db, db_obj=second)
        service.on_record_deleted(second)

        live = service.repo.find_one(user.id, date(2024, 5, 13))
        assert live.record_id == first.id
        assert live.total_score == 98

    def test_deleting_only_record_clears_day(self, db, user, make_record):
        service = HealthScoreService(db)
        record = make_record(user, datetime(2024, 5, 13, 8))
        service.score_record(record, notify=False)

        crud.health_record.soft_delete(db, db_obj=record)
        service.on_record_deleted(record)

        assert service.get_daily_score(user.id, date(2024, 5, 13))["exists"] is False

    def test_moving_record_to_another_day(self, db, user, make_record):
        service = HealthScoreService(db)
        stays = make_record(user, datetime(2024, 5, 13, 7), color="red")
        moves = make_record(user, datetime(2024, 5, 13, 8))
        service.score_record(stays, notify=False)
        service.score_record(moves, notify=False)

        moves.record_time = datetime(2024, 5, 14, 8)
        moves.record_date = date(2024, 5, 14)
        db.commit()
        service.on_record_updated(moves, date(2024, 5, 13))

        assert service.repo.find_one(user.id, date(2024, 5, 14)).record_id == moves.id
        assert service.repo.find_one(user.id, date(2024, 5, 13)).record_id == stays.id

    def test_recalculate_without_record(self, db, user):
        with pytest.raises(NotFoundError):
            HealthScoreService(db).recalculate(user.id, date(2024, 5, 13))

    def test_recalculate(self, db, user, make_record):
        make_record(user, datetime(2024, 5, 13, 8))

        data = HealthScoreService(db).recalculate(user.id, date(2024, 5, 13))

        assert data["total_score"] == 98
        assert data["level_name"] == "Excellent"
        assert data["related_records"][0]["shape"] == "type_4"


class TestLookups:
    def test_missing_day(self, db, user):
        result = HealthScoreService(db).get_daily_score(user.id, date(2024, 5, 13))
        assert result["exists"] is False
        assert "2024-05-13" in result["message"]

    def test_score_detail_is_owner_only(self, db, user, other_user, make_record):
        service = HealthScoreService(db)
        score = service.score_record(make_record(user), notify=False)

        detail = service.get_score_detail(user.id, score.id)
        assert detail["date"] == score.score_date.isoformat()
        assert detail["level_description"]
        with pytest.raises(NotFoundError):
            service.get_score_detail(other_user.id, score.id)

    def test_invalid_month(self, db, user):
        with pytest.raises(ValidationError):
            HealthScoreService(db).get_month_trend(user.id, 2024, 13)

    def test_history_pages(self, db, user, make_record):
        service = HealthScoreService(db)
        for day in (1, 2, 3):
            service.score_record(make_record(user, datetime(2024, 5, day, 8)), notify=False)

        page = service.get_history(user.id, page=1, limit=2)

        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert [d["date"] for d in page["data"]] == ["2024-05-03", "2024-05-02"]


class TestStatistics:
    def test_compare_rejects_reversed_range(self, db, user):
        with pytest.raises(ValidationError):
            HealthScoreService(db).compare_periods(
                user.id, date(2024, 1, 7), date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 14)
            )

    def test_compare_uses_the_days_live_score(self, db, user, make_record):
        service = HealthScoreService(db)
        early = make_record(user, datetime(2024, 1, 2, 8), color="red")
        late = make_record(user, datetime(2024, 1, 2, 9))
        service.score_record(early, notify=False)
        service.score_record(late, notify=False)

        result = service.compare_periods(
            user.id, date(2024, 1, 1), date(2024, 1, 7), date(2024, 1, 8), date(2024, 1, 14)
        )

        assert result["period_1"]["total_records"] == 2
        assert result["period_1"]["average_health_score"] == 98
        assert result["period_2"]["total_records"] == 0
        assert result["comparison"] == {"record_count_change": -2}

    @pytest.mark.parametrize("date_range", ["30", "weekdays", "0days", "1000days", "7 days"])
    def test_invalid_average_range(self, db, user, date_range):
        with pytest.raises(ValidationError):
            HealthScoreService(db).get_average_score(user.id, date_range)

    def test_average_score(self, db, user, make_record):
        service = HealthScoreService(db)
        service.score_record(make_record(user, utcnow()), notify=False)
        service.score_record(make_record(user, utcnow() - timedelta(days=2), color="red"), notify=False)
        service.score_record(make_record(user, utcnow() - timedelta(days=20), **BAD), notify=False)

        assert service.get_average_score(user.id, "7days") == {"average_score": 87.5, "date_range": "7days"}
        assert service.get_average_score(user.id, "all")["average_score"] == 58.67


class TestReminders:
    def test_inactivity_reminder(self, db, user, make_record):
        make_record(user, utcnow() - timedelta(days=5))

        result = HealthScoreService(db).check_reminders(user.id)

        assert result["created"] is True
        assert result["health_data"]["days_without_record"] == 5
        [notification] = notifications_for(db, user)
        assert "5 days" in notification.content

    def test_nothing_to_report(self, db, user, make_record):
        make_record(user)

        result = HealthScoreService(db).check_reminders(user.id)

        assert result == {
            "created": False,
            "notification_id": None,
            "health_data": {"score": None, "health_level": None, "trend": "stable", "days_without_record": 0},
        }

    def test_declining_trend_reminder(self, db, user):
        notification = NotificationService(db).create_health_reminder(
            user.id, {"score": 70, "health_level": "fair", "trend": "declining", "days_without_record": 0}
        )
        assert notification is not None
        assert "dropping" in notification.content


class TestTimeAgo:
    NOW = datetime(2024, 5, 20, 12, 0)

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=5), "5 minutes ago"),
            (timedelta(hours=3), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
            (timedelta(days=10), "05-10"),
        ],
    )
    def test_buckets(self, delta, expected):
        assert time_ago(self.NOW - delta, self.NOW) == expected
