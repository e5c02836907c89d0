"""
HTTP tests for /health-scores and /statistics.
"""

from datetime import datetime, timedelta

from guthealth.health_scoring.advice import GENERAL_ADVICE
from guthealth.health_scoring.services import HealthScoreService
from guthealth.utils.timezone import today_local, utcnow

SCORES = "/api/v1/health-scores"
STATS = "/api/v1/statistics"


def scored(db, make_record, user, record_time=None, **overrides):
    record = make_record(user, record_time, **overrides)
    return HealthScoreService(db).score_record(record, notify=False)


class TestDailyScores:
    def test_today_without_score(self, client, auth_headers):
        response = client.get(f"{SCORES}/today", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["exists"] is False
        assert response.json()["data"] is None

    def test_daily_by_date(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, datetime(2024, 5, 13, 8))

        body = client.get(f"{SCORES}/daily?date=2024-05-13", headers=auth_headers).json()

        assert body["exists"] is True
        assert body["data"]["score_date"] == "2024-05-13"
        assert body["data"]["level_name"] == "Excellent"

    def test_daily_requires_date(self, client, auth_headers):
        assert client.get(f"{SCORES}/daily", headers=auth_headers).status_code == 422

    def test_detail_and_missing_detail(self, client, db, user, make_record, auth_headers, other_headers):
        score = scored(db, make_record, user)

        response = client.get(f"{SCORES}/{score.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["total_score"] == 98
        assert client.get(f"{SCORES}/{score.id}", headers=other_headers).status_code == 404
        assert client.get(f"{SCORES}/999", headers=auth_headers).status_code == 404

    def test_recalculate(self, client, db, user, make_record, auth_headers):
        make_record(user, datetime(2024, 5, 13, 8))

        response = client.post(f"{SCORES}/recalculate", json={"date": "2024-05-13"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["total_score"] == 98
        missing = client.post(f"{SCORES}/recalculate", json={"date": "2024-05-14"}, headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["detail"] == "No health record on 2024-05-14"


class TestRollups:
    def test_week(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, datetime(2024, 5, 14, 8))

        body = client.get(f"{SCORES}/week?date=2024-05-16", headers=auth_headers).json()

        assert body["week_range"] == {"start": "2024-05-13", "end": "2024-05-19"}
        assert len(body["daily_scores"]) == 7
        assert body["daily_scores"][1]["total_score"] == 98
        assert body["total_days_recorded"] == 1

    def test_month(self, client, auth_headers):
        body = client.get(f"{SCORES}/month?year=2024&month=2", headers=auth_headers).json()

        assert body["month"]["display"] == "February 2024"
        assert body["total_days_recorded"] == 0

    def test_month_out_of_range(self, client, auth_headers):
        assert client.get(f"{SCORES}/month?year=2024&month=13", headers=auth_headers).status_code == 422

    def test_history(self, client, db, user, make_record, auth_headers):
        for day in (1, 2, 3):
            scored(db, make_record, user, datetime(2024, 5, day, 8))

        body = client.get(f"{SCORES}/history?limit=2", headers=auth_headers).json()

        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert [item["date"] for item in body["data"]] == ["2024-05-03", "2024-05-02"]

    def test_distribution(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, datetime(2024, 5, 13, 8))
        scored(db, make_record, user, datetime(2024, 5, 14, 8), color="red")

        body = client.get(f"{SCORES}/distribution?period=month&date=2024-05-20", headers=auth_headers).json()

        assert body["date_range"] == {"start": "2024-05-01", "end": "2024-05-31"}
        assert body["total_records"] == 2
        by_level = {d["level"]: d["percentage"] for d in body["distribution"]}
        assert by_level == {"excellent": 50, "good": 50, "fair": 0, "poor": 0, "bad": 0}

    def test_distribution_unknown_period(self, client, auth_headers):
        response = client.get(f"{SCORES}/distribution?period=decade", headers=auth_headers)

        assert response.status_code == 400
        assert "decade" in response.json()["detail"]

    def test_average_trend(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user)

        body = client.get(f"{SCORES}/average-trend?type=month&count=2", headers=auth_headers).json()

        assert body["type"] == "month"
        assert len(body["trends"]) == 2
        assert body["trends"][-1]["average_score"] == 98
        assert body["trends"][-1]["period"]["label"] == today_local().strftime("%Y-%m")

    def test_average_trend_unknown_type(self, client, auth_headers):
        assert client.get(f"{SCORES}/average-trend?type=day", headers=auth_headers).status_code == 400

    def test_average_trend_count_bounds(self, client, auth_headers):
        assert client.get(f"{SCORES}/average-trend?count=0", headers=auth_headers).status_code == 422


class TestAdviceAndReminders:
    def test_advice_without_data(self, client, auth_headers):
        body = client.get(f"{SCORES}/advice", headers=auth_headers).json()

        assert body["has_recent_data"] is False
        assert body["general_advice"] == list(GENERAL_ADVICE)

    def test_advice_with_recent_scores(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, utcnow() - timedelta(days=1))
        scored(db, make_record, user, utcnow(), color="red")

        body = client.get(f"{SCORES}/advice", headers=auth_headers).json()

        assert body["recent_stats"]["days_analyzed"] == 2
        assert body["recent_stats"]["average_score"] == 87.5
        assert body["recent_stats"]["current_level"] == "excellent"

    def test_reminder_check(self, client, make_record, user, auth_headers):
        make_record(user, utcnow() - timedelta(days=6))

        body = client.post(f"{SCORES}/reminders/check", headers=auth_headers).json()

        assert body["created"] is True
        assert body["notification_id"] is not None
        unread = client.get("/api/v1/notifications/unread-count", headers=auth_headers).json()
        assert unread == {"unread_count": 1}


class TestStatistics:
    def test_score_trend(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, utcnow() - timedelta(days=3))
        scored(db, make_record, user, utcnow() - timedelta(days=40))

        body = client.get(f"{STATS}/score-trend?days=7", headers=auth_headers).json()

        assert body["days"] == 7
        assert len(body["trend"]) == 1
        assert body["trend"][0]["score"] == 98

    def test_average_score_bad_range(self, client, auth_headers):
        response = client.get(f"{STATS}/average-score?date_range=forever", headers=auth_headers)
        assert response.status_code == 422

    def test_compare(self, client, db, user, make_record, auth_headers):
        scored(db, make_record, user, datetime(2024, 1, 2, 8), color="red")
        scored(db, make_record, user, datetime(2024, 1, 9, 8))
        scored(db, make_record, user, datetime(2024, 1, 10, 8), frequency=2)

        response = client.get(
            f"{STATS}/compare",
            params={
                "start_date_1": "2024-01-01",
                "end_date_1": "2024-01-07",
                "start_date_2": "2024-01-08",
                "end_date_2": "2024-01-14",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["period_1"]["average_health_score"] == 77
        assert body["period_2"]["average_health_score"] == 98
        assert body["comparison"] == {"record_count_change": 1, "score_change": 21, "frequency_change": 0.5}

    def test_compare_reversed_range(self, client, auth_headers):
        response = client.get(
            f"{STATS}/compare",
            params={
                "start_date_1": "2024-01-07",
                "end_date_1": "2024-01-01",
                "start_date_2": "2024-01-08",
                "end_date_2": "2024-01-14",
            },
            headers=auth_headers,
        )
        assert response.status_code == 422
