"""
Tests for ScoreRepository against in-memory SQLite.
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from guthealth.health_scoring.engine import ScoreResult
from guthealth.health_scoring.exceptions import RepositoryError
from guthealth.health_scoring.models import HealthScore
from guthealth.health_scoring.repository import ScoreRepository


def result(score, level="good", recommendations=()):
    return ScoreResult(score, level, score, 100, 100, list(recommendations))


class TestScoreRepository:
    def test_save_replaces_live_score_for_day(self, db, user):
        repo = ScoreRepository(db)
        day = date(2024, 5, 13)

        repo.save_score(user.id, day, result(70, "fair"))
        second = repo.save_score(user.id, day, result(92, "excellent"))

        live = repo.find_one(user.id, day)
        assert live.id == second.id
        assert live.total_score == 92
        rows = db.query(HealthScore).filter(HealthScore.user_id == user.id).all()
        assert len(rows) == 2
        assert sum(1 for r in rows if r.deleted_at is None) == 1

    def test_save_fills_description(self, db, user):
        score = ScoreRepository(db).save_score(user.id, date(2024, 5, 13), result(30, "bad", ["see a doctor"]))
        assert score.health_description == "Not healthy. Please consider seeing a doctor."
        assert score.recommendations == ["see a doctor"]

    def test_find_one_missing_day(self, db, user):
        assert ScoreRepository(db).find_one(user.id, date(2024, 5, 13)) is None

    def test_find_range_is_ascending_and_live_only(self, db, user):
        repo = ScoreRepository(db)
        repo.save_score(user.id, date(2024, 5, 15), result(80))
        repo.save_score(user.id, date(2024, 5, 13), result(60, "fair"))
        repo.save_score(user.id, date(2024, 5, 13), result(65, "fair"))
        repo.save_score(user.id, date(2024, 6, 1), result(99, "excellent"))

        rows = repo.find_range(user.id, date(2024, 5, 1), date(2024, 5, 31))

        assert [(r.score_date, r.total_score) for r in rows] == [(date(2024, 5, 13), 65), (date(2024, 5, 15), 80)]

    def test_find_range_with_fields_returns_mappings(self, db, user):
        repo = ScoreRepository(db)
        repo.save_score(user.id, date(2024, 5, 13), result(60, "fair"))

        rows = repo.find_range(user.id, date(2024, 5, 1), date(2024, 5, 31), fields=["total_score"])

        assert rows[0]["total_score"] == 60
        assert rows[0]["score_date"] == date(2024, 5, 13)
        assert "health_level" not in rows[0]

    def test_scores_are_scoped_to_user(self, db, user, other_user):
        repo = ScoreRepository(db)
        score = repo.save_score(user.id, date(2024, 5, 13), result(60, "fair"))

        assert repo.find_by_id(other_user.id, score.id) is None
        assert repo.find_range(other_user.id, date(2024, 1, 1), date(2024, 12, 31)) == []

    def test_paginate_newest_first(self, db, user):
        repo = ScoreRepository(db)
        for day in (1, 2, 3):
            repo.save_score(user.id, date(2024, 5, day), result(60 + day))

        rows, total = repo.paginate(user.id, page=1, limit=2)

        assert total == 3
        assert [r.score_date.day for r in rows] == [3, 2]
        rows, _ = repo.paginate(user.id, page=2, limit=2)
        assert [r.score_date.day for r in rows] == [1]

    def test_paginate_with_date_filter(self, db, user):
        repo = ScoreRepository(db)
        for day in (1, 2, 3):
            repo.save_score(user.id, date(2024, 5, day), result(60 + day))

        rows, total = repo.paginate(user.id, 1, 10, start=date(2024, 5, 2))

        assert [r.score_date.day for r in rows] == [3, 2]
        assert total == 2

    def test_soft_delete_for_record(self, db, user, make_record):
        record = make_record(user)
        repo = ScoreRepository(db)
        repo.save_score(user.id, record.record_date, result(90, "excellent"), record.id)

        assert repo.soft_delete_for_record(user.id, record.id) == 1
        assert repo.find_one(user.id, record.record_date) is None

    def test_storage_failures_are_wrapped(self, db, user, monkeypatch):
        repo = ScoreRepository(db)

        def broken(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "query", broken)

        with pytest.raises(RepositoryError) as exc:
            repo.find_one(user.id, date(2024, 5, 13))
        assert exc.value.status_code == 500
