import logging
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from guthealth.utils.timezone import utcnow

from .engine import ScoreResult
from .exceptions import RepositoryError
from .levels import HealthLevelPolicy
from .models import HealthScore

logger = logging.getLogger(__name__)


class ScoreRepository:
    """Persistence for ``HealthScore`` rows.

    Only non-deleted rows are ever returned. Storage failures are logged and
    re-raised as ``RepositoryError``; the session is rolled back first.
    """

    def __init__(self, db: Session):
        self.db = db

    def _live(self, user_id: int):
        return (
            self.db.query(HealthScore)
            .filter(HealthScore.user_id == user_id)
            .filter(HealthScore.deleted_at.is_(None))
        )

    def _fail(self, action: str, exc: SQLAlchemyError) -> RepositoryError:
        self.db.rollback()
        logger.exception(f"Health score repository failed to {action}: {exc}")
        return RepositoryError(f"Failed to {action}", {"error": str(exc)})

    def find_one(self, user_id: int, day: date) -> Optional[HealthScore]:
        try:
            return (
                self._live(user_id)
                .options(joinedload(HealthScore.record))
                .filter(HealthScore.score_date == day)
                .order_by(HealthScore.created_at.desc(), HealthScore.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("load daily score", e)

    def find_range(
        self,
        user_id: int,
        start: date,
        end: date,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Any]:
        """Live scores in [start, end], ``score_date`` ascending.

        With ``fields`` only those columns are selected (plus ``score_date``
        and ``created_at``) and light-weight rows are returned.
        """
        try:
            if fields:
                names = list(dict.fromkeys(["score_date", "created_at", *fields]))
                columns = [getattr(HealthScore, name) for name in names]
                stmt = (
                    select(*columns)
                    .where(HealthScore.user_id == user_id)
                    .where(HealthScore.deleted_at.is_(None))
                    .where(HealthScore.score_date >= start)
                    .where(HealthScore.score_date <= end)
                    .order_by(HealthScore.score_date.asc(), HealthScore.created_at.asc())
                )
                return [row._asdict() for row in self.db.execute(stmt)]
            return (
                self._live(user_id)
                .filter(HealthScore.score_date >= start)
                .filter(HealthScore.score_date <= end)
                .order_by(HealthScore.score_date.asc(), HealthScore.created_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("load score range", e)

    def find_by_id(self, user_id: int, score_id: int) -> Optional[HealthScore]:
        try:
            return (
                self._live(user_id)
                .options(joinedload(HealthScore.record))
                .filter(HealthScore.id == score_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("load score", e)

    def paginate(
        self,
        user_id: int,
        page: int,
        limit: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Tuple[List[HealthScore], int]:
        try:
            query = self._live(user_id)
            if start:
                query = query.filter(HealthScore.score_date >= start)
            if end:
                query = query.filter(HealthScore.score_date <= end)
            total = query.count()
            rows = (
                query.order_by(HealthScore.score_date.desc(), HealthScore.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
            return rows, total
        except SQLAlchemyError as e:
            raise self._fail("page scores", e)

    def save_score(
        self,
        user_id: int,
        day: date,
        result: ScoreResult,
        record_id: Optional[int] = None,
    ) -> HealthScore:
        """Replace the live score for (user, day) with ``result``.

        Existing live rows are soft-deleted in the same transaction, so at most
        one live row per day survives the commit.
        """
        now = utcnow()
        try:
            self.db.execute(
                update(HealthScore)
                .where(HealthScore.user_id == user_id)
                .where(HealthScore.score_date == day)
                .where(HealthScore.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
                .execution_options(synchronize_session="fetch")
            )
            score = HealthScore(
                user_id=user_id,
                record_id=record_id,
                score_date=day,
                total_score=result.score,
                health_level=result.level,
                poop_health_score=result.poop_health_score,
                frequency_health_score=result.frequency_health_score,
                symptom_health_score=result.symptom_health_score,
                health_description=HealthLevelPolicy.level_description(result.level),
                recommendations=list(result.recommendations),
                created_at=now,
                updated_at=now,
            )
            self.db.add(score)
            self.db.commit()
            self.db.refresh(score)
        except SQLAlchemyError as e:
            raise self._fail("save score", e)
        logger.info(f"Stored health score {score.total_score} ({score.health_level}) for user {user_id} on {day}")
        return score

    def soft_delete_for_record(self, user_id: int, record_id: int) -> int:
        now = utcnow()
        try:
            result = self.db.execute(
                update(HealthScore)
                .where(HealthScore.user_id == user_id)
                .where(HealthScore.record_id == record_id)
                .where(HealthScore.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
                .execution_options(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete record score", e)
        return result.rowcount
