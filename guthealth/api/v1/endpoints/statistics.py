from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guthealth import models
from guthealth.api import deps
from guthealth.health_scoring.services import HealthScoreService

router = APIRouter()


@router.get("/score-trend")
def get_score_trend(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_score_trend(current_user.id, days)


@router.get("/average-score")
def get_average_score(
    date_range: str = Query("30days", description="'<N>days' ending today, or 'all'"),
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_average_score(current_user.id, date_range)


@router.get("/compare")
def compare_time_periods(
    start_date_1: date,
    end_date_1: date,
    start_date_2: date,
    end_date_2: date,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).compare_periods(
        current_user.id, start_date_1, end_date_1, start_date_2, end_date_2
    )
