from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guthealth.api import deps
from guthealth.models import User
from .services import HealthScoreService
from .schemas import (
    AdviceResponse,
    DailyScoreResponse,
    HistoryPage,
    RecalculateRequest,
    ReminderCheck,
)


router = APIRouter()


@router.get("/today", response_model=DailyScoreResponse)
def get_today_score(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return HealthScoreService(db).get_today_score(current_user.id)


@router.get("/daily", response_model=DailyScoreResponse)
def get_daily_score(
    day: date = Query(..., alias="date"),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return HealthScoreService(db).get_daily_score(current_user.id, day)


@router.get("/week")
def get_week_trend(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_week_trend(current_user.id, day)


@router.get("/month")
def get_month_trend(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_month_trend(current_user.id, year, month)


@router.get("/history", response_model=HistoryPage)
def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return HealthScoreService(db).get_history(current_user.id, page, limit, start_date, end_date)


@router.get("/distribution")
def get_level_distribution(
    period: str = Query("week"),
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_level_distribution(current_user.id, period, day)


@router.get("/average-trend")
def get_average_trend(
    type: str = Query("week"),
    count: int = Query(4, ge=1, le=52),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_average_trend(current_user.id, type, count)


@router.get("/advice", response_model=AdviceResponse)
def get_health_advice(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return HealthScoreService(db).get_health_advice(current_user.id)


@router.post("/recalculate")
def recalculate_score(
    payload: RecalculateRequest,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).recalculate(current_user.id, payload.day)


@router.post("/reminders/check", response_model=ReminderCheck)
def check_health_reminders(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return HealthScoreService(db).check_reminders(current_user.id)


@router.get("/{score_id}")
def get_score_detail(
    score_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Dict[str, Any]:
    return HealthScoreService(db).get_score_detail(current_user.id, score_id)
