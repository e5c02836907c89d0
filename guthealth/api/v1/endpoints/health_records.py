import logging
import math
from datetime import date, timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guthealth import crud, models
from guthealth.api import deps
from guthealth.health_scoring.exceptions import NotFoundError, PermissionDeniedError
from guthealth.health_scoring.services import HealthScoreService
from guthealth.schemas.health_record import (
    HealthRecord,
    HealthRecordCreate,
    HealthRecordPage,
    HealthRecordStatistics,
    HealthRecordUpdate,
    HealthRecordWithScore,
    RecordScore,
    StatisticsPeriod,
)
from guthealth.utils.timezone import today_local

logger = logging.getLogger(__name__)

router = APIRouter()

STATISTICS_WINDOWS = {
    StatisticsPeriod.DAY: timedelta(days=0),
    StatisticsPeriod.WEEK: timedelta(days=7),
    StatisticsPeriod.MONTH: timedelta(days=30),
    StatisticsPeriod.YEAR: timedelta(days=365),
}


def get_owned_record(db: Session, record_id: int, user: models.User) -> models.HealthRecord:
    record = crud.health_record.get_any(db, record_id=record_id)
    if record is None:
        raise NotFoundError("Health record not found")
    if record.user_id != user.id:
        logger.warning(f"User {user.id} tried to access record {record_id} owned by user {record.user_id}")
        raise PermissionDeniedError("Not allowed to access this health record")
    return record


@router.post("/", response_model=HealthRecordWithScore, status_code=201)
def create_health_record(
    *,
    db: Session = Depends(deps.get_db),
    record_in: HealthRecordCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    record = crud.health_record.create_with_user(db, obj_in=record_in, user_id=current_user.id)
    crud.user.touch_record_stats(db, user=current_user, record_time=record.record_time, delta=1)
    score = HealthScoreService(db).score_record(record)
    response = HealthRecordWithScore.model_validate(record)
    response.health_score = RecordScore.model_validate(score)
    return response


@router.get("/", response_model=HealthRecordPage)
def list_health_records(
    db: Session = Depends(deps.get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: str = Query("record_time", pattern="^(record_time|created_at|id)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    rows, total = crud.health_record.get_multi_by_user(
        db,
        user_id=current_user.id,
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    total_pages = math.ceil(total / limit)
    return HealthRecordPage(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
        data=[HealthRecord.model_validate(r) for r in rows],
    )


@router.get("/statistics/summary", response_model=HealthRecordStatistics)
def get_record_statistics(
    period: StatisticsPeriod = StatisticsPeriod.WEEK,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    end = today_local()
    start = end - STATISTICS_WINDOWS[period]
    stats = crud.health_record.statistics(db, user_id=current_user.id, start=start, end=end)
    return HealthRecordStatistics(period=period, start_date=start, end_date=end, **stats)


@router.get("/{record_id}", response_model=HealthRecord)
def get_health_record(
    record_id: int,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    return get_owned_record(db, record_id, current_user)


@router.put("/{record_id}", response_model=HealthRecordWithScore)
def update_health_record(
    record_id: int,
    record_in: HealthRecordUpdate,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    record = get_owned_record(db, record_id, current_user)
    previous_day = record.record_date
    record = crud.health_record.update_record(db, db_obj=record, obj_in=record_in)
    score = HealthScoreService(db).on_record_updated(record, previous_day)
    response = HealthRecordWithScore.model_validate(record)
    response.health_score = RecordScore.model_validate(score)
    return response


@router.delete("/{record_id}")
def delete_health_record(
    record_id: int,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    record = get_owned_record(db, record_id, current_user)
    crud.health_record.soft_delete(db, db_obj=record)
    HealthScoreService(db).on_record_deleted(record)
    current_user.last_record_at = crud.health_record.latest_record_time(db, user_id=current_user.id)
    crud.user.touch_record_stats(db, user=current_user, record_time=None, delta=-1)
    return {"success": True, "message": "Health record deleted"}
