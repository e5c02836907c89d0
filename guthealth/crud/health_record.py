from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, asc
from sqlalchemy.orm import Session

from guthealth.crud.base import CRUDBase
from guthealth.health_scoring.models import HealthScore
from guthealth.models.health_record import HealthRecord
from guthealth.schemas.health_record import HealthRecordCreate, HealthRecordUpdate
from guthealth.utils.timezone import local_to_utc_naive, to_local_date, utcnow

SORT_COLUMNS = ("record_time", "created_at", "id")


class CRUDHealthRecord(CRUDBase[HealthRecord, HealthRecordCreate, HealthRecordUpdate]):
    def get_any(self, db: Session, *, record_id: int) -> Optional[HealthRecord]:
        """Live record by id regardless of owner; ownership is checked by callers."""
        return (
            db.query(HealthRecord)
            .filter(HealthRecord.id == record_id)
            .filter(HealthRecord.deleted_at.is_(None))
            .first()
        )

    def create_with_user(self, db: Session, *, obj_in: HealthRecordCreate, user_id: int) -> HealthRecord:
        data = obj_in.model_dump()
        record_time = local_to_utc_naive(data.pop("record_time", None)) or utcnow()
        db_obj = HealthRecord(
            **data,
            user_id=user_id,
            record_time=record_time,
            record_date=to_local_date(record_time),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_record(self, db: Session, *, db_obj: HealthRecord, obj_in: HealthRecordUpdate) -> HealthRecord:
        update_data = obj_in.model_dump(exclude_unset=True)
        # Explicit nulls on non-nullable columns are ignored
        for key in ("shape", "color", "feeling", "frequency", "has_blood", "has_pus", "has_mucus", "symptoms", "habits"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)
        if update_data.get("record_time") is not None:
            update_data["record_time"] = local_to_utc_naive(update_data["record_time"])
            update_data["record_date"] = to_local_date(update_data["record_time"])
        else:
            update_data.pop("record_time", None)
        return self.update(db, db_obj=db_obj, obj_in=update_data)

    def soft_delete(self, db: Session, *, db_obj: HealthRecord) -> HealthRecord:
        db_obj.deleted_at = utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: str = "record_time",
        sort_order: str = "desc",
    ) -> Tuple[List[HealthRecord], int]:
        query = (
            db.query(HealthRecord)
            .filter(HealthRecord.user_id == user_id)
            .filter(HealthRecord.deleted_at.is_(None))
        )
        if start_date:
            query = query.filter(HealthRecord.record_date >= start_date)
        if end_date:
            query = query.filter(HealthRecord.record_date <= end_date)

        total = query.count()
        column = getattr(HealthRecord, sort_by if sort_by in SORT_COLUMNS else "record_time")
        order = asc(column) if sort_order.lower() == "asc" else desc(column)
        rows = query.order_by(order, desc(HealthRecord.id)).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    def latest_for_day(self, db: Session, *, user_id: int, day: date) -> Optional[HealthRecord]:
        return (
            db.query(HealthRecord)
            .filter(HealthRecord.user_id == user_id)
            .filter(HealthRecord.record_date == day)
            .filter(HealthRecord.deleted_at.is_(None))
            .order_by(desc(HealthRecord.record_time), desc(HealthRecord.id))
            .first()
        )

    def latest_record_time(self, db: Session, *, user_id: int) -> Optional[datetime]:
        row = (
            db.query(HealthRecord.record_time)
            .filter(HealthRecord.user_id == user_id)
            .filter(HealthRecord.deleted_at.is_(None))
            .order_by(desc(HealthRecord.record_time))
            .first()
        )
        return row[0] if row else None

    def get_with_scores(self, db: Session, *, user_id: int, start: date, end: date) -> List[Dict[str, Any]]:
        """Live records in [start, end], each with the live score of its day (None if unscored)."""
        rows = (
            db.query(HealthRecord.id, HealthRecord.frequency, HealthScore.total_score)
            .outerjoin(
                HealthScore,
                (HealthScore.user_id == HealthRecord.user_id)
                & (HealthScore.score_date == HealthRecord.record_date)
                & HealthScore.deleted_at.is_(None),
            )
            .filter(HealthRecord.user_id == user_id)
            .filter(HealthRecord.deleted_at.is_(None))
            .filter(HealthRecord.record_date >= start)
            .filter(HealthRecord.record_date <= end)
            .all()
        )
        return [{"id": r.id, "frequency": r.frequency, "total_score": r.total_score} for r in rows]

    def statistics(self, db: Session, *, user_id: int, start: date, end: date) -> Dict[str, Any]:
        records = (
            db.query(HealthRecord)
            .filter(HealthRecord.user_id == user_id)
            .filter(HealthRecord.deleted_at.is_(None))
            .filter(HealthRecord.record_date >= start)
            .filter(HealthRecord.record_date <= end)
            .all()
        )
        symptoms: Counter = Counter()
        for record in records:
            symptoms.update(record.symptoms or [])
        return {
            "total_records": len(records),
            "shape_distribution": dict(Counter(r.shape for r in records)),
            "color_distribution": dict(Counter(r.color for r in records)),
            "feeling_distribution": dict(Counter(r.feeling for r in records)),
            "symptoms_count": dict(symptoms),
            "blood_count": sum(1 for r in records if r.has_blood),
            "pus_count": sum(1 for r in records if r.has_pus),
        }


health_record = CRUDHealthRecord(HealthRecord)
