from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from guthealth.crud.base import CRUDBase
from guthealth.models.notification import Notification
from guthealth.schemas.notification import NotificationCreate
from guthealth.utils.timezone import utcnow


class CRUDNotification(CRUDBase[Notification, NotificationCreate, NotificationCreate]):
    def create_for_user(self, db: Session, *, obj_in: NotificationCreate, user_id: int) -> Notification:
        db_obj = Notification(**obj_in.model_dump(), user_id=user_id, is_read=False)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_for_user(self, db: Session, *, user_id: int, notification_id: int) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        type: Optional[str] = None,
    ) -> Tuple[List[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if type:
            query = query.filter(Notification.type == type)
        total = query.count()
        rows = (
            query.order_by(desc(Notification.created_at), desc(Notification.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def count_unread(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)
            .count()
        )

    def mark_read(self, db: Session, *, user_id: int, ids: Optional[List[int]] = None) -> int:
        """Mark unread notifications as read; all of them when ``ids`` is None."""
        now = utcnow()
        query = db.query(Notification).filter(
            Notification.user_id == user_id, Notification.is_read == False
        )
        if ids is not None:
            query = query.filter(Notification.id.in_(ids))
        updated = query.update(
            {"is_read": True, "read_at": now, "updated_at": now},
            synchronize_session=False,
        )
        db.commit()
        return updated

    def delete_many(
        self,
        db: Session,
        *,
        user_id: int,
        ids: Optional[List[int]] = None,
        read_only: bool = False,
        before: Optional[datetime] = None,
    ) -> int:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if ids is not None:
            query = query.filter(Notification.id.in_(ids))
        if read_only:
            query = query.filter(Notification.is_read == True)
        if before is not None:
            query = query.filter(Notification.created_at < before)
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted


notification = CRUDNotification(Notification)
