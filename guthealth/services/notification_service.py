import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from guthealth import crud
from guthealth.core.config import settings
from guthealth.health_scoring.exceptions import NotFoundError
from guthealth.health_scoring.metrics import health_notifications_created_total
from guthealth.models.notification import Notification
from guthealth.schemas.notification import NotificationCreate
from guthealth.utils.timezone import utcnow

logger = logging.getLogger(__name__)

TYPE_NAMES = {
    "system": "System notice",
    "health": "Health reminder",
    "reminder": "Scheduled reminder",
    "achievement": "Achievement",
    "message": "Message",
}

HEALTH_REMINDER_TITLE = "Health reminder"


def type_name(type_: Optional[str]) -> Optional[str]:
    return TYPE_NAMES.get(type_, type_)


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Human-friendly age of a UTC-naive timestamp; older than a week shows MM-DD."""
    now = now or utcnow()
    minutes = int((now - created_at).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if minutes < 1440:
        return f"{minutes // 60} hours ago"
    days = minutes // 1440
    if days < 7:
        return f"{days} days ago"
    return created_at.strftime("%m-%d")


def serialize(notification: Notification, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "title": notification.title,
        "content": notification.content,
        "type": notification.type,
        "type_name": type_name(notification.type),
        "related_id": notification.related_id,
        "is_read": notification.is_read,
        "read_at": notification.read_at,
        "created_at": notification.created_at,
        "time_ago": time_ago(notification.created_at, now),
    }


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, user_id: int, page: int = 1, limit: Optional[int] = None, type: Optional[str] = None) -> Dict[str, Any]:
        limit = limit or settings.NOTIFICATION_PAGE_SIZE
        rows, total = crud.notification.get_multi_by_user(self.db, user_id=user_id, page=page, limit=limit, type=type)
        now = utcnow()
        return {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "data": [serialize(n, now) for n in rows],
        }

    def unread_count(self, user_id: int) -> int:
        return crud.notification.count_unread(self.db, user_id=user_id)

    def mark_read(self, user_id: int, notification_id: int) -> Dict[str, Any]:
        notification = crud.notification.get_for_user(self.db, user_id=user_id, notification_id=notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.is_read:
            return {"success": True, "message": "Notification was already read", "notification_id": notification_id}
        crud.notification.mark_read(self.db, user_id=user_id, ids=[notification_id])
        self.db.refresh(notification)
        return {
            "success": True,
            "message": "Notification marked as read",
            "notification_id": notification_id,
            "read_at": notification.read_at,
        }

    def mark_many_read(self, user_id: int, ids: List[int]) -> Dict[str, Any]:
        updated = crud.notification.mark_read(self.db, user_id=user_id, ids=ids)
        return {"success": True, "updated_count": updated, "message": f"Marked {updated} notifications as read"}

    def mark_all_read(self, user_id: int) -> Dict[str, Any]:
        updated = crud.notification.mark_read(self.db, user_id=user_id)
        return {"success": True, "updated_count": updated, "message": f"Marked {updated} unread notifications as read"}

    def delete(self, user_id: int, notification_id: int) -> Dict[str, Any]:
        notification = crud.notification.get_for_user(self.db, user_id=user_id, notification_id=notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        crud.notification.delete_many(self.db, user_id=user_id, ids=[notification_id])
        return {"success": True, "deleted_count": 1, "message": "Notification deleted"}

    def delete_many(self, user_id: int, ids: List[int]) -> Dict[str, Any]:
        deleted = crud.notification.delete_many(self.db, user_id=user_id, ids=ids)
        return {"success": True, "deleted_count": deleted, "message": f"Deleted {deleted} notifications"}

    def clear_read(self, user_id: int) -> Dict[str, Any]:
        deleted = crud.notification.delete_many(self.db, user_id=user_id, read_only=True)
        return {"success": True, "deleted_count": deleted, "message": f"Cleared {deleted} read notifications"}

    def clear_old(self, user_id: int, days: int = 30) -> Dict[str, Any]:
        cutoff = utcnow() - timedelta(days=days)
        deleted = crud.notification.delete_many(self.db, user_id=user_id, before=cutoff)
        return {
            "success": True,
            "deleted_count": deleted,
            "message": f"Cleared {deleted} notifications older than {days} days",
        }

    def create_health_reminder(self, user_id: int, health_data: Dict[str, Any]) -> Optional[Notification]:
        """Raise a ``health`` notification when the data warrants one.

        Checked in order: a poor/bad level, a declining trend, then more than
        ``NOTIFICATION_INACTIVITY_DAYS`` days without a record.
        """
        level = health_data.get("health_level")
        days_idle = health_data.get("days_without_record") or 0
        if level in ("poor", "bad"):
            content = (
                f"Your recent gut health has not been ideal, with a health score of {health_data.get('score')}. "
                "Watch your diet and keep regular hours, and see a doctor if you feel unwell."
            )
        elif health_data.get("trend") == "declining":
            content = (
                "Your gut health score has been dropping. Review your diet, "
                "eat more dietary fibre and stay well hydrated."
            )
        elif days_idle > settings.NOTIFICATION_INACTIVITY_DAYS:
            content = (
                f"You have not logged anything for {days_idle} days. "
                "Keep recording so you have a clear picture of your gut health."
            )
        else:
            return None

        params = {k: v for k, v in health_data.items() if isinstance(v, (str, int, float, bool)) or v is None}
        notification = crud.notification.create_for_user(
            self.db,
            obj_in=NotificationCreate(
                title=HEALTH_REMINDER_TITLE,
                content=content,
                type="health",
                related_id=health_data.get("record_id"),
                params=params,
            ),
            user_id=user_id,
        )
        health_notifications_created_total.inc()
        logger.info(f"Created health reminder {notification.id} for user {user_id}")
        return notification
