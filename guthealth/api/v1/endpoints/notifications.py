from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guthealth.api import deps
from guthealth.models.user import User
from guthealth.schemas.notification import (
    BulkResult,
    NotificationIds,
    NotificationPage,
    NotificationSettings,
    NotificationType,
    UnreadCount,
)
from guthealth.services.notification_service import NotificationService


router = APIRouter()


@router.get("/", response_model=NotificationPage)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    type: Optional[NotificationType] = None,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).list(current_user.id, page, limit, type.value if type else None)


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return UnreadCount(unread_count=NotificationService(db).unread_count(current_user.id))


@router.get("/settings", response_model=NotificationSettings)
def get_notification_settings(
    current_user: User = Depends(deps.get_current_active_user),
):
    return NotificationSettings(notifications_enabled=current_user.notifications_enabled)


@router.put("/settings", response_model=NotificationSettings)
def update_notification_settings(
    payload: NotificationSettings,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    current_user.notifications_enabled = payload.notifications_enabled
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return NotificationSettings(notifications_enabled=current_user.notifications_enabled)


@router.put("/read-all", response_model=BulkResult)
def mark_all_read(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).mark_all_read(current_user.id)


@router.put("/read", response_model=BulkResult)
def mark_many_read(
    payload: NotificationIds,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).mark_many_read(current_user.id, payload.notification_ids)


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).mark_read(current_user.id, notification_id)


@router.delete("/read", response_model=BulkResult)
def clear_read(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).clear_read(current_user.id)


@router.delete("/old", response_model=BulkResult)
def clear_old(
    days: int = Query(30, ge=1, le=3650),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).clear_old(current_user.id, days)


@router.post("/batch-delete", response_model=BulkResult)
def delete_many(
    payload: NotificationIds,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).delete_many(current_user.id, payload.notification_ids)


@router.delete("/{notification_id}", response_model=BulkResult)
def delete_notification(
    notification_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return NotificationService(db).delete(current_user.id, notification_id)
