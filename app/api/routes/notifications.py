from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.notification import NotificationOut
from app.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@router.get("")
def list_notifications(
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notifications = NotificationService(db).list_for_user(current_user.id, unread_only)
    return {
        "success": True,
        "notifications": [NotificationOut.model_validate(n).model_dump(mode="json") for n in notifications],
    }


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = NotificationService(db).mark_read(notification_id, current_user.id)
    return {"success": True, "notification": NotificationOut.model_validate(notification).model_dump(mode="json")}
