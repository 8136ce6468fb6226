"""
Notification routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.notification import NotificationResponse
from tripledger.services import notifier
from tripledger.api.dependencies import get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest notifications for the current user."""
    return notifier.list_notifications(current_user.id, db)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a notification as read."""
    return notifier.mark_read(notification_id, current_user.id, db)
