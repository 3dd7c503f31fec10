from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.notification_service import (
    get_user_notifications,
    mark_all_notifications_as_read,
    mark_notification_as_read,
)
from ..shared.responses import unwrap

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationResponse(BaseModel):
    id: int
    userId: Optional[str] = None
    userEmail: Optional[str] = None
    type: str
    title: str
    message: str
    metadata: dict
    relatedId: Optional[str] = None
    actionUrl: Optional[str] = None
    isRead: bool
    createdAt: Optional[datetime] = None
    timeAgo: str


@router.get("/user/{user_id}", response_model=list[NotificationResponse])
async def list_user_notifications(user_id: str, db: Session = Depends(get_db)):
    """Newest notifications for a registered user"""
    return unwrap(get_user_notifications(db, user_id))["notifications"]


@router.post("/{notification_id}/read")
async def mark_read(notification_id: int, db: Session = Depends(get_db)):
    unwrap(mark_notification_as_read(db, notification_id))
    return {"message": "Notification marked as read"}


@router.post("/user/{user_id}/read-all")
async def mark_all_read(user_id: str, db: Session = Depends(get_db)):
    """Mark all of a user's notifications as read"""
    result = unwrap(mark_all_notifications_as_read(db, user_id))
    return {"message": "All notifications marked as read", "updatedCount": result["updatedCount"]}
