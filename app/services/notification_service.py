"""
In-app Notification Service
Creates dashboard notifications for domain events and serves the
notification list for registered users
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import FRONTEND_URL
from ..models import DomainEvent, Notification
from ..utils.clock import Clock, now, time_ago

logger = logging.getLogger(__name__)

NOTIFICATION_TITLES = {
    "appointment_confirmed": "Appointment Confirmed",
    "appointment_cancelled": "Appointment Cancelled",
    "appointment_rescheduled": "Appointment Rescheduled",
    "appointment_completed": "Consultation Completed",
    "inquiry_submitted": "Inquiry Submitted",
    "pdc_created": "PDC Created",
    "pdc_issued": "PDC Issued",
    "pdc_cancelled": "PDC Cancelled",
}


def notification_title(notification_type: str) -> str:
    return NOTIFICATION_TITLES.get(notification_type, "Notification")


def notification_message(notification_type: str, payload: dict) -> str:
    """User-facing one-liner for a notification"""
    if notification_type.startswith("pdc_"):
        action = notification_type.replace("pdc_", "")
        return (
            f"Check {payload.get('check_number')} for {payload.get('supplier')} "
            f"has been {action}"
        )

    design_name = (payload.get("design") or {}).get("name", "your design")
    if notification_type == "appointment_confirmed":
        return f"Your appointment for {design_name} has been confirmed"
    if notification_type == "appointment_cancelled":
        reason = f": {payload['reason']}" if payload.get("reason") else ""
        return f"Your appointment for {design_name} has been cancelled{reason}"
    if notification_type == "appointment_rescheduled":
        return f"Your appointment for {design_name} has been rescheduled"
    if notification_type == "appointment_completed":
        return f"Your consultation for {design_name} has been completed"
    if notification_type == "inquiry_submitted":
        return f"Your inquiry for {design_name} has been submitted"
    return f"Update regarding your {design_name} inquiry"


def create_notification(
    db: Session,
    *,
    feature: str,
    type: str,
    message: str,
    title: Optional[str] = None,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    target_role: Optional[str] = None,
    channels: Optional[list[str]] = None,
    metadata: Optional[dict] = None,
    related_id: Optional[str] = None,
    action_url: Optional[str] = None,
    event_id: Optional[int] = None,
    created_at=None,
) -> Notification:
    """Add an in-app notification to the session and flush it"""
    notification = Notification(
        user_id=user_id,
        user_email=user_email,
        target_role=target_role,
        feature=feature,
        type=type,
        title=title or notification_title(type),
        message=message,
        channels=channels or ["in-app"],
        extra_data=metadata or {},
        related_id=related_id,
        action_url=action_url,
        event_id=event_id,
        is_read=False,
    )
    if created_at is not None:
        notification.created_at = created_at
    db.add(notification)
    db.flush()
    logger.info(f"🔔 Notification '{notification.title}' created for {user_id or target_role}")
    return notification


def notification_for_event(event: DomainEvent) -> Optional[dict]:
    """
    Keyword arguments for create_notification, or None when the event has no
    in-app recipient. Appointment notices only go to registered users.
    """
    payload = event.payload or {}

    if event.aggregate_type == "pdc":
        return {
            "target_role": "admin",
            "feature": "procurement",
            "type": event.event_type,
            "message": notification_message(event.event_type, payload),
            "channels": ["in-app", "email"] if event.event_type != "pdc_cancelled" else ["in-app"],
            "metadata": payload,
            "related_id": event.aggregate_id,
            "action_url": f"{FRONTEND_URL}/admin/pdc",
            "event_id": event.id,
        }

    if not payload.get("user_id"):
        logger.debug(f"⚠️ Skipping in-app notification for guest inquiry {event.aggregate_id}")
        return None

    metadata = {
        key: payload[key]
        for key in (
            "preferred_date",
            "preferred_time",
            "meeting_type",
            "reason",
            "notes",
            "original_date",
            "original_time",
            "new_date",
            "new_time",
        )
        if payload.get(key) is not None
    }
    metadata["design"] = payload.get("design")
    return {
        "user_id": payload["user_id"],
        "user_email": payload.get("email"),
        "feature": "appointments",
        "type": event.event_type,
        "message": notification_message(event.event_type, payload),
        "channels": ["in-app", "email"],
        "metadata": metadata,
        "related_id": event.aggregate_id,
        "action_url": f"{FRONTEND_URL}/user/userdashboard",
        "event_id": event.id,
    }


def notification_exists_for_event(db: Session, event_id: int) -> bool:
    return db.query(Notification.id).filter(Notification.event_id == event_id).first() is not None


# ============================================
# Listing
# ============================================


def get_user_notifications(db: Session, user_id: str, clock: Clock = now) -> dict:
    """Newest 50 notifications for a registered user"""
    try:
        notifications = (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(50)
            .all()
        )
        logger.debug(f"Found {len(notifications)} notifications for user {user_id}")
        return {
            "success": True,
            "notifications": [
                {
                    "id": n.id,
                    "userId": n.user_id,
                    "userEmail": n.user_email,
                    "type": n.type,
                    "title": notification_title(n.type),
                    "message": n.message,
                    "metadata": n.extra_data or {},
                    "relatedId": n.related_id,
                    "actionUrl": n.action_url,
                    "isRead": n.is_read,
                    "createdAt": n.created_at,
                    "timeAgo": time_ago(n.created_at, clock) if n.created_at else "",
                }
                for n in notifications
            ],
        }
    except Exception as e:
        logger.error(f"❌ Error fetching notifications for user {user_id}: {e}")
        return {"success": False, "error": "Failed to fetch notifications", "code": "error"}


def mark_notification_as_read(db: Session, notification_id: int) -> dict:
    try:
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            return {"success": False, "error": "Notification not found", "code": "not_found"}
        notification.is_read = True
        db.commit()
        return {"success": True}
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error marking notification {notification_id} as read: {e}")
        return {"success": False, "error": "Failed to mark notification as read", "code": "error"}


def mark_all_notifications_as_read(db: Session, user_id: str) -> dict:
    try:
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
        return {"success": True, "updatedCount": updated}
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error marking all notifications as read for {user_id}: {e}")
        return {
            "success": False,
            "error": "Failed to mark all notifications as read",
            "code": "error",
        }
