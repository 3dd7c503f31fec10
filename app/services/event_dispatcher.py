"""
Outbox consumer
Delivers pending domain events: the in-app notification is committed, then
the event's emails are sent concurrently, and failures are recorded on the
event row only
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import EVENT_DISPATCH_BATCH_SIZE, EVENT_MAX_ATTEMPTS
from ..email_service import emails_for_event, send_email
from ..models import DomainEvent
from ..utils.clock import Clock, now
from .notification_service import (
    create_notification,
    notification_exists_for_event,
    notification_for_event,
)

logger = logging.getLogger(__name__)

Mailer = Callable[..., Awaitable[dict]]


def _create_in_app(db: Session, event: DomainEvent, created_at) -> None:
    # One notification per event even when emails force a retry
    if notification_exists_for_event(db, event.id):
        return
    kwargs = notification_for_event(event)
    if kwargs:
        create_notification(db, created_at=created_at, **kwargs)
        db.commit()


async def deliver_event(
    db: Session,
    event: DomainEvent,
    mailer: Mailer = send_email,
    clock: Clock = now,
    max_attempts: int = EVENT_MAX_ATTEMPTS,
) -> bool:
    """
    Run one event's side effects and record the outcome.

    Returns True when every side effect succeeded.
    """
    moment = clock()
    errors = []
    try:
        messages = emails_for_event(event.event_type, event.payload or {})
    except Exception as e:
        logger.error(f"❌ Could not render emails for event {event.id}: {e}")
        messages = []
        errors.append(e)

    # The in-app notice is committed first so no write transaction is open
    # while the emails are in flight
    try:
        _create_in_app(db, event, moment)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Could not create notification for event {event.id}: {e}")
        errors.append(e)

    results = await asyncio.gather(
        *(mailer(**message) for message in messages), return_exceptions=True
    )
    errors += [r for r in results if isinstance(r, Exception)]

    if not errors:
        event.status = DomainEvent.STATUS_DELIVERED
        event.delivered_at = moment
        event.last_error = None
        db.commit()
        logger.info(f"✅ Delivered {event.event_type} for {event.aggregate_type} {event.aggregate_id}")
        return True

    event.attempts = (event.attempts or 0) + 1
    event.last_error = "; ".join(str(e) for e in errors)[:2000]
    if event.attempts >= max_attempts:
        event.status = DomainEvent.STATUS_FAILED
        logger.error(
            f"❌ Giving up on {event.event_type} event {event.id} after {event.attempts} attempts: "
            f"{event.last_error}"
        )
    else:
        logger.warning(
            f"⚠️ {event.event_type} event {event.id} failed (attempt {event.attempts}/{max_attempts}): "
            f"{event.last_error}"
        )
    db.commit()
    return False


async def deliver_pending_events(
    db: Session,
    mailer: Mailer = send_email,
    clock: Clock = now,
    batch_size: int = EVENT_DISPATCH_BATCH_SIZE,
    max_attempts: int = EVENT_MAX_ATTEMPTS,
) -> dict:
    """
    Deliver up to batch_size pending events, oldest first.

    Returns:
        dict: Counts of delivered, retrying and failed events
    """
    summary = {"delivered": 0, "retrying": 0, "failed": 0}

    events = (
        db.query(DomainEvent)
        .filter(DomainEvent.status == DomainEvent.STATUS_PENDING)
        .order_by(DomainEvent.created_at.asc(), DomainEvent.id.asc())
        .limit(batch_size)
        .all()
    )
    if not events:
        logger.debug("ℹ️ No pending events to deliver")
        return summary

    for event in events:
        try:
            delivered = await deliver_event(db, event, mailer, clock, max_attempts)
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Unexpected error delivering event {event.id}: {e}")
            continue

        if delivered:
            summary["delivered"] += 1
        elif event.status == DomainEvent.STATUS_FAILED:
            summary["failed"] += 1
        else:
            summary["retrying"] += 1

    logger.info(f"📊 Event delivery summary: {summary}")
    return summary


def count_events(db: Session, status: Optional[str] = None) -> int:
    query = db.query(DomainEvent)
    if status:
        query = query.filter(DomainEvent.status == status)
    return query.count()
