"""
Domain event outbox.

State changes append an event row in their own transaction; notification and
email side effects are performed later by services.event_dispatcher.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models import DomainEvent

logger = logging.getLogger(__name__)


def record_event(
    db: Session,
    event_type: str,
    aggregate_type: str,
    aggregate_id,
    payload: Optional[dict] = None,
    created_at: Optional[datetime] = None,
) -> DomainEvent:
    """Add a pending event to the session without committing"""
    event = DomainEvent(
        event_type=event_type,
        aggregate_type=aggregate_type,
        aggregate_id=str(aggregate_id),
        payload=payload or {},
        status=DomainEvent.STATUS_PENDING,
        attempts=0,
    )
    if created_at is not None:
        event.created_at = created_at
    db.add(event)
    logger.debug(f"📨 Queued {event_type} for {aggregate_type} {aggregate_id}")
    return event
