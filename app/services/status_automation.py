"""
Status transitions for inquiries and post-dated checks
Holds the inquiry workflow table and the date-driven pending → issued PDC sweep
"""

import logging

from sqlalchemy.orm import Session

from ..models_pdc import PostDatedCheck
from ..utils.clock import Clock, now, today
from .outbox import record_event

logger = logging.getLogger(__name__)

# Inquiry statuses: pending → confirmed → cancelled | rescheduled | completed
INQUIRY_TRANSITIONS = {
    "pending": ["confirmed", "cancelled"],
    "confirmed": ["cancelled", "rescheduled", "completed"],
    "rescheduled": ["cancelled", "completed", "rescheduled"],
    "cancelled": [],  # Terminal state
    "completed": [],  # Terminal state
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Validate if an inquiry status transition is allowed

    Args:
        current_status: Current inquiry status
        new_status: Desired new status

    Returns:
        bool: True if transition is valid, False otherwise
    """
    return new_status in INQUIRY_TRANSITIONS.get(current_status, [])


def issue_due_checks(db: Session, clock: Clock = now) -> dict:
    """
    Issue every pending PDC whose check date has arrived
    Runs from the periodic task, the arq cron job and before PDC reads

    PDC statuses: pending → issued (automatic) | cancelled (manual)

    Returns:
        dict: Summary with the issued count and check numbers
    """
    summary = {"issued": 0, "check_numbers": []}

    try:
        moment = clock()
        due = (
            db.query(PostDatedCheck)
            .filter(
                PostDatedCheck.status == PostDatedCheck.STATUS_PENDING,
                PostDatedCheck.check_date <= today(clock),
            )
            .all()
        )

        for pdc in due:
            pdc.status = PostDatedCheck.STATUS_ISSUED
            pdc.issued_at = moment
            pdc.updated_at = moment
            record_event(
                db,
                "pdc_issued",
                "pdc",
                pdc.id,
                {
                    "check_number": pdc.check_number,
                    "supplier": pdc.supplier,
                    "payee": pdc.payee,
                    "total_amount": pdc.total_amount,
                    "check_date": pdc.check_date.isoformat(),
                    "automatic": True,
                },
                created_at=moment,
            )
            summary["check_numbers"].append(pdc.check_number)
            logger.info(f"✅ PDC {pdc.check_number} transitioned: pending → issued")

        if due:
            db.commit()
            summary["issued"] = len(due)
            logger.info(f"📊 PDC auto-issue summary: {summary['issued']} check(s) issued")
        else:
            logger.debug("ℹ️ No pending PDCs due for issue")

        return summary

    except Exception as e:
        logger.error(f"❌ Error auto-issuing PDCs: {str(e)}")
        db.rollback()
        raise
