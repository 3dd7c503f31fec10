"""
Email Service using Resend
Builds the emails for each domain event and sends them through the Resend API
"""

import asyncio
import logging
from typing import Optional, Union

import resend

from .config import COMPANY_EMAIL, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    CLIENT_TEMPLATES,
    inquiry_auto_reply_template,
    internal_appointment_update_template,
    new_inquiry_internal_template,
    pdc_admin_template,
)
from .utils.sanitization import sanitize_payload

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    html: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        html: Rendered HTML body
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        Exception: If Resend is not configured or the send fails
    """
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        # Resend's client is blocking, keep it off the event loop
        response = await asyncio.to_thread(
            resend.Emails.send,
            {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html,
            },
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Emails per domain event
# ============================================


def _message(to: str, template: dict) -> dict:
    return {"to": to, "subject": template["subject"], "html": template["html"]}


def emails_for_event(event_type: str, payload: dict) -> list[dict]:
    """
    Messages to send for an outbox event, as send_email keyword arguments.

    Appointment transitions email the client and the company inbox, a new
    inquiry emails the company inbox and sends the client an auto-reply, and
    PDC creation and issuing email the company inbox.
    """
    safe = sanitize_payload(payload)

    if event_type in CLIENT_TEMPLATES:
        return [
            _message(payload["email"], CLIENT_TEMPLATES[event_type](safe)),
            _message(COMPANY_EMAIL, internal_appointment_update_template(event_type, safe)),
        ]

    if event_type == "inquiry_submitted":
        return [
            _message(COMPANY_EMAIL, new_inquiry_internal_template(safe)),
            _message(payload["email"], inquiry_auto_reply_template(safe)),
        ]

    if event_type in ("pdc_created", "pdc_issued"):
        return [_message(COMPANY_EMAIL, pdc_admin_template(event_type, safe))]

    return []
