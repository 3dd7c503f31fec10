"""
HTML Email Templates
Appointment and procurement emails. Every template takes an event payload
that has already been passed through sanitize_payload.
"""

from typing import Optional

from .config import FRONTEND_URL
from .utils.clock import format_date_long, format_time_display

THEME = {
    "primary": "#1e3a5f",
    "accent": "#f59e0b",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

COMPANY_NAME = "GianConstruct"


def get_base_template(
    title: str,
    message: str,
    details: list[tuple[str, str]],
    next_steps: Optional[str] = None,
    is_internal: bool = False,
) -> str:
    """Base HTML wrapper shared by all emails"""
    rows = "".join(
        f"""
        <tr>
          <td style="padding:8px 0;color:{THEME['text_muted']};width:40%;">{label}</td>
          <td style="padding:8px 0;color:{THEME['text_primary']};font-weight:600;">{value}</td>
        </tr>"""
        for label, value in details
    )

    next_steps_section = ""
    if next_steps:
        next_steps_section = f"""
        <div style="margin-top:24px;padding:16px;background:{THEME['background']};border-left:4px solid {THEME['accent']};">
          <strong>Next steps</strong>
          <p style="margin:8px 0 0 0;">{next_steps}</p>
        </div>"""

    footer = (
        f"Internal notification from the {COMPANY_NAME} back office."
        if is_internal
        else f"Questions? Reply to this email or visit <a href=\"{FRONTEND_URL}\">{COMPANY_NAME}</a>."
    )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - {COMPANY_NAME}</title>
</head>
<body style="margin:0;padding:24px;background:{THEME['background']};font-family:Arial,'Helvetica Neue',Helvetica,sans-serif;color:{THEME['text_secondary']};">
  <div style="max-width:600px;margin:0 auto;background:{THEME['card_bg']};border:1px solid {THEME['border']};border-radius:8px;">
    <div style="padding:24px;background:{THEME['primary']};color:#ffffff;border-radius:8px 8px 0 0;">
      <h1 style="margin:0;font-size:22px;">{title}</h1>
    </div>
    <div style="padding:24px;line-height:1.6;">
      <p>{message}</p>
      <table style="width:100%;border-collapse:collapse;margin-top:16px;">{rows}
      </table>{next_steps_section}
    </div>
    <div style="padding:16px 24px;font-size:12px;color:{THEME['text_muted']};border-top:1px solid {THEME['border']};">
      {footer}
    </div>
  </div>
</body>
</html>"""


def _meeting_label(meeting_type: str) -> str:
    return f"{(meeting_type or '').capitalize()} Consultation"


def _reference(payload: dict) -> str:
    return f"GC-{int(payload['inquiry_id']):06d}"


def _appointment_details(payload: dict) -> list[tuple[str, str]]:
    return [
        ("Date", format_date_long(payload["preferred_date"])),
        ("Time", format_time_display(payload["preferred_time"])),
        ("Meeting Type", _meeting_label(payload["meeting_type"])),
        ("Design Package", payload["design"]["name"]),
        ("Reference ID", _reference(payload)),
    ]


# ============================================
# Client-facing appointment emails
# ============================================


def appointment_confirmed_template(payload: dict) -> dict:
    date_label = format_date_long(payload["preferred_date"])
    time_label = format_time_display(payload["preferred_time"])
    return {
        "subject": f"Appointment Confirmed - {date_label} at {time_label}",
        "html": get_base_template(
            title="Appointment Confirmed",
            message=(
                f"Dear {payload['name']},<br><br>Your consultation for "
                f"<strong>{payload['design']['name']}</strong> has been confirmed. "
                "Our team is looking forward to discussing your project."
            ),
            details=_appointment_details(payload),
            next_steps=(
                "Please prepare any documents or questions you would like to discuss. "
                "We recommend joining 5 minutes early."
            ),
        ),
    }


def appointment_cancelled_template(payload: dict) -> dict:
    reason = payload.get("reason")
    details = _appointment_details(payload)
    if reason:
        details.append(("Reason", reason))
    return {
        "subject": f"Appointment Cancelled - {format_date_long(payload['preferred_date'])}",
        "html": get_base_template(
            title="Appointment Cancelled",
            message=(
                f"Dear {payload['name']},<br><br>Your consultation for "
                f"<strong>{payload['design']['name']}</strong> has been cancelled."
            ),
            details=details,
            next_steps="You are welcome to book a new consultation at any time from our website.",
        ),
    }


def appointment_rescheduled_template(payload: dict) -> dict:
    new_date = format_date_long(payload["new_date"])
    new_time = format_time_display(payload["new_time"])
    details = [
        ("Previous Date", format_date_long(payload["original_date"])),
        ("Previous Time", format_time_display(payload["original_time"])),
        ("New Date", new_date),
        ("New Time", new_time),
        ("Meeting Type", _meeting_label(payload["meeting_type"])),
        ("Reference ID", _reference(payload)),
    ]
    if payload.get("notes"):
        details.append(("Notes", payload["notes"]))
    return {
        "subject": f"Appointment Rescheduled - {new_date} at {new_time}",
        "html": get_base_template(
            title="Appointment Rescheduled",
            message=(
                f"Dear {payload['name']},<br><br>Your consultation for "
                f"<strong>{payload['design']['name']}</strong> has been moved to a new time."
            ),
            details=details,
            next_steps="If the new time does not work for you, reply to this email.",
        ),
    }


def appointment_completed_template(payload: dict) -> dict:
    return {
        "subject": f"Consultation Completed - {format_date_long(payload['preferred_date'])}",
        "html": get_base_template(
            title="Consultation Completed",
            message=(
                f"Dear {payload['name']},<br><br>Thank you for meeting with us about "
                f"<strong>{payload['design']['name']}</strong>."
            ),
            details=_appointment_details(payload),
            next_steps="Our team will follow up with a proposal for your project.",
        ),
    }


CLIENT_TEMPLATES = {
    "appointment_confirmed": appointment_confirmed_template,
    "appointment_cancelled": appointment_cancelled_template,
    "appointment_rescheduled": appointment_rescheduled_template,
    "appointment_completed": appointment_completed_template,
}


# ============================================
# Internal emails
# ============================================


def internal_appointment_update_template(event_type: str, payload: dict) -> dict:
    action = event_type.replace("appointment_", "")
    shown_date = payload.get("new_date") or payload["preferred_date"]
    subjects = {
        "confirmed": "Appointment Confirmed",
        "cancelled": "Appointment Cancelled",
        "rescheduled": "Appointment Rescheduled",
        "completed": "Consultation Completed",
    }
    details = [
        ("Client", payload["name"]),
        ("Email", payload["email"]),
        ("Phone", payload["phone"]),
        *_appointment_details(payload),
    ]
    if payload.get("reason"):
        details.append(("Cancellation Reason", payload["reason"]))
    if payload.get("original_date"):
        details.append(
            (
                "Previous Slot",
                f"{format_date_long(payload['original_date'])} "
                f"{format_time_display(payload['original_time'])}",
            )
        )
    return {
        "subject": f"{subjects[action]} - {payload['name']} - {format_date_long(shown_date)}",
        "html": get_base_template(
            title=f"Appointment {action.capitalize()}",
            message=f"A client appointment has been {action}.",
            details=details,
            next_steps="Make sure the relevant team members are informed.",
            is_internal=True,
        ),
    }


def new_inquiry_internal_template(payload: dict) -> dict:
    return {
        "subject": f"New Consultation Inquiry - {payload['name']} - {payload['design']['name']}",
        "html": get_base_template(
            title="New Consultation Request",
            message=payload["message"],
            details=[
                ("Name", payload["name"]),
                ("Email", payload["email"]),
                ("Phone", payload["phone"]),
                ("Preferred Date", format_date_long(payload["preferred_date"])),
                ("Preferred Time", format_time_display(payload["preferred_time"])),
                ("Meeting Type", _meeting_label(payload["meeting_type"])),
                ("Design", f"{payload['design']['name']} (ID: {payload['design']['id']})"),
            ],
            next_steps="Review the request and confirm the appointment from the admin panel.",
            is_internal=True,
        ),
    }


def inquiry_auto_reply_template(payload: dict) -> dict:
    return {
        "subject": f"Appointment Request Confirmation - {COMPANY_NAME}",
        "html": get_base_template(
            title="We Received Your Request",
            message=(
                f"Dear {payload['name']},<br><br>Thank you for your interest in "
                f"<strong>{payload['design']['name']}</strong>. We will review your preferred "
                "schedule and confirm your appointment shortly."
            ),
            details=_appointment_details(payload),
        ),
    }


def pdc_admin_template(event_type: str, payload: dict) -> dict:
    action = "Issued" if event_type == "pdc_issued" else "Created"
    return {
        "subject": f"PDC {action} - {payload['check_number']} - {payload['supplier']}",
        "html": get_base_template(
            title=f"Post-Dated Check {action}",
            message=f"Check {payload['check_number']} has been {action.lower()}.",
            details=[
                ("Check Number", payload["check_number"]),
                ("Check Date", format_date_long(payload["check_date"])),
                ("Supplier", payload["supplier"]),
                ("Payee", payload["payee"]),
                ("Amount", f"₱{payload['total_amount']:,.2f}"),
            ],
            is_internal=True,
        ),
    }
