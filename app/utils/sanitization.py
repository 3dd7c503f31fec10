import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters so user input can be embedded in emails.
    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    return html.escape(value.strip(), quote=True)


def sanitize_payload(data: dict[str, Any]) -> dict[str, Any]:
    """Escape every string in an event payload, including nested dicts and lists"""

    def clean(value):
        if isinstance(value, str):
            return sanitize_string(value)
        if isinstance(value, dict):
            return {key: clean(item) for key, item in value.items()}
        if isinstance(value, list):
            return [clean(item) for item in value]
        return value

    return clean(data or {})
