"""
Utility functions for the application.
"""
from typing import Any, Dict
from datetime import datetime, timezone
from tripledger.core.exceptions import ValidationError


def utcnow() -> datetime:
    """Current server time as a naive UTC datetime (the format stored in the database)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively."""
    return email.strip().lower()


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response


def reject_nulls(updates: Dict[str, Any], required_fields) -> None:
    """Raise ValidationError when a partial update clears a required field."""
    cleared = sorted(field for field in required_fields if field in updates and updates[field] is None)
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} cannot be null")
