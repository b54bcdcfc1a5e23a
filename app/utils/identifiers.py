from app.custom_error import ValidationError
import uuid


def validate_record_id(record_id: str, label: str = "record") -> str:
    """Reject identifiers that are not UUIDs before they reach the store (400 instead of a PostgREST error)"""
    try:
        return str(uuid.UUID(str(record_id)))
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f"Invalid {label} ID")
