"""Input coercion shared by the application services. Every failure is a ValidationError."""
import uuid

from controle_qualidade.domain.dates import parse_date  # noqa: F401
from controle_qualidade.domain.exceptions import ValidationError


def require_uuid(value, field: str, message: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        raise ValidationError(message, field)
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(message, field)


def require_text(value, field: str, message: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(message, field)
    return text


def optional_text(value):
    """Blank strings are stored as None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
