"""Date parsing shared by the status resolver and the input validators."""
from datetime import date, datetime

from .exceptions import ValidationError

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def parse_date(value, field: str, message: str, required: bool = True):
    """Accept a date, a datetime, 'YYYY-MM-DD' or 'DD/MM/YYYY'."""
    if value is None or value == "":
        if required:
            raise ValidationError(message, field)
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    raise ValidationError(message, field)
