"""Helpers for matching user-typed enum labels ('média', 'MEDIA', 'Média')."""
import unicodedata

from ..exceptions import ValidationError


def fold(text: str) -> str:
    """Lowercase, strip accents and collapse whitespace."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    return " ".join(ascii_text.lower().replace("_", " ").split())


def parse_label(enum_cls, value, field: str, message: str):
    """
    Resolve a member of a str Enum from its value, its name or a folded label.

    Raises ValidationError with ``message`` when nothing matches.
    """
    if isinstance(value, enum_cls):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(message, field)

    wanted = fold(value)
    for member in enum_cls:
        if wanted in (fold(member.value), fold(member.name)):
            return member
    raise ValidationError(message, field)
