"""
Status resolution for inspections.

``resolve_status`` is the single source of the lifecycle status.
``current_status`` applies it at read time, so a pending batch whose expiry
has passed reads as "Vencido" whether or not the expiry job already stored it.
``display_status`` is the presentational view ("Incompleto") every consumer
shares instead of re-deriving completeness on its own.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from .dates import parse_date
from .value_objects import Disposition, InspectionStatus

# Sensory fields required for a complete basic-info submission.
REQUIRED_SENSORY_FIELDS = ('color', 'odor', 'appearance')
OPTIONAL_SENSORY_FIELDS = ('texture', 'temperature', 'humidity')
SENSORY_FIELDS = REQUIRED_SENSORY_FIELDS + OPTIONAL_SENSORY_FIELDS


def resolve_status(
    expiry_date: Union[date, datetime, str],
    disposition: Optional[Union[Disposition, str]] = None,
    today: Optional[date] = None,
) -> InspectionStatus:
    """
    Compute the lifecycle status of an inspection.

    A recorded disposition always wins (terminal statuses never revert).
    Without one, an expiry strictly before today is "Vencido", otherwise "Pendente".

    Raises:
        ValidationError: if the disposition or the expiry date is not recognized.
    """
    if disposition is not None:
        return Disposition.parse(disposition).status

    today = today or date.today()
    expiry = parse_date(expiry_date, 'expiry_date', 'Data de validade inválida')
    if expiry < today:
        return InspectionStatus.EXPIRED
    return InspectionStatus.PENDING


def current_status(inspection, today: Optional[date] = None) -> InspectionStatus:
    """Stored status, with "Pendente" read as "Vencido" once the expiry date has passed."""
    stored = InspectionStatus.parse(inspection.status)
    if stored != InspectionStatus.PENDING:
        return stored
    return resolve_status(inspection.expiry_date, today=today)


def missing_fields(inspection) -> List[str]:
    """Required sensory fields that are still blank on the inspection."""
    return [
        name for name in REQUIRED_SENSORY_FIELDS
        if not (getattr(inspection, name, None) or '').strip()
    ]


def pending_tests(tests: Iterable) -> List:
    """Inspection test rows whose result has not been recorded yet."""
    return [t for t in tests if t.result is None or not str(t.result).strip()]


def is_incomplete(inspection, tests: Iterable = (), today: Optional[date] = None) -> bool:
    """True when a pending inspection still lacks sensory data or test results."""
    if current_status(inspection, today) != InspectionStatus.PENDING:
        return False
    return bool(missing_fields(inspection)) or bool(pending_tests(tests))


def display_status(inspection, tests: Iterable = (), today: Optional[date] = None) -> InspectionStatus:
    """Status as shown to users: "Incompleto" overlays an incomplete "Pendente"."""
    if is_incomplete(inspection, tests, today):
        return InspectionStatus.INCOMPLETE
    return current_status(inspection, today)
