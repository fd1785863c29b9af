"""Repository for Inspection entities."""
from datetime import date
from typing import Optional, List
import uuid

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import joinedload, selectinload

from controle_qualidade.models_db import Inspection, InspectionStatus


class InspectionRepository:
    def __init__(self, session):
        self._session = session

    def get_by_id(self, id: uuid.UUID) -> Optional[Inspection]:
        return self._session.get(Inspection, id)

    def get_with_details(self, id: uuid.UUID) -> Optional[Inspection]:
        """Load inspection with catalog references and creator eagerly."""
        return self._session.query(Inspection).options(
            joinedload(Inspection.product),
            joinedload(Inspection.supplier),
            joinedload(Inspection.manufacturer),
            joinedload(Inspection.creator),
        ).filter(Inspection.id == id).first()

    def list(
        self,
        status: Optional[InspectionStatus] = None,
        product_id: Optional[uuid.UUID] = None,
        supplier_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[Inspection]:
        """Newest first, optionally filtered by the status as of ``today``."""
        query = self._session.query(Inspection).options(
            joinedload(Inspection.product),
            joinedload(Inspection.creator),
        )
        if status is not None:
            query = query.filter(_status_is(status, today or date.today()))
        if product_id is not None:
            query = query.filter(Inspection.product_id == product_id)
        if supplier_id is not None:
            query = query.filter(Inspection.supplier_id == supplier_id)

        query = query.order_by(Inspection.created_at.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_pending_expired(self, today: date) -> List[Inspection]:
        """Pending inspections whose expiry date is strictly before today."""
        return self._session.query(Inspection).filter(
            Inspection.status == InspectionStatus.PENDING,
            Inspection.expiry_date < today,
        ).all()

    def get_open_with_tests(self) -> List[Inspection]:
        """Pendente and Vencido inspections with their test rows, newest first."""
        return self._session.query(Inspection).options(
            joinedload(Inspection.product),
            selectinload(Inspection.inspection_tests),
        ).filter(
            Inspection.status.in_([InspectionStatus.PENDING, InspectionStatus.EXPIRED]),
        ).order_by(Inspection.created_at.desc()).all()

    def count_by_status(self, status: InspectionStatus, created_before=None,
                        today: Optional[date] = None) -> int:
        query = self._session.query(func.count(Inspection.id)).filter(
            _status_is(status, today or date.today()),
        )
        if created_before is not None:
            query = query.filter(Inspection.created_at < created_before)
        return query.scalar() or 0

    def count_expiring_before(self, day: date) -> int:
        """Inspections whose product expiry date is strictly before the given day."""
        return self._session.query(func.count(Inspection.id)).filter(
            Inspection.expiry_date < day,
        ).scalar() or 0

    def count_per_day(self, start=None, end=None) -> List[tuple]:
        """(day, count) rows grouped by creation day, optionally within [start, end)."""
        day = func.date(Inspection.created_at)
        query = self._session.query(day, func.count(Inspection.id))
        if start is not None:
            query = query.filter(Inspection.created_at >= start)
        if end is not None:
            query = query.filter(Inspection.created_at < end)
        rows = query.group_by(day).order_by(day).all()
        return [(_as_date(d), count) for d, count in rows]

    def add(self, inspection: Inspection) -> Inspection:
        self._session.add(inspection)
        return inspection


def _status_is(status: InspectionStatus, today: date):
    """Filter on the status as of ``today``: a stored Pendente past its expiry counts as Vencido."""
    stored_pending = Inspection.status == InspectionStatus.PENDING
    if status == InspectionStatus.PENDING:
        return and_(stored_pending, Inspection.expiry_date >= today)
    if status == InspectionStatus.EXPIRED:
        return or_(
            Inspection.status == InspectionStatus.EXPIRED,
            and_(stored_pending, Inspection.expiry_date < today),
        )
    return Inspection.status == status


def _as_date(value):
    # SQLite returns func.date() as an ISO string
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value
