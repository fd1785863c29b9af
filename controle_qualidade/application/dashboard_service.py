"""Service for building dashboard data."""
import calendar
import math
from datetime import date, datetime, timedelta
from typing import List, Optional

from controle_qualidade.config import config
from controle_qualidade.domain.exceptions import ValidationError
from controle_qualidade.domain.status import (
    current_status, display_status, missing_fields, pending_tests,
)
from controle_qualidade.domain.value_objects import InspectionStatus

QUEUE_KINDS = {
    'pending': InspectionStatus.PENDING,
    'incomplete': InspectionStatus.INCOMPLETE,
    'expired': InspectionStatus.EXPIRED,
}


class DashboardService:
    """Read-only aggregations for the dashboard and the quality overview page."""

    def __init__(self, uow):
        self._uow = uow

    def get_stats(self, now: Optional[datetime] = None) -> dict:
        """
        Headline counters, each with its difference against yesterday.

        Returns dict with keys: pending_inspections, non_conformities,
        action_plans, expired_products and the matching ``*_diff`` keys.
        """
        now = now or datetime.utcnow()
        yesterday = now - timedelta(days=1)
        today = now.date()

        pending = self._uow.inspections.count_by_status(InspectionStatus.PENDING, today=today)
        pending_before = self._uow.inspections.count_by_status(
            InspectionStatus.PENDING, created_before=yesterday, today=today,
        )
        non_conformities = self._uow.non_conformities.count()
        non_conformities_before = self._uow.non_conformities.count(created_before=yesterday)
        action_plans = self._uow.action_plans.count()
        action_plans_before = self._uow.action_plans.count(created_before=yesterday)
        expired = self._uow.inspections.count_expiring_before(today)
        expired_before = self._uow.inspections.count_expiring_before(yesterday.date())

        return {
            'pending_inspections': pending,
            'pending_inspections_diff': pending - pending_before,
            'non_conformities': non_conformities,
            'non_conformities_diff': non_conformities - non_conformities_before,
            'action_plans': action_plans,
            'action_plans_diff': action_plans - action_plans_before,
            'expired_products': expired,
            'expired_products_diff': expired - expired_before,
        }

    def get_recent_inspections(self, limit: Optional[int] = None, today: Optional[date] = None) -> List[dict]:
        limit = limit or config.RECENT_INSPECTIONS_LIMIT
        today = today or date.today()
        result = []
        for insp in self._uow.inspections.list(limit=limit):
            creator = insp.creator
            result.append({
                'id': str(insp.id),
                'product_name': insp.product.name if insp.product else 'Produto desconhecido',
                'batch': insp.batch,
                'status': current_status(insp, today).value,
                'created_at': insp.created_at.isoformat() if insp.created_at else None,
                'created_by_name': creator.display_name if creator else 'Desconhecido',
                'created_by_initials': creator.initials if creator else 'DE',
            })
        return result

    def get_inspections_by_period(self, days: int = 30, today: Optional[date] = None) -> List[dict]:
        """One entry per day of the window ending today, zero-filled, labelled dd/mm."""
        if days < 1:
            raise ValidationError("Período deve ter ao menos um dia", "days")
        today = today or date.today()
        first_day = today - timedelta(days=days - 1)

        counts = dict(self._uow.inspections.count_per_day(
            start=datetime.combine(first_day, datetime.min.time()),
            end=datetime.combine(today + timedelta(days=1), datetime.min.time()),
        ))
        return [
            {'date': day.strftime('%d/%m'), 'count': counts.get(day, 0)}
            for day in (first_day + timedelta(days=i) for i in range(days))
        ]

    def get_overview(self, today: Optional[date] = None) -> List[dict]:
        """
        Inspections per fixed day window of each month, for the overview chart.

        Counting is done per day in the database; days are then folded into
        the window that ends on ceil(day / N) * N, capped at month end and,
        for the current month, at today.
        """
        today = today or date.today()
        buckets = {}
        for day, count in self._uow.inspections.count_per_day():
            end = bucket_end(day, today, config.DASHBOARD_BUCKET_DAYS)
            buckets[end] = buckets.get(end, 0) + count

        return [
            {'name': end.strftime('%d/%m'), 'total': buckets[end]}
            for end in sorted(buckets)
        ]

    def get_quality_queue(self, kind: str, today: Optional[date] = None) -> List[dict]:
        """
        Inspections for one tab of the quality page: pending, incomplete or expired.

        Membership uses the status as of ``today``, so a batch past its expiry
        is listed as expired even before the expiry job stores it.
        """
        wanted = QUEUE_KINDS.get((kind or '').lower())
        if wanted is None:
            raise ValidationError("Fila inválida: use pending, incomplete ou expired", "kind")

        today = today or date.today()
        result = []
        for insp in self._uow.inspections.get_open_with_tests():
            if display_status(insp, insp.inspection_tests, today) != wanted:
                continue
            result.append({
                'id': str(insp.id),
                'product_name': insp.product.name if insp.product else 'Produto desconhecido',
                'batch': insp.batch,
                'expiry_date': insp.expiry_date.isoformat(),
                'status': wanted.value,
                'missing_fields': missing_fields(insp),
                'pending_tests': len(pending_tests(insp.inspection_tests)),
            })
        return result


def bucket_end(day: date, today: date, size: int = 5) -> date:
    """Last day of the ``size``-day window holding ``day``: 7 -> 10, 28 -> 30, 31 -> 31."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    end_day = min(math.ceil(day.day / size) * size, last_day)
    if (day.year, day.month) == (today.year, today.month):
        end_day = min(end_day, today.day)
    return day.replace(day=end_day)
