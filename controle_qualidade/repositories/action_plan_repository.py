"""Repository for ActionPlan entities."""
from datetime import date
from typing import Optional, List
import uuid

from sqlalchemy import func

from controle_qualidade.models_db import ActionPlan, ActionPlanStatus


class ActionPlanRepository:
    def __init__(self, session):
        self._session = session

    def get_by_id(self, id: uuid.UUID) -> Optional[ActionPlan]:
        return self._session.get(ActionPlan, id)

    def list(self, inspection_id: Optional[uuid.UUID] = None) -> List[ActionPlan]:
        """Ordered by due date; plans without one come last."""
        query = self._session.query(ActionPlan)
        if inspection_id is not None:
            query = query.filter(ActionPlan.inspection_id == inspection_id)
        return query.order_by(
            ActionPlan.due_date.is_(None),
            ActionPlan.due_date,
            ActionPlan.created_at,
        ).all()

    def get_open_overdue(self, today: date) -> List[ActionPlan]:
        return self._session.query(ActionPlan).filter(
            ActionPlan.status.in_([ActionPlanStatus.PENDING, ActionPlanStatus.IN_PROGRESS]),
            ActionPlan.due_date.isnot(None),
            ActionPlan.due_date < today,
        ).all()

    def count(self, created_before=None) -> int:
        query = self._session.query(func.count(ActionPlan.id))
        if created_before is not None:
            query = query.filter(ActionPlan.created_at < created_before)
        return query.scalar() or 0

    def add(self, plan: ActionPlan) -> ActionPlan:
        self._session.add(plan)
        return plan

    def delete(self, plan: ActionPlan) -> None:
        self._session.delete(plan)
