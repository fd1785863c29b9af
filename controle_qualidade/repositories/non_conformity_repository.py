"""Repository for NonConformity entities."""
from typing import Optional, List
import uuid

from sqlalchemy import func

from controle_qualidade.models_db import NonConformity


class NonConformityRepository:
    def __init__(self, session):
        self._session = session

    def get_by_id(self, id: uuid.UUID) -> Optional[NonConformity]:
        return self._session.get(NonConformity, id)

    def list(self, inspection_id: Optional[uuid.UUID] = None) -> List[NonConformity]:
        query = self._session.query(NonConformity)
        if inspection_id is not None:
            query = query.filter(NonConformity.inspection_id == inspection_id)
        return query.order_by(NonConformity.created_at.desc()).all()

    def count(self, created_before=None) -> int:
        query = self._session.query(func.count(NonConformity.id))
        if created_before is not None:
            query = query.filter(NonConformity.created_at < created_before)
        return query.scalar() or 0

    def add(self, non_conformity: NonConformity) -> NonConformity:
        self._session.add(non_conformity)
        return non_conformity

    def delete(self, non_conformity: NonConformity) -> None:
        self._session.delete(non_conformity)
