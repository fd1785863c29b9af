"""Repository for InspectionTest rows (per-inspection snapshot of the product's tests)."""
from datetime import datetime
from typing import Optional, List, Iterable
import uuid

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from controle_qualidade.models_db import InspectionTest, Test


class InspectionTestRepository:
    def __init__(self, session):
        self._session = session

    def get_by_id(self, id: uuid.UUID) -> Optional[InspectionTest]:
        return self._session.get(InspectionTest, id)

    def get_by_pair(self, inspection_id: uuid.UUID, test_id: uuid.UUID) -> Optional[InspectionTest]:
        return self._session.query(InspectionTest).filter_by(
            inspection_id=inspection_id,
            test_id=test_id,
        ).first()

    def get_by_inspection_id(self, inspection_id: uuid.UUID) -> List[InspectionTest]:
        """Rows with their Test loaded, ordered by test name."""
        return self._session.query(InspectionTest).options(
            joinedload(InspectionTest.test),
        ).join(InspectionTest.test).filter(
            InspectionTest.inspection_id == inspection_id,
        ).order_by(func.lower(Test.name)).all()

    def get_test_ids(self, inspection_id: uuid.UUID) -> set:
        rows = self._session.query(InspectionTest.test_id).filter_by(
            inspection_id=inspection_id,
        ).all()
        return {row[0] for row in rows}

    def bulk_add(self, inspection_id: uuid.UUID, test_ids: Iterable[uuid.UUID]) -> List[InspectionTest]:
        """
        Insert one blank row per test id not yet linked to the inspection.

        Returns only the rows created by this call.
        """
        existing = self.get_test_ids(inspection_id)
        created = []
        for test_id in test_ids:
            if test_id in existing:
                continue
            row = InspectionTest(
                inspection_id=inspection_id,
                test_id=test_id,
                result=None,
                notes=None,
                passed=False,
            )
            self._session.add(row)
            existing.add(test_id)
            created.append(row)
        return created

    def upsert(
        self,
        inspection_id: uuid.UUID,
        test_id: uuid.UUID,
        result: Optional[str],
        notes: Optional[str] = None,
        passed: bool = False,
    ) -> InspectionTest:
        """Update the (inspection, test) row in place, creating it when absent."""
        row = self.get_by_pair(inspection_id, test_id)
        if row is None:
            row = InspectionTest(inspection_id=inspection_id, test_id=test_id)
            self._session.add(row)
        else:
            row.updated_at = datetime.utcnow()

        row.result = result
        row.notes = notes
        row.passed = bool(passed)
        self._session.flush()  # later lookups of the same pair must see this row
        return row
