"""Tests for InspectionRepository."""
import uuid
from datetime import date, datetime, timedelta

from sqlalchemy import text

from controle_qualidade.repositories.inspection_repository import InspectionRepository
from controle_qualidade.models_db import InspectionStatus


class TestInspectionRepository:

    def test_get_by_id(self, db_session, inspection_factory):
        inspection = inspection_factory.create(db_session)
        repo = InspectionRepository(db_session)

        result = repo.get_by_id(inspection.id)
        assert result is not None
        assert result.id == inspection.id

    def test_get_by_id_not_found(self, db_session):
        repo = InspectionRepository(db_session)
        assert repo.get_by_id(uuid.uuid4()) is None

    def test_get_with_details_loads_references(self, db_session, inspection_factory):
        inspection = inspection_factory.create(db_session)
        repo = InspectionRepository(db_session)

        result = repo.get_with_details(inspection.id)
        assert result.product.name == 'Queijo Minas Frescal'
        assert result.supplier.nome == 'Distribuidora Vale Verde'
        assert result.manufacturer.name == 'Laticínios Serra Azul'
        assert result.creator.name == 'Maria Inspetora'

    def test_status_is_stored_as_label(self, db_session, inspection_factory):
        inspection_factory.create(db_session, status=InspectionStatus.EXPIRED)
        raw = db_session.execute(text("SELECT status FROM inspections")).scalar()
        assert raw == "Vencido"

    def test_list_newest_first(self, db_session, inspection_factory):
        older = inspection_factory.create(db_session, created_at=datetime(2024, 6, 1, 8, 0))
        newer = inspection_factory.create(db_session, created_at=datetime(2024, 6, 2, 8, 0))
        repo = InspectionRepository(db_session)

        results = repo.list()
        assert [r.id for r in results] == [newer.id, older.id]

    def test_list_filters(self, db_session, inspection_factory, product_factory):
        product = product_factory.create(db_session, name='Iogurte Natural')
        match = inspection_factory.create(db_session, product=product, status=InspectionStatus.EXPIRED)
        inspection_factory.create(db_session, product=product)
        inspection_factory.create(db_session, status=InspectionStatus.EXPIRED)
        repo = InspectionRepository(db_session)

        results = repo.list(status=InspectionStatus.EXPIRED, product_id=product.id)
        assert [r.id for r in results] == [match.id]

    def test_list_filters_by_supplier_and_limit(self, db_session, inspection_factory, reseller_factory):
        supplier = reseller_factory.create(db_session, nome='Atacadão Sul')
        for _ in range(3):
            inspection_factory.create(db_session, supplier=supplier)
        inspection_factory.create(db_session)
        repo = InspectionRepository(db_session)

        assert len(repo.list(supplier_id=supplier.id)) == 3
        assert len(repo.list(supplier_id=supplier.id, limit=2)) == 2

    def test_get_pending_expired(self, db_session, inspection_factory, today):
        expired = inspection_factory.create(db_session, expiry_date=today - timedelta(days=1))
        inspection_factory.create(db_session, expiry_date=today)
        inspection_factory.create(
            db_session, expiry_date=today - timedelta(days=5), status=InspectionStatus.APPROVED,
        )
        repo = InspectionRepository(db_session)

        results = repo.get_pending_expired(today)
        assert [r.id for r in results] == [expired.id]

    def test_get_open_with_tests(self, db_session, inspection_factory, inspection_test_factory):
        pending = inspection_factory.create(db_session)
        expired = inspection_factory.create(db_session, status=InspectionStatus.EXPIRED)
        inspection_factory.create(db_session, status=InspectionStatus.REJECTED)
        inspection_test_factory.create(db_session, inspection=pending)
        repo = InspectionRepository(db_session)

        results = repo.get_open_with_tests()
        assert {r.id for r in results} == {pending.id, expired.id}
        by_id = {r.id: r for r in results}
        assert len(by_id[pending.id].inspection_tests) == 1
        assert by_id[expired.id].inspection_tests == []

    def test_count_by_status(self, db_session, inspection_factory):
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 10))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 14))
        inspection_factory.create(db_session, status=InspectionStatus.APPROVED)
        repo = InspectionRepository(db_session)

        assert repo.count_by_status(InspectionStatus.PENDING) == 2
        assert repo.count_by_status(InspectionStatus.PENDING, created_before=datetime(2024, 6, 12)) == 1
        assert repo.count_by_status(InspectionStatus.REJECTED) == 0

    def test_stored_pending_past_expiry_counts_as_expired(self, db_session, inspection_factory, today):
        overdue = inspection_factory.create(db_session, expiry_date=today - timedelta(days=1))
        stored = inspection_factory.create(db_session, status=InspectionStatus.EXPIRED, expiry_date=today - timedelta(days=3))
        current = inspection_factory.create(db_session, expiry_date=today)
        repo = InspectionRepository(db_session)

        assert {r.id for r in repo.list(status=InspectionStatus.EXPIRED, today=today)} == {overdue.id, stored.id}
        assert [r.id for r in repo.list(status=InspectionStatus.PENDING, today=today)] == [current.id]
        assert repo.count_by_status(InspectionStatus.EXPIRED, today=today) == 2
        assert repo.count_by_status(InspectionStatus.PENDING, today=today) == 1

    def test_count_expiring_before(self, db_session, inspection_factory, today):
        inspection_factory.create(db_session, expiry_date=today - timedelta(days=3))
        inspection_factory.create(db_session, expiry_date=today - timedelta(days=1), status=InspectionStatus.APPROVED)
        inspection_factory.create(db_session, expiry_date=today)
        repo = InspectionRepository(db_session)

        assert repo.count_expiring_before(today) == 2
        assert repo.count_expiring_before(today - timedelta(days=1)) == 1

    def test_count_per_day(self, db_session, inspection_factory):
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 10, 9, 0))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 10, 17, 30))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 12, 11, 0))
        inspection_factory.create(db_session, created_at=datetime(2024, 5, 1, 11, 0))
        repo = InspectionRepository(db_session)

        rows = repo.count_per_day(start=datetime(2024, 6, 1), end=datetime(2024, 6, 15))
        assert rows == [(date(2024, 6, 10), 2), (date(2024, 6, 12), 1)]
        assert len(repo.count_per_day()) == 3
