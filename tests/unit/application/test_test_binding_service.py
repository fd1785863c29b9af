"""Tests for TestBindingService."""
import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from controle_qualidade.application.test_binding_service import TestBindingService
from controle_qualidade.domain.exceptions import (
    DependencyFailureError, ProductNotFoundError, ValidationError,
)
from controle_qualidade.models_db import InspectionTest
from controle_qualidade.repositories.unit_of_work import UnitOfWork


def _db_error():
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


class TestResolveApplicableTests:

    def test_returns_bound_test_ids(self, db_session, product_factory, test_definition_factory):
        tests = [test_definition_factory.create(db_session) for _ in range(2)]
        product = product_factory.create(db_session, tests=tests)
        svc = TestBindingService(UnitOfWork(db_session))

        assert svc.resolve_applicable_tests(product.id) == {t.id for t in tests}
        assert svc.resolve_applicable_tests(str(product.id)) == {t.id for t in tests}

    def test_product_without_tests_is_empty(self, db_session, product_factory):
        product = product_factory.create(db_session)
        svc = TestBindingService(UnitOfWork(db_session))

        assert svc.resolve_applicable_tests(product.id) == set()

    def test_invalid_id(self):
        svc = TestBindingService(MagicMock())
        with pytest.raises(ValidationError):
            svc.resolve_applicable_tests('not-a-uuid')

    def test_catalog_failure(self):
        uow = MagicMock()
        uow.catalog.get_applicable_test_ids.side_effect = _db_error()
        svc = TestBindingService(uow)

        with pytest.raises(DependencyFailureError) as exc:
            svc.resolve_applicable_tests(uuid.uuid4())
        assert exc.value.dependency == "catálogo de testes"


class TestMaterializeInspectionTests:

    def test_creates_one_blank_row_per_test(self, db_session, inspection_factory, test_definition_factory):
        inspection = inspection_factory.create(db_session)
        tests = [test_definition_factory.create(db_session) for _ in range(3)]
        svc = TestBindingService(UnitOfWork(db_session))

        created = svc.materialize_inspection_tests(inspection.id, [t.id for t in tests])

        assert len(created) == 3
        rows = db_session.query(InspectionTest).filter_by(inspection_id=inspection.id).all()
        assert len(rows) == 3
        assert all(r.result is None for r in rows)

    def test_second_call_creates_nothing(self, db_session, inspection_factory, test_definition_factory):
        inspection = inspection_factory.create(db_session)
        ids = [test_definition_factory.create(db_session).id for _ in range(2)]
        svc = TestBindingService(UnitOfWork(db_session))

        svc.materialize_inspection_tests(inspection.id, ids)
        assert svc.materialize_inspection_tests(inspection.id, ids + ids) == []
        assert db_session.query(InspectionTest).filter_by(inspection_id=inspection.id).count() == 2

    def test_empty_ids_skip_the_database(self):
        uow = MagicMock()
        svc = TestBindingService(uow)

        assert svc.materialize_inspection_tests(uuid.uuid4(), set()) == []
        uow.inspection_tests.bulk_add.assert_not_called()
        uow.commit.assert_not_called()

    def test_write_failure_rolls_back(self):
        uow = MagicMock()
        uow.commit.side_effect = _db_error()
        svc = TestBindingService(uow)

        with pytest.raises(DependencyFailureError) as exc:
            svc.materialize_inspection_tests(uuid.uuid4(), [uuid.uuid4()])
        assert exc.value.dependency == "testes da inspeção"
        uow.rollback.assert_called_once()


class TestGetAvailableTests:

    def test_ordered_by_name(self, db_session, product_factory, test_definition_factory):
        b = test_definition_factory.create(db_session, name='Umidade')
        a = test_definition_factory.create(db_session, name='Acidez')
        product = product_factory.create(db_session, tests=[b, a])
        svc = TestBindingService(UnitOfWork(db_session))

        assert [t.name for t in svc.get_available_tests(str(product.id))] == ['Acidez', 'Umidade']

    def test_unknown_product(self, db_session):
        svc = TestBindingService(UnitOfWork(db_session))
        with pytest.raises(ProductNotFoundError):
            svc.get_available_tests(uuid.uuid4())
