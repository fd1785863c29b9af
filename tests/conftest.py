"""
Shared fixtures: in-memory SQLite database and model factories.

Factories follow the ``XFactory.create(session, **overrides)`` style; missing
references (product, supplier, creator...) are created on the fly.
"""
import uuid
from datetime import date, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

from controle_qualidade.database import build_engine
from controle_qualidade.models_db import (
    Base, User, Category, Manufacturer, Reseller, Product, Test,
    Inspection, InspectionTest, NonConformity, ActionPlan,
    InspectionStatus, SeverityLevel, ActionPlanStatus,
)


def _enable_sqlite_fks(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    event.listen(engine, "connect", _enable_sqlite_fks)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.rollback()
    session.close()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class UserFactory:
    @staticmethod
    def create(session, **kwargs):
        user = User(
            email=kwargs.pop('email', f'inspetor-{uuid.uuid4().hex[:8]}@example.com'),
            name=kwargs.pop('name', 'Maria Inspetora'),
            user_type=kwargs.pop('user_type', 'Inspetor'),
            **kwargs,
        )
        session.add(user)
        session.commit()
        return user


class ManufacturerFactory:
    @staticmethod
    def create(session, **kwargs):
        manufacturer = Manufacturer(name=kwargs.pop('name', 'Laticínios Serra Azul'), **kwargs)
        session.add(manufacturer)
        session.commit()
        return manufacturer


class ResellerFactory:
    @staticmethod
    def create(session, **kwargs):
        reseller = Reseller(nome=kwargs.pop('nome', 'Distribuidora Vale Verde'), **kwargs)
        session.add(reseller)
        session.commit()
        return reseller


class TestDefinitionFactory:
    __test__ = False  # not a pytest class

    @staticmethod
    def create(session, **kwargs):
        test = Test(
            name=kwargs.pop('name', f'Teste {uuid.uuid4().hex[:6]}'),
            description=kwargs.pop('description', None),
            **kwargs,
        )
        session.add(test)
        session.commit()
        return test


class ProductFactory:
    @staticmethod
    def create(session, **kwargs):
        tests = kwargs.pop('tests', [])
        category = kwargs.pop('category', None)
        with_category = kwargs.pop('with_category', True)
        if category is None and with_category:
            category = Category(name='Laticínios')
            session.add(category)
        product = Product(
            name=kwargs.pop('name', 'Queijo Minas Frescal'),
            category=category,
            **kwargs,
        )
        product.tests = list(tests)
        session.add(product)
        session.commit()
        return product


class InspectionFactory:
    @staticmethod
    def create(session, **kwargs):
        product = kwargs.pop('product', None) or ProductFactory.create(session)
        supplier = kwargs.pop('supplier', None) or ResellerFactory.create(session)
        manufacturer = kwargs.pop('manufacturer', None) or ManufacturerFactory.create(session)
        creator = kwargs.pop('creator', None) or UserFactory.create(session)

        inspection = Inspection(
            product_id=product.id,
            supplier_id=supplier.id,
            manufacturer_id=manufacturer.id,
            created_by=creator.id,
            batch=kwargs.pop('batch', 'L2024-001'),
            expiry_date=kwargs.pop('expiry_date', date.today() + timedelta(days=30)),
            status=kwargs.pop('status', InspectionStatus.PENDING),
            color=kwargs.pop('color', 'Branco'),
            odor=kwargs.pop('odor', 'Característico'),
            appearance=kwargs.pop('appearance', 'Íntegro'),
            **kwargs,
        )
        session.add(inspection)
        session.commit()
        return inspection


class InspectionTestFactory:
    __test__ = False  # not a pytest class

    @staticmethod
    def create(session, **kwargs):
        inspection = kwargs.pop('inspection', None) or InspectionFactory.create(session)
        test = kwargs.pop('test', None) or TestDefinitionFactory.create(session)
        row = InspectionTest(
            inspection_id=inspection.id,
            test_id=test.id,
            result=kwargs.pop('result', None),
            notes=kwargs.pop('notes', None),
            passed=kwargs.pop('passed', False),
            **kwargs,
        )
        session.add(row)
        session.commit()
        return row


class NonConformityFactory:
    @staticmethod
    def create(session, **kwargs):
        inspection = kwargs.pop('inspection', None) or InspectionFactory.create(session)
        creator_id = kwargs.pop('created_by', None) or inspection.created_by
        nc = NonConformity(
            inspection_id=inspection.id,
            created_by=creator_id,
            description=kwargs.pop('description', 'Embalagem violada'),
            severity=kwargs.pop('severity', SeverityLevel.MEDIUM),
            **kwargs,
        )
        session.add(nc)
        session.commit()
        return nc


class ActionPlanFactory:
    @staticmethod
    def create(session, **kwargs):
        inspection = kwargs.pop('inspection', None) or InspectionFactory.create(session)
        creator_id = kwargs.pop('created_by', None) or inspection.created_by
        plan = ActionPlan(
            inspection_id=inspection.id,
            created_by=creator_id,
            description=kwargs.pop('description', 'Notificar fornecedor'),
            status=kwargs.pop('status', ActionPlanStatus.PENDING),
            due_date=kwargs.pop('due_date', date.today() + timedelta(days=7)),
            **kwargs,
        )
        session.add(plan)
        session.commit()
        return plan


@pytest.fixture
def user_factory():
    return UserFactory


@pytest.fixture
def manufacturer_factory():
    return ManufacturerFactory


@pytest.fixture
def reseller_factory():
    return ResellerFactory


@pytest.fixture
def test_definition_factory():
    return TestDefinitionFactory


@pytest.fixture
def product_factory():
    return ProductFactory


@pytest.fixture
def inspection_factory():
    return InspectionFactory


@pytest.fixture
def inspection_test_factory():
    return InspectionTestFactory


@pytest.fixture
def non_conformity_factory():
    return NonConformityFactory


@pytest.fixture
def action_plan_factory():
    return ActionPlanFactory


@pytest.fixture
def today():
    return date(2024, 6, 15)
