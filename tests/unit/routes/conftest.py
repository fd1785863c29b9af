"""Flask app fixtures: fresh in-memory database per test, seeded through the app's own session."""
from unittest.mock import MagicMock

import pytest

from controle_qualidade import database
from controle_qualidade.app import create_app
from tests.conftest import (
    ManufacturerFactory, ProductFactory, ResellerFactory, TestDefinitionFactory, UserFactory,
)

JSON_HEADERS = {'Accept': 'application/json'}


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.upload_photo.side_effect = lambda data, inspection_id, filename=None: (
        f"/static/uploads/inspections/{inspection_id}/{filename or 'foto.jpg'}"
    )
    return storage


@pytest.fixture
def app(storage):
    app = create_app("sqlite://", storage_service=storage)
    app.config['TESTING'] = True
    yield app
    database.db_session.remove()
    database.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    """Catalog plus one inspector; returns plain ids so nothing depends on a live session."""
    session = database.db_session()
    user = UserFactory.create(session, name='Carlos Souza')
    tests = [TestDefinitionFactory.create(session, name=n) for n in ('Acidez', 'pH')]
    product = ProductFactory.create(session, tests=tests)
    supplier = ResellerFactory.create(session)
    manufacturer = ManufacturerFactory.create(session)
    ids = {
        'user_id': str(user.id),
        'test_ids': [str(t.id) for t in tests],
        'product_id': str(product.id),
        'supplier_id': str(supplier.id),
        'manufacturer_id': str(manufacturer.id),
    }
    database.db_session.remove()
    return ids


@pytest.fixture
def logged_in(client, seed):
    with client.session_transaction() as sess:
        sess['_user_id'] = seed['user_id']
    return client


def create_inspection(client, seed, **overrides):
    payload = {
        'product_id': seed['product_id'],
        'batch': 'L-7781',
        'supplier_id': seed['supplier_id'],
        'manufacturer_id': seed['manufacturer_id'],
        'expiry_date': '2999-12-31',
        'color': 'Amarelo claro',
        'odor': 'Característico',
        'appearance': 'Íntegro',
    }
    payload.update(overrides)
    return client.post('/api/inspections', json=payload, headers=JSON_HEADERS)
