"""Read-only access to the reference catalog (products, tests, suppliers, manufacturers)."""
from typing import Optional, List
import uuid

from sqlalchemy import func

from controle_qualidade.models_db import (
    Product, Test, Manufacturer, Reseller, test_products,
)


class CatalogRepository:
    def __init__(self, session):
        self._session = session

    def get_product(self, id: uuid.UUID) -> Optional[Product]:
        return self._session.get(Product, id)

    def get_test(self, id: uuid.UUID) -> Optional[Test]:
        return self._session.get(Test, id)

    def get_manufacturer(self, id: uuid.UUID) -> Optional[Manufacturer]:
        return self._session.get(Manufacturer, id)

    def get_supplier(self, id: uuid.UUID) -> Optional[Reseller]:
        return self._session.get(Reseller, id)

    def get_applicable_test_ids(self, product_id: uuid.UUID) -> List[uuid.UUID]:
        rows = self._session.query(test_products.c.test_id).filter(
            test_products.c.product_id == product_id,
        ).all()
        return [row[0] for row in rows]

    def get_tests_for_product(self, product_id: uuid.UUID) -> List[Test]:
        return self._session.query(Test).join(
            test_products, test_products.c.test_id == Test.id,
        ).filter(
            test_products.c.product_id == product_id,
        ).order_by(func.lower(Test.name)).all()
