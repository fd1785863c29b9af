"""
Seed script to add realistic demo data for presentations.
Run:    python seed_demo_data.py
Delete: python seed_demo_data.py --delete
"""
import sys
from datetime import date, timedelta

from controle_qualidade.app import create_app
from controle_qualidade.database import get_db
from controle_qualidade.models_db import (
    User, Category, Manufacturer, Reseller, Product, Test,
    Inspection, InspectionTest, NonConformity, ActionPlan,
)
from controle_qualidade.repositories.unit_of_work import UnitOfWork
from controle_qualidade.application.inspection_service import InspectionService
from controle_qualidade.application.test_binding_service import TestBindingService
from controle_qualidade.application.non_conformity_service import NonConformityService

DEMO_TAG = "DEMO_APRESENTACAO"

# ──────────────────────────────────────────────────────────────────
# Catálogo de recebimento (laticínios e hortifrúti)
# ──────────────────────────────────────────────────────────────────

TESTS = {
    "Acidez titulável": "Percentual de ácido lático (leite e derivados).",
    "pH": "Medição com pHmetro calibrado.",
    "Temperatura de recebimento": "Produtos refrigerados até 7°C.",
    "Umidade": "Método de estufa a 105°C.",
    "Integridade da embalagem": "Lacres, rótulos e ausência de amassados.",
}

PRODUCTS = [
    {"name": "Queijo Minas Frescal", "category": "Laticínios",
     "tests": ["Acidez titulável", "pH", "Temperatura de recebimento"]},
    {"name": "Iogurte Natural Integral", "category": "Laticínios",
     "tests": ["Acidez titulável", "Temperatura de recebimento", "Integridade da embalagem"]},
    {"name": "Farinha de Trigo Tipo 1", "category": "Secos",
     "tests": ["Umidade", "Integridade da embalagem"]},
    {"name": "Tomate Italiano", "category": "Hortifrúti", "tests": []},
]

MANUFACTURERS = ["Laticínios Serra Azul", "Moinho Santa Clara", "Hortas do Vale"]
RESELLERS = [
    {"nome": "Distribuidora Vale Verde", "cidade": "Campinas"},
    {"nome": "Atacadão Sul Alimentos", "cidade": "Curitiba"},
]

# (produto, dias até a validade, resultado final, não conformidade)
INSPECTION_SCENARIOS = [
    (0, 20, "approved", None),
    (1, 12, "approved_with_restrictions", ("Embalagem com pequeno amassado", "Baixa", "Notificar fornecedor")),
    (2, 90, None, None),
    (3, -2, None, None),
    (0, 5, "rejected", ("Temperatura de 11°C no recebimento", "Crítica", "Devolver lote ao fornecedor")),
]


def seed():
    """Create realistic demo data for presentation."""
    app = create_app()
    with app.app_context():
        session = next(get_db())

        print(f"Seeding demo data (tag: [{DEMO_TAG}])...")

        # 1. Inspetor
        inspector = User(
            name=f"Inspetora Demo [{DEMO_TAG}]",
            email=f"{DEMO_TAG.lower()}.inspetora@example.com",
            user_type="Inspetor",
        )
        session.add(inspector)

        # 2. Catálogo
        tests = {name: Test(name=f"{name} [{DEMO_TAG}]", description=desc) for name, desc in TESTS.items()}
        session.add_all(tests.values())

        categories = {}
        products = []
        for data in PRODUCTS:
            category = categories.setdefault(data["category"], Category(name=f"{data['category']} [{DEMO_TAG}]"))
            product = Product(name=f"{data['name']} [{DEMO_TAG}]", category=category)
            product.tests = [tests[name] for name in data["tests"]]
            products.append(product)
        session.add_all(products)

        manufacturers = [Manufacturer(name=f"{name} [{DEMO_TAG}]") for name in MANUFACTURERS]
        resellers = [Reseller(nome=f"{r['nome']} [{DEMO_TAG}]", cidade=r["cidade"]) for r in RESELLERS]
        session.add_all(manufacturers + resellers)
        session.commit()
        print(f"  Created {len(products)} products, {len(tests)} tests, "
              f"{len(manufacturers)} manufacturers, {len(resellers)} resellers")

        # 3. Inspeções (pelo mesmo fluxo da API)
        uow = UnitOfWork(session)
        identity = lambda: inspector.id  # noqa: E731
        inspections = InspectionService(uow, test_binding=TestBindingService(uow), current_user_id=identity)
        non_conformities = NonConformityService(uow, current_user_id=identity)

        today = date.today()
        for idx, (product_idx, days, disposition, nc) in enumerate(INSPECTION_SCENARIOS):
            created = inspections.create_inspection(
                product_id=products[product_idx].id,
                batch=f"DEMO-{today:%y%m}-{idx + 1:03d}",
                supplier_id=resellers[idx % len(resellers)].id,
                manufacturer_id=manufacturers[min(product_idx, len(manufacturers) - 1)].id,
                expiry_date=today + timedelta(days=days),
                sensory={"color": "Característica", "odor": "Característico", "appearance": "Íntegro"},
                notes=f"[{DEMO_TAG}]",
            )
            inspection = created.inspection
            if nc:
                description, severity, plan = nc
                non_conformities.register_non_conformity(
                    inspection.id, description, severity,
                    create_action_plan=True,
                    action_plan_description=plan,
                    action_plan_due_date=today + timedelta(days=7),
                )
            if disposition:
                inspections.complete_inspection(inspection.id, disposition)
            print(f"  Inspection {idx + 1}: {products[product_idx].name} | {inspection.status.value} | "
                  f"{created.test_count} tests")

        print("\nDone! Demo data seeded successfully.")
        print(f"  Tag: [{DEMO_TAG}]")
        print(f"  Inspections: {len(INSPECTION_SCENARIOS)}")
        print("  Delete with: python seed_demo_data.py --delete")


def delete():
    """Remove all demo data tagged with DEMO_TAG (children before inspections)."""
    app = create_app()
    with app.app_context():
        session = next(get_db())

        print(f"Removing demo data (tag: [{DEMO_TAG}])...")

        inspection_ids = [
            row[0] for row in session.query(Inspection.id).filter(Inspection.notes.contains(DEMO_TAG))
        ]
        for model in (NonConformity, ActionPlan, InspectionTest):
            deleted = session.query(model).filter(
                model.inspection_id.in_(inspection_ids)
            ).delete(synchronize_session=False)
            print(f"  Deleted {deleted} {model.__tablename__}")
        session.query(Inspection).filter(Inspection.id.in_(inspection_ids)).delete(synchronize_session=False)
        print(f"  Deleted {len(inspection_ids)} inspections")

        for product in session.query(Product).filter(Product.name.contains(DEMO_TAG)).all():
            product.tests = []
        session.flush()

        for model, column in (
            (Product, Product.name), (Test, Test.name), (Category, Category.name),
            (Manufacturer, Manufacturer.name), (Reseller, Reseller.nome), (User, User.name),
        ):
            deleted = session.query(model).filter(column.contains(DEMO_TAG)).delete(synchronize_session=False)
            print(f"  Deleted {deleted} {model.__tablename__}")

        session.commit()
        print("\nDone! All demo data removed.")


if __name__ == "__main__":
    if "--delete" in sys.argv:
        delete()
    else:
        seed()
