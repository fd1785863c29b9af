from datetime import date, datetime
from typing import Optional, List
import uuid

from flask_login import UserMixin
from sqlalchemy import (
    JSON, String, ForeignKey, Text, Date, TIMESTAMP, Boolean, Uuid,
    UniqueConstraint, Table, Column, Enum as SAEnum,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import JSONB

from .domain.value_objects import (
    InspectionStatus, Disposition, SeverityLevel, ActionPlanStatus,
)


# 1. Declaração Base
class Base(DeclarativeBase):
    pass


def _enum_column(enum_cls, length=40):
    """Persist the enum value ('Pendente', 'Média') instead of the member name."""
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=length,
    )


JSONType = JSON().with_variant(JSONB(), "postgresql")


# 2. Catálogo (somente leitura para o motor de inspeção)

# Tabela de Associação M2M: Teste <-> Produto
test_products = Table(
    "test_products",
    Base.metadata,
    Column("test_id", Uuid, ForeignKey("tests.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Uuid, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class User(UserMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String)
    phone: Mapped[Optional[str]] = mapped_column(String)
    user_type: Mapped[Optional[str]] = mapped_column(String)  # Ex: Inspetor, Gestor
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @property
    def initials(self) -> str:
        """'Maria da Silva' -> 'MD'."""
        parts = self.display_name.split()
        return "".join(p[0] for p in parts).upper()[:2]


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    products: Mapped[List["Product"]] = relationship(back_populates="category")


class Manufacturer(Base):
    __tablename__ = "manufacturers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    contact: Mapped[Optional[str]] = mapped_column(String)
    email: Mapped[Optional[str]] = mapped_column(String)
    phone: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)


class Reseller(Base):
    """Revendedor / fornecedor que entrega o lote."""
    __tablename__ = "revendedores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    nome: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String)
    telefone: Mapped[Optional[str]] = mapped_column(String)
    cidade: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("categories.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    tests: Mapped[List["Test"]] = relationship(secondary=test_products, back_populates="products")


class Test(Base):
    __tablename__ = "tests"
    __test__ = False  # not a pytest class

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    products: Mapped[List["Product"]] = relationship(secondary=test_products, back_populates="tests")


# 3. Entidades do motor de inspeção

class Inspection(Base):
    __tablename__ = "inspections"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    batch: Mapped[str] = mapped_column(String, nullable=False)  # Lote do fornecedor (não é único)
    supplier_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("revendedores.id"), nullable=False)
    manufacturer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("manufacturers.id"), nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[InspectionStatus] = mapped_column(
        _enum_column(InspectionStatus), default=InspectionStatus.PENDING, index=True
    )
    # Resultado final do inspetor; None enquanto não concluída
    disposition: Mapped[Optional[Disposition]] = mapped_column(_enum_column(Disposition), nullable=True)

    # Análise sensorial
    color: Mapped[Optional[str]] = mapped_column(String)
    odor: Mapped[Optional[str]] = mapped_column(String)
    appearance: Mapped[Optional[str]] = mapped_column(String)
    texture: Mapped[Optional[str]] = mapped_column(String)
    temperature: Mapped[Optional[str]] = mapped_column(String)
    humidity: Mapped[Optional[str]] = mapped_column(String)

    notes: Mapped[Optional[str]] = mapped_column(Text)
    photos: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)  # URLs do storage externo

    created_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Relacionamentos
    product: Mapped["Product"] = relationship()
    supplier: Mapped["Reseller"] = relationship()
    manufacturer: Mapped["Manufacturer"] = relationship()
    creator: Mapped["User"] = relationship()
    inspection_tests: Mapped[List["InspectionTest"]] = relationship(back_populates="inspection")
    non_conformities: Mapped[List["NonConformity"]] = relationship(back_populates="inspection")
    action_plans: Mapped[List["ActionPlan"]] = relationship(back_populates="inspection")


class InspectionTest(Base):
    __tablename__ = "inspection_tests"
    __table_args__ = (
        UniqueConstraint("inspection_id", "test_id", name="uq_inspection_tests_inspection_test"),
    )
    __test__ = False  # not a pytest class

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    inspection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("inspections.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    test_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("tests.id"), nullable=False)

    result: Mapped[Optional[str]] = mapped_column(Text)  # None até o registro do resultado
    notes: Mapped[Optional[str]] = mapped_column(Text)
    passed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    inspection: Mapped["Inspection"] = relationship(back_populates="inspection_tests")
    test: Mapped["Test"] = relationship()


class NonConformity(Base):
    __tablename__ = "non_conformities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    inspection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("inspections.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[SeverityLevel] = mapped_column(_enum_column(SeverityLevel), nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    inspection: Mapped["Inspection"] = relationship(back_populates="non_conformities")
    creator: Mapped["User"] = relationship()


class ActionPlan(Base):
    __tablename__ = "action_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Irmão da não conformidade sob a mesma inspeção (não há FK para non_conformities)
    inspection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("inspections.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ActionPlanStatus] = mapped_column(
        _enum_column(ActionPlanStatus), default=ActionPlanStatus.PENDING
    )
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=datetime.utcnow)

    inspection: Mapped["Inspection"] = relationship(back_populates="action_plans")
    creator: Mapped["User"] = relationship()
