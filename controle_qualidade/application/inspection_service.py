"""Inspection lifecycle: creation, test results, completion and the time-driven expiry."""
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from controle_qualidade.models_db import Inspection
from controle_qualidade.domain.exceptions import (
    AuthenticationRequiredError, DependencyFailureError, InspectionNotFoundError,
    InvalidStatusTransitionError, ManufacturerNotFoundError, ProductNotFoundError,
    SupplierNotFoundError, TestNotFoundError, ValidationError,
)
from controle_qualidade.domain.status import (
    SENSORY_FIELDS, current_status, display_status, missing_fields, resolve_status,
)
from controle_qualidade.domain.value_objects import Disposition, InspectionStatus
from controle_qualidade.application.validators import (
    optional_text, parse_date, require_text, require_uuid,
)

logger = structlog.get_logger()


@dataclass
class Degradation:
    """Secondary steps of inspection creation that failed and may be retried."""
    tests: bool = False
    photos: bool = False

    @property
    def any(self) -> bool:
        return self.tests or self.photos


@dataclass
class InspectionCreated:
    """Result of create_inspection."""
    inspection: Inspection
    status: InspectionStatus
    test_count: int = 0
    photo_urls: List[str] = field(default_factory=list)
    degraded: Degradation = field(default_factory=Degradation)


@dataclass
class PhotoUpload:
    """Result of attach_photos: URLs now on the inspection and photos that did not upload."""
    urls: List[str] = field(default_factory=list)
    failed: int = 0


class InspectionService:
    """Owns every write to inspections and their test rows."""

    def __init__(self, uow, test_binding=None, storage_service=None,
                 current_user_id: Optional[Callable] = None):
        self._uow = uow
        self._test_binding = test_binding
        self._storage_service = storage_service
        self._current_user_id = current_user_id or (lambda: None)

    # ------------------------------------------------------------------ create

    def create_inspection(self, product_id, batch, supplier_id, manufacturer_id,
                          expiry_date, sensory=None, notes=None, photos=None,
                          today: Optional[date] = None) -> InspectionCreated:
        """
        Persist a new inspection for one arriving batch.

        The inspection is committed first. Test materialization and photo upload
        run afterwards as best-effort steps: their failure is logged and
        reported through ``InspectionCreated.degraded`` instead of raised.

        Raises:
            ValidationError: missing or malformed identity fields.
            AuthenticationRequiredError: no logged-in user to stamp as creator.
            ProductNotFoundError / SupplierNotFoundError / ManufacturerNotFoundError
        """
        product_id = require_uuid(product_id, "product_id", "Produto é obrigatório")
        batch = require_text(batch, "batch", "Lote é obrigatório")
        supplier_id = require_uuid(supplier_id, "supplier_id", "Revendedor é obrigatório")
        manufacturer_id = require_uuid(manufacturer_id, "manufacturer_id", "Fabricante é obrigatório")
        expiry = parse_date(expiry_date, "expiry_date", "Data de validade inválida")

        user_id = self._require_user()

        if not self._uow.catalog.get_product(product_id):
            raise ProductNotFoundError(str(product_id))
        if not self._uow.catalog.get_supplier(supplier_id):
            raise SupplierNotFoundError(str(supplier_id))
        if not self._uow.catalog.get_manufacturer(manufacturer_id):
            raise ManufacturerNotFoundError(str(manufacturer_id))

        status = resolve_status(expiry, today=today)
        inspection = Inspection(
            product_id=product_id,
            batch=batch,
            supplier_id=supplier_id,
            manufacturer_id=manufacturer_id,
            expiry_date=expiry,
            status=status,
            notes=optional_text(notes),
            created_by=user_id,
            **_sensory_values(sensory),
        )
        self._uow.inspections.add(inspection)
        try:
            self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            logger.error("Falha ao criar inspeção", product_id=str(product_id), error=str(e))
            raise DependencyFailureError("banco de dados", "Erro ao criar inspeção") from e

        inspection_id = inspection.id
        logger.info("Inspeção criada", inspection_id=str(inspection_id), status=status.value)

        result = InspectionCreated(inspection=inspection, status=status)
        result.test_count, result.degraded.tests = self._bind_tests(inspection_id, product_id)

        if photos:
            try:
                upload = self.attach_photos(inspection_id, photos)
            except DependencyFailureError as e:
                logger.warning("Fotos não anexadas", inspection_id=str(inspection_id), error=e.message)
                result.degraded.photos = True
            else:
                result.photo_urls = upload.urls
                result.degraded.photos = upload.failed > 0

        return result

    def _bind_tests(self, inspection_id, product_id):
        """Returns (rows created, degraded)."""
        if self._test_binding is None:
            logger.warning("Serviço de testes indisponível", inspection_id=str(inspection_id))
            return 0, True
        try:
            test_ids = self._test_binding.resolve_applicable_tests(product_id)
            created = self._test_binding.materialize_inspection_tests(inspection_id, test_ids)
        except DependencyFailureError as e:
            logger.warning("Inspeção criada sem testes", inspection_id=str(inspection_id), error=e.message)
            return 0, True
        return len(created), False

    # ------------------------------------------------------------------ photos

    def attach_photos(self, inspection_id, photos) -> PhotoUpload:
        """
        Upload photos and append the URLs of those that uploaded to the inspection.

        Each photo is raw bytes or a ``(filename, bytes)`` tuple. A failed
        upload does not discard the photos already stored; it is counted in
        ``PhotoUpload.failed``.

        Raises:
            InspectionNotFoundError
            DependencyFailureError: storage unavailable or no photo uploaded.
        """
        inspection = self.get_inspection(inspection_id)
        if not photos:
            return PhotoUpload()
        if self._storage_service is None:
            raise DependencyFailureError("armazenamento de fotos")

        upload = PhotoUpload()
        for photo in photos:
            filename, data = photo if isinstance(photo, tuple) else (None, photo)
            try:
                upload.urls.append(self._storage_service.upload_photo(data, inspection.id, filename=filename))
            except DependencyFailureError as e:
                upload.failed += 1
                logger.warning(
                    "Falha no upload de foto",
                    inspection_id=str(inspection.id), filename=filename, error=e.message,
                )

        if not upload.urls:
            raise DependencyFailureError("armazenamento de fotos", "Nenhuma foto foi enviada")

        with self._transaction("fotos da inspeção"):
            inspection.photos = list(inspection.photos or []) + upload.urls
            inspection.updated_at = datetime.utcnow()

        logger.info(
            "Fotos anexadas",
            inspection_id=str(inspection.id), count=len(upload.urls), failed=upload.failed,
        )
        return upload

    # ------------------------------------------------------------------ tests

    def record_test_result(self, inspection_id, test_id, result, notes=None, passed=False):
        """
        Write the result of one test in place, keyed by (inspection, test).

        Creates the row when the test was not materialized at creation.
        Does not change the inspection status.
        """
        inspection = self.get_inspection(inspection_id)
        test_id = require_uuid(test_id, "test_id", "Teste é obrigatório")
        if not self._uow.catalog.get_test(test_id):
            raise TestNotFoundError(str(test_id))

        with self._transaction("resultado do teste"):
            row = self._uow.inspection_tests.upsert(
                inspection.id, test_id, optional_text(result), optional_text(notes), passed,
            )
        logger.info(
            "Resultado de teste registrado",
            inspection_id=str(inspection.id), test_id=str(test_id), passed=row.passed,
        )
        return row

    def add_tests(self, inspection_id, tests) -> List:
        """
        Add tests to an inspection after creation, upserting each (inspection, test) pair.

        ``tests`` is a non-empty list of dicts with ``test_id`` and optional
        ``result``, ``notes`` and ``passed``.
        """
        if not tests:
            raise ValidationError("Nenhum teste informado.", "tests")
        inspection = self.get_inspection(inspection_id)

        entries = []
        for item in tests:
            test_id = require_uuid(item.get("test_id"), "test_id", "Teste é obrigatório")
            if not self._uow.catalog.get_test(test_id):
                raise TestNotFoundError(str(test_id))
            entries.append((test_id, item))

        with self._transaction("testes da inspeção"):
            rows = [
                self._uow.inspection_tests.upsert(
                    inspection.id,
                    test_id,
                    optional_text(item.get("result")),
                    optional_text(item.get("notes")),
                    item.get("passed", False),
                )
                for test_id, item in entries
            ]
            inspection.updated_at = datetime.utcnow()
        logger.info("Testes adicionados", inspection_id=str(inspection.id), count=len(rows))
        return rows

    # ------------------------------------------------------------------ complete

    def complete_inspection(self, inspection_id, disposition, sensory=None, notes=None,
                            allow_override: bool = False) -> Inspection:
        """
        Record the inspector's final disposition, merging any sensory updates.

        Completing again with the same disposition only merges fields. A
        different disposition is a correction and needs ``allow_override``.

        Raises:
            ValidationError: unknown disposition.
            InspectionNotFoundError
            InvalidStatusTransitionError: changing a recorded disposition without override.
        """
        disposition = Disposition.parse(disposition)
        inspection = self.get_inspection(inspection_id)

        previous = inspection.disposition
        if previous is not None and previous != disposition:
            if not allow_override:
                raise InvalidStatusTransitionError(inspection.status.value, disposition.status.value)
            logger.warning(
                "Resultado final sobrescrito",
                inspection_id=str(inspection.id),
                previous=previous.value,
                new=disposition.value,
            )

        for name, value in _sensory_values(sensory).items():
            setattr(inspection, name, value)
        if optional_text(notes):
            inspection.notes = optional_text(notes)

        with self._transaction("conclusão da inspeção"):
            inspection.disposition = disposition
            inspection.status = resolve_status(inspection.expiry_date, disposition)
            inspection.updated_at = datetime.utcnow()

        logger.info(
            "Inspeção concluída",
            inspection_id=str(inspection.id), status=inspection.status.value,
        )
        return inspection

    def refresh_expired_statuses(self, today: Optional[date] = None) -> int:
        """Persist Pendente -> Vencido for inspections whose expiry passed. Returns the count."""
        today = today or date.today()
        expired = self._uow.inspections.get_pending_expired(today)
        now = datetime.utcnow()
        with self._transaction("inspeções vencidas"):
            for inspection in expired:
                inspection.status = resolve_status(inspection.expiry_date, today=today)
                inspection.updated_at = now

        if expired:
            logger.info("Inspeções vencidas atualizadas", count=len(expired), today=today.isoformat())
        return len(expired)

    # ------------------------------------------------------------------ reads

    def get_inspection(self, inspection_id) -> Inspection:
        inspection_id = require_uuid(inspection_id, "inspection_id", "ID da inspeção não fornecido.")
        inspection = self._uow.inspections.get_by_id(inspection_id)
        if not inspection:
            raise InspectionNotFoundError(str(inspection_id))
        return inspection

    def get_inspection_detail(self, inspection_id, today: Optional[date] = None) -> dict:
        """
        Inspection with its tests, non-conformities, action plans and derived status.

        ``status`` is the lifecycle status as of ``today``; ``display_status``
        adds the "Incompleto" overlay.
        """
        inspection_id = require_uuid(inspection_id, "inspection_id", "ID da inspeção não fornecido.")
        inspection = self._uow.inspections.get_with_details(inspection_id)
        if not inspection:
            raise InspectionNotFoundError(str(inspection_id))

        tests = self._uow.inspection_tests.get_by_inspection_id(inspection.id)
        return {
            'inspection': inspection,
            'tests': tests,
            'non_conformities': self._uow.non_conformities.list(inspection.id),
            'action_plans': self._uow.action_plans.list(inspection.id),
            'status': current_status(inspection, today),
            'display_status': display_status(inspection, tests, today),
            'missing_fields': missing_fields(inspection),
        }

    def list_inspections(self, status=None, product_id=None, supplier_id=None,
                         limit: Optional[int] = None, today: Optional[date] = None) -> List[Inspection]:
        """Newest first; ``status`` matches the status as of ``today``."""
        if status is not None:
            status = InspectionStatus.parse(status)
            if status == InspectionStatus.INCOMPLETE:
                raise ValidationError(
                    "'Incompleto' não é um status armazenado; use a fila de qualidade", "status",
                )
        if product_id is not None:
            product_id = require_uuid(product_id, "product_id", "Produto inválido")
        if supplier_id is not None:
            supplier_id = require_uuid(supplier_id, "supplier_id", "Revendedor inválido")

        return self._uow.inspections.list(
            status=status, product_id=product_id, supplier_id=supplier_id, limit=limit, today=today,
        )

    def _require_user(self):
        user_id = self._current_user_id()
        if not user_id:
            raise AuthenticationRequiredError()
        return require_uuid(user_id, "created_by", "Usuário inválido")

    @contextmanager
    def _transaction(self, what: str):
        """Commit the writes made in the block; a store failure rolls back and becomes DependencyFailureError."""
        try:
            yield
            self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            logger.error("Falha ao salvar", entity=what, error=str(e))
            raise DependencyFailureError("banco de dados", f"Erro ao salvar {what}") from e


def _sensory_values(sensory) -> dict:
    """Keep only known sensory fields with a non-blank value."""
    sensory = sensory or {}
    values = {}
    for name in SENSORY_FIELDS:
        value = optional_text(sensory.get(name))
        if value:
            values[name] = value
    return values
