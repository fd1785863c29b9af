"""Non-conformities and the corrective action plans that answer them."""
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from controle_qualidade.models_db import ActionPlan, NonConformity
from controle_qualidade.domain.exceptions import (
    ActionPlanNotFoundError, AuthenticationRequiredError, DependencyFailureError,
    InspectionNotFoundError, NonConformityNotFoundError, ValidationError,
)
from controle_qualidade.domain.value_objects import ActionPlanStatus, SeverityLevel
from controle_qualidade.application.validators import (
    parse_date, require_text, require_uuid,
)

logger = structlog.get_logger()


@dataclass
class NonConformityResult:
    """A registered non-conformity and, when requested, its action plan."""
    non_conformity: NonConformity
    action_plan: Optional[ActionPlan] = None


class NonConformityService:
    """
    Records non-conformities and action plans under an inspection.

    A non-conformity and an action plan created together share one
    transaction: either both rows are committed or neither is.
    """

    def __init__(self, uow, current_user_id: Optional[Callable] = None):
        self._uow = uow
        self._current_user_id = current_user_id or (lambda: None)

    # ------------------------------------------------------------------ non-conformities

    def create_non_conformity(self, inspection_id, description, severity) -> NonConformity:
        """
        Raises:
            ValidationError: blank description or unknown severity.
            AuthenticationRequiredError
            InspectionNotFoundError
        """
        nc_fields = self._validate_non_conformity(description, severity)
        user_id = self._require_user()
        inspection = self._get_inspection(inspection_id)

        non_conformity = self._uow.non_conformities.add(
            NonConformity(inspection_id=inspection.id, created_by=user_id, **nc_fields)
        )
        self._commit("não conformidade")
        logger.info(
            "Não conformidade registrada",
            inspection_id=str(inspection.id),
            non_conformity_id=str(non_conformity.id),
            severity=non_conformity.severity.value,
        )
        return non_conformity

    def create_non_conformity_with_action_plan(self, non_conformity_data: dict,
                                               action_plan_data: dict) -> NonConformityResult:
        """
        Create a non-conformity and its action plan as one unit.

        Both records hang off the same inspection (``non_conformity_data['inspection_id']``);
        the action plan does not reference the non-conformity.

        Raises:
            ValidationError / AuthenticationRequiredError / InspectionNotFoundError:
                before anything is written.
            DependencyFailureError: the write failed; nothing was kept.
        """
        non_conformity_data = non_conformity_data or {}
        action_plan_data = action_plan_data or {}

        nc_fields = self._validate_non_conformity(
            non_conformity_data.get('description'), non_conformity_data.get('severity'),
        )
        ap_fields = self._validate_action_plan(
            action_plan_data.get('description'),
            action_plan_data.get('due_date'),
            action_plan_data.get('status'),
        )
        user_id = self._require_user()
        inspection = self._get_inspection(non_conformity_data.get('inspection_id'))

        return self._create_pair(inspection, user_id, nc_fields, ap_fields)

    def register_non_conformity(self, inspection_id, description, severity,
                                create_action_plan: bool = False,
                                action_plan_description=None,
                                action_plan_due_date=None) -> NonConformityResult:
        """
        Register a non-conformity from the inspection detail flow.

        With ``create_action_plan`` the plan description is mandatory and the
        plan starts as "Pendente". Every field is validated before any write.
        """
        nc_fields = self._validate_non_conformity(description, severity)
        ap_fields = None
        if create_action_plan:
            ap_fields = self._validate_action_plan(action_plan_description, action_plan_due_date)

        user_id = self._require_user()
        inspection = self._get_inspection(inspection_id)

        if ap_fields is None:
            non_conformity = self._uow.non_conformities.add(
                NonConformity(inspection_id=inspection.id, created_by=user_id, **nc_fields)
            )
            self._commit("não conformidade")
            logger.info(
                "Não conformidade registrada",
                inspection_id=str(inspection.id), non_conformity_id=str(non_conformity.id),
            )
            return NonConformityResult(non_conformity=non_conformity)

        return self._create_pair(inspection, user_id, nc_fields, ap_fields)

    def update_non_conformity(self, non_conformity_id, description=None, severity=None) -> NonConformity:
        non_conformity = self.get_non_conformity(non_conformity_id)
        if description is not None:
            non_conformity.description = require_text(
                description, "description", "Descrição da não conformidade é obrigatória",
            )
        if severity is not None:
            non_conformity.severity = SeverityLevel.parse(severity)
        self._commit("não conformidade")
        logger.info("Não conformidade atualizada", non_conformity_id=str(non_conformity.id))
        return non_conformity

    def delete_non_conformity(self, non_conformity_id) -> None:
        non_conformity = self.get_non_conformity(non_conformity_id)
        self._uow.non_conformities.delete(non_conformity)
        self._commit("não conformidade")
        logger.info("Não conformidade excluída", non_conformity_id=str(non_conformity_id))

    def get_non_conformity(self, non_conformity_id) -> NonConformity:
        non_conformity_id = require_uuid(
            non_conformity_id, "non_conformity_id", "ID da não conformidade não fornecido.",
        )
        non_conformity = self._uow.non_conformities.get_by_id(non_conformity_id)
        if not non_conformity:
            raise NonConformityNotFoundError(str(non_conformity_id))
        return non_conformity

    def list_non_conformities(self, inspection_id=None) -> List[NonConformity]:
        if inspection_id is not None:
            inspection_id = require_uuid(inspection_id, "inspection_id", "Inspeção inválida")
        return self._uow.non_conformities.list(inspection_id)

    # ------------------------------------------------------------------ action plans

    def create_action_plan(self, inspection_id, description, due_date=None,
                           status=ActionPlanStatus.PENDING) -> ActionPlan:
        ap_fields = self._validate_action_plan(description, due_date, status)
        user_id = self._require_user()
        inspection = self._get_inspection(inspection_id)

        plan = self._uow.action_plans.add(
            ActionPlan(inspection_id=inspection.id, created_by=user_id, **ap_fields)
        )
        self._commit("plano de ação")
        logger.info("Plano de ação criado", inspection_id=str(inspection.id), action_plan_id=str(plan.id))
        return plan

    def update_action_plan(self, action_plan_id, description=None, status=None, due_date=None) -> ActionPlan:
        plan = self.get_action_plan(action_plan_id)
        if description is not None:
            plan.description = require_text(
                description, "description", "Descrição do plano de ação é obrigatória",
            )
        if status is not None:
            plan.status = ActionPlanStatus.parse(status)
        if due_date is not None:
            plan.due_date = parse_date(due_date, "due_date", "Prazo inválido", required=False)
        self._commit("plano de ação")
        logger.info("Plano de ação atualizado", action_plan_id=str(plan.id), status=plan.status.value)
        return plan

    def delete_action_plan(self, action_plan_id) -> None:
        plan = self.get_action_plan(action_plan_id)
        self._uow.action_plans.delete(plan)
        self._commit("plano de ação")
        logger.info("Plano de ação excluído", action_plan_id=str(action_plan_id))

    def get_action_plan(self, action_plan_id) -> ActionPlan:
        action_plan_id = require_uuid(action_plan_id, "action_plan_id", "ID do plano de ação não fornecido.")
        plan = self._uow.action_plans.get_by_id(action_plan_id)
        if not plan:
            raise ActionPlanNotFoundError(str(action_plan_id))
        return plan

    def list_action_plans(self, inspection_id=None) -> List[ActionPlan]:
        """Ordered by due date."""
        if inspection_id is not None:
            inspection_id = require_uuid(inspection_id, "inspection_id", "Inspeção inválida")
        return self._uow.action_plans.list(inspection_id)

    def mark_overdue_action_plans(self, today: Optional[date] = None) -> int:
        """Open plans past their due date become "Atrasado". Returns the count."""
        today = today or date.today()
        overdue = self._uow.action_plans.get_open_overdue(today)
        for plan in overdue:
            plan.status = ActionPlanStatus.OVERDUE
        self._commit("plano de ação")
        if overdue:
            logger.info("Planos de ação atrasados", count=len(overdue), today=today.isoformat())
        return len(overdue)

    # ------------------------------------------------------------------ helpers

    def _create_pair(self, inspection, user_id, nc_fields, ap_fields) -> NonConformityResult:
        try:
            non_conformity = self._uow.non_conformities.add(
                NonConformity(inspection_id=inspection.id, created_by=user_id, **nc_fields)
            )
            self._uow.flush()
            plan = self._uow.action_plans.add(
                ActionPlan(inspection_id=inspection.id, created_by=user_id, **ap_fields)
            )
            self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            logger.error(
                "Falha ao registrar não conformidade com plano de ação",
                inspection_id=str(inspection.id),
                error=str(e),
            )
            raise DependencyFailureError(
                "banco de dados",
                "Erro ao registrar não conformidade e plano de ação; nada foi salvo",
            ) from e

        logger.info(
            "Não conformidade registrada com plano de ação",
            inspection_id=str(inspection.id),
            non_conformity_id=str(non_conformity.id),
            action_plan_id=str(plan.id),
        )
        return NonConformityResult(non_conformity=non_conformity, action_plan=plan)

    @staticmethod
    def _validate_non_conformity(description, severity) -> dict:
        description = require_text(description, "description", "Descrição e gravidade são obrigatórias.")
        if not severity:
            raise ValidationError("Descrição e gravidade são obrigatórias.", "severity")
        return {'description': description, 'severity': SeverityLevel.parse(severity)}

    @staticmethod
    def _validate_action_plan(description, due_date=None, status=None) -> dict:
        return {
            'description': require_text(
                description, "action_plan_description",
                "Descrição do plano de ação é obrigatória.",
            ),
            'due_date': parse_date(due_date, "due_date", "Prazo inválido", required=False),
            'status': ActionPlanStatus.parse(status) if status else ActionPlanStatus.PENDING,
        }

    def _get_inspection(self, inspection_id):
        inspection_id = require_uuid(inspection_id, "inspection_id", "ID da inspeção não fornecido.")
        inspection = self._uow.inspections.get_by_id(inspection_id)
        if not inspection:
            raise InspectionNotFoundError(str(inspection_id))
        return inspection

    def _require_user(self):
        user_id = self._current_user_id()
        if not user_id:
            raise AuthenticationRequiredError()
        return require_uuid(user_id, "created_by", "Usuário inválido")

    def _commit(self, what: str):
        try:
            self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            logger.error("Falha ao salvar", entity=what, error=str(e))
            raise DependencyFailureError("banco de dados", f"Erro ao salvar {what}") from e
