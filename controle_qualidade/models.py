from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from typing import List, Optional

from controle_qualidade.domain.exceptions import ValidationError


class SensoryFields(BaseModel):
    color: Optional[str] = Field(default=None, description="Cor observada no lote.")
    odor: Optional[str] = Field(default=None, description="Odor observado no lote.")
    appearance: Optional[str] = Field(default=None, description="Aparência geral do produto.")
    texture: Optional[str] = Field(default=None, description="Textura (opcional).")
    temperature: Optional[str] = Field(default=None, description="Temperatura de recebimento (opcional).")
    humidity: Optional[str] = Field(default=None, description="Umidade (opcional).")


class InspectionCreate(SensoryFields):
    product_id: Optional[str] = Field(default=None, description="Produto inspecionado.")
    batch: Optional[str] = Field(default=None, description="Lote informado pelo fornecedor.")
    supplier_id: Optional[str] = Field(default=None, description="Revendedor que entregou o lote.")
    manufacturer_id: Optional[str] = Field(default=None, description="Fabricante do produto.")
    expiry_date: Optional[str] = Field(default=None, description="Data de validade (YYYY-MM-DD ou DD/MM/YYYY).")
    notes: Optional[str] = Field(default=None, description="Observações livres.")


class InspectionComplete(SensoryFields):
    disposition: Optional[str] = Field(default=None, description="approved, approved_with_restrictions ou rejected.")
    notes: Optional[str] = None
    allow_override: bool = Field(default=False, description="Permite corrigir um resultado final já registrado.")


class ResultRecord(BaseModel):
    result: Optional[str] = Field(default=None, description="Resultado livre do teste.")
    notes: Optional[str] = None
    passed: bool = False


class AddedTest(ResultRecord):
    test_id: Optional[str] = None


class AddTests(BaseModel):
    tests: List[AddedTest] = Field(default_factory=list)


class NonConformityCreate(BaseModel):
    inspection_id: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[str] = Field(default=None, description="Baixa, Média, Alta ou Crítica.")


class NonConformityRegister(BaseModel):
    description: Optional[str] = None
    severity: Optional[str] = None
    create_action_plan: bool = False
    action_plan_description: Optional[str] = None
    action_plan_due_date: Optional[str] = None


class NonConformityUpdate(BaseModel):
    description: Optional[str] = None
    severity: Optional[str] = None


class ActionPlanCreate(BaseModel):
    inspection_id: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = Field(default=None, description="Pendente, Em andamento, Concluído ou Atrasado.")


class ActionPlanUpdate(BaseModel):
    description: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = None


class NonConformityWithActionPlan(BaseModel):
    non_conformity: NonConformityCreate
    action_plan: ActionPlanCreate


def parse_payload(model, data):
    """Validate a JSON body against ``model``, raising the domain ValidationError on mismatch."""
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Campo inválido: {field or 'corpo da requisição'}", field) from e
