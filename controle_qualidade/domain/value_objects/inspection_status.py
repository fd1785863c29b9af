"""
Inspection status and final disposition.

Status values are the Portuguese labels shown to inspectors and are persisted as-is.
"""

from enum import Enum

from .labels import parse_label


class InspectionStatus(str, Enum):
    """Inspection lifecycle: Pendente -> Vencido (by time) or terminal (by completion)."""
    PENDING = "Pendente"
    EXPIRED = "Vencido"
    APPROVED = "Aprovado"
    APPROVED_WITH_RESTRICTIONS = "Aprovado com Restrições"
    REJECTED = "Reprovado"
    # Presentational only, derived by display_status(); never persisted by the engine.
    INCOMPLETE = "Incompleto"

    @property
    def label_pt(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Terminal statuses are reached only through completion."""
        return self in (self.APPROVED, self.APPROVED_WITH_RESTRICTIONS, self.REJECTED)

    @classmethod
    def parse(cls, value) -> 'InspectionStatus':
        return parse_label(cls, value, "status", f"Status de inspeção inválido: {value}")


class Disposition(str, Enum):
    """The inspector's final quality verdict."""
    APPROVED = "approved"
    APPROVED_WITH_RESTRICTIONS = "approved_with_restrictions"
    REJECTED = "rejected"

    @property
    def status(self) -> InspectionStatus:
        """Terminal status that corresponds to this disposition."""
        mapping = {
            self.APPROVED: InspectionStatus.APPROVED,
            self.APPROVED_WITH_RESTRICTIONS: InspectionStatus.APPROVED_WITH_RESTRICTIONS,
            self.REJECTED: InspectionStatus.REJECTED,
        }
        return mapping[self]

    @classmethod
    def parse(cls, value) -> 'Disposition':
        """Accept 'approved', 'APPROVED' or the member itself."""
        return parse_label(
            cls, value, "disposition",
            "Resultado final inválido: use approved, approved_with_restrictions ou rejected",
        )
