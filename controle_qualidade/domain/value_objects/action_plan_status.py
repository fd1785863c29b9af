from enum import Enum

from .labels import parse_label


class ActionPlanStatus(str, Enum):
    """Status of a corrective action plan."""
    PENDING = "Pendente"
    IN_PROGRESS = "Em andamento"
    DONE = "Concluído"
    OVERDUE = "Atrasado"

    @property
    def label_pt(self) -> str:
        return self.value

    @property
    def is_open(self) -> bool:
        """Open plans can still become overdue."""
        return self in (self.PENDING, self.IN_PROGRESS)

    @classmethod
    def parse(cls, value) -> 'ActionPlanStatus':
        return parse_label(
            cls, value, "status",
            "Status do plano de ação inválido: use Pendente, Em andamento, Concluído ou Atrasado",
        )
