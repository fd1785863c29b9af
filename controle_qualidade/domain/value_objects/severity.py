"""
Severity Value Object - Non-conformity severity levels.
"""

from enum import Enum

from .labels import parse_label


class SeverityLevel(str, Enum):
    """Severity levels for non-conformities, ordered low -> critical."""
    LOW = "Baixa"
    MEDIUM = "Média"
    HIGH = "Alta"
    CRITICAL = "Crítica"

    @property
    def weight(self) -> int:
        """Get numeric weight for ordering and calculations."""
        weights = {
            self.LOW: 1,
            self.MEDIUM: 2,
            self.HIGH: 3,
            self.CRITICAL: 4
        }
        return weights[self]

    @property
    def label_pt(self) -> str:
        return self.value

    def __lt__(self, other) -> bool:
        if isinstance(other, SeverityLevel):
            return self.weight < other.weight
        return NotImplemented

    def __le__(self, other) -> bool:
        if isinstance(other, SeverityLevel):
            return self.weight <= other.weight
        return NotImplemented

    def __gt__(self, other) -> bool:
        if isinstance(other, SeverityLevel):
            return self.weight > other.weight
        return NotImplemented

    def __ge__(self, other) -> bool:
        if isinstance(other, SeverityLevel):
            return self.weight >= other.weight
        return NotImplemented

    @classmethod
    def parse(cls, value) -> 'SeverityLevel':
        """Accept 'Média', 'media', 'MEDIUM' or the member itself."""
        return parse_label(
            cls, value, "severity",
            "Severidade inválida: use Baixa, Média, Alta ou Crítica",
        )
