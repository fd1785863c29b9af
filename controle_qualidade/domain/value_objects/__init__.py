# Value Objects - Immutable domain primitives
from .inspection_status import InspectionStatus, Disposition
from .severity import SeverityLevel
from .action_plan_status import ActionPlanStatus

__all__ = ['InspectionStatus', 'Disposition', 'SeverityLevel', 'ActionPlanStatus']
