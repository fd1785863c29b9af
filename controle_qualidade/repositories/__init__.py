from .unit_of_work import UnitOfWork
from .inspection_repository import InspectionRepository
from .inspection_test_repository import InspectionTestRepository
from .catalog_repository import CatalogRepository
from .non_conformity_repository import NonConformityRepository
from .action_plan_repository import ActionPlanRepository
from .user_repository import UserRepository
