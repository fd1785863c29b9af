# Domain Layer - Pure business logic, no dependencies on infrastructure

# Exceptions
from .exceptions import (
    DomainError,
    ValidationError,
    NotFoundError,
    AuthenticationRequiredError,
    DependencyFailureError,
    BusinessRuleViolationError,
    InvalidStatusTransitionError,
    InspectionNotFoundError,
    ProductNotFoundError,
    TestNotFoundError,
    ManufacturerNotFoundError,
    SupplierNotFoundError,
    NonConformityNotFoundError,
    ActionPlanNotFoundError,
)

# Value Objects
from .value_objects import (
    InspectionStatus,
    Disposition,
    SeverityLevel,
    ActionPlanStatus,
)

# Dates and status resolution
from .dates import parse_date

from .status import (
    resolve_status,
    current_status,
    display_status,
    is_incomplete,
    missing_fields,
    pending_tests,
    SENSORY_FIELDS,
    REQUIRED_SENSORY_FIELDS,
)

__all__ = [
    # Exceptions
    'DomainError',
    'ValidationError',
    'NotFoundError',
    'AuthenticationRequiredError',
    'DependencyFailureError',
    'BusinessRuleViolationError',
    'InvalidStatusTransitionError',
    'InspectionNotFoundError',
    'ProductNotFoundError',
    'TestNotFoundError',
    'ManufacturerNotFoundError',
    'SupplierNotFoundError',
    'NonConformityNotFoundError',
    'ActionPlanNotFoundError',
    # Value Objects
    'InspectionStatus',
    'Disposition',
    'SeverityLevel',
    'ActionPlanStatus',
    # Dates and status resolution
    'parse_date',
    'resolve_status',
    'current_status',
    'display_status',
    'is_incomplete',
    'missing_fields',
    'pending_tests',
    'SENSORY_FIELDS',
    'REQUIRED_SENSORY_FIELDS',
]
