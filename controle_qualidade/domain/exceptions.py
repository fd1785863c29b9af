"""
Domain exceptions - Business-level errors.

These exceptions represent business rule violations and domain-specific errors.
They are raised by the application services before any write is attempted
(validation, identity, not-found) and translated to API responses at the edge.
"""

import unicodedata


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(DomainError):
    """Raised when a required field is missing or invalid."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class NotFoundError(DomainError):
    """Raised when a referenced id does not resolve."""

    def __init__(self, entity_type: str, identifier: str = None):
        self.entity_type = entity_type
        self.identifier = identifier
        message = f"{entity_type} não encontrado"
        if identifier:
            message = f"{entity_type} '{identifier}' não encontrado"
        super().__init__(message, f"{_code_slug(entity_type)}_NOT_FOUND")


class AuthenticationRequiredError(DomainError):
    """Raised when an operation must stamp a creator but no user is logged in."""

    def __init__(self, message: str = "Usuário não autenticado"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class DependencyFailureError(DomainError):
    """Raised when the catalog, the database or the storage collaborator fails."""

    def __init__(self, dependency: str, message: str = None):
        self.dependency = dependency
        message = message or f"Falha ao acessar {dependency}"
        super().__init__(message, "DEPENDENCY_FAILURE")


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        super().__init__(message, f"BUSINESS_RULE_{rule.upper()}")


# Specific domain errors

class InspectionNotFoundError(NotFoundError):
    def __init__(self, inspection_id: str = None):
        super().__init__("Inspeção", inspection_id)


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str = None):
        super().__init__("Produto", product_id)


class TestNotFoundError(NotFoundError):
    __test__ = False  # not a pytest class

    def __init__(self, test_id: str = None):
        super().__init__("Teste", test_id)


class ManufacturerNotFoundError(NotFoundError):
    def __init__(self, manufacturer_id: str = None):
        super().__init__("Fabricante", manufacturer_id)


class SupplierNotFoundError(NotFoundError):
    def __init__(self, supplier_id: str = None):
        super().__init__("Revendedor", supplier_id)


class NonConformityNotFoundError(NotFoundError):
    def __init__(self, non_conformity_id: str = None):
        super().__init__("Não conformidade", non_conformity_id)


class ActionPlanNotFoundError(NotFoundError):
    def __init__(self, action_plan_id: str = None):
        super().__init__("Plano de ação", action_plan_id)


class InvalidStatusTransitionError(BusinessRuleViolationError):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, current_status: str, target_status: str):
        self.current_status = current_status
        self.target_status = target_status
        message = f"Não é possível mudar de '{current_status}' para '{target_status}'"
        super().__init__("STATUS_TRANSITION", message)


def _code_slug(text: str) -> str:
    """'Plano de ação' -> 'PLANO_DE_ACAO' for machine-readable codes."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    return "_".join(ascii_text.upper().split())
