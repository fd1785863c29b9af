"""
Simple Dependency Injection container using Flask's g object.

No external DI framework needed - just factory functions that create
services with their dependencies, cached per-request in Flask g.
"""
from flask import g, current_app

from controle_qualidade.auth import get_current_user_id
from controle_qualidade.database import get_db
from controle_qualidade.domain.exceptions import DependencyFailureError
from controle_qualidade.repositories.unit_of_work import UnitOfWork


def get_uow() -> UnitOfWork:
    """Get or create UnitOfWork for the current request."""
    if 'uow' not in g:
        db = next(get_db())
        if db is None:
            raise DependencyFailureError("banco de dados", "Banco de dados não configurado")
        g.uow = UnitOfWork(db)
    return g.uow


def get_test_binding_service():
    """Get TestBindingService for the current request."""
    from controle_qualidade.application.test_binding_service import TestBindingService
    return TestBindingService(get_uow())


def get_inspection_service():
    """Get InspectionService with test binding, photo storage and identity."""
    from controle_qualidade.application.inspection_service import InspectionService

    return InspectionService(
        get_uow(),
        test_binding=get_test_binding_service(),
        storage_service=getattr(current_app, 'storage_service', None),
        current_user_id=get_current_user_id,
    )


def get_non_conformity_service():
    """Get NonConformityService with identity."""
    from controle_qualidade.application.non_conformity_service import NonConformityService
    return NonConformityService(get_uow(), current_user_id=get_current_user_id)


def get_dashboard_service():
    """Get DashboardService for the current request."""
    from controle_qualidade.application.dashboard_service import DashboardService
    return DashboardService(get_uow())


def teardown_uow(exception=None):
    """
    Teardown handler for Flask app context.

    Register with: app.teardown_appcontext(teardown_uow)
    """
    uow = g.pop('uow', None)
    if uow:
        if exception:
            uow.rollback()
        uow.close()
