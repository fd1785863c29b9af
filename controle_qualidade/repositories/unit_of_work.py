"""
Transaction boundary shared by the inspection workflow.

One UnitOfWork is built per request (see ``container.get_uow``) so an
inspection, its tests, non-conformities and action plans are written
through the same session and committed or rolled back together.
"""
from .inspection_repository import InspectionRepository
from .inspection_test_repository import InspectionTestRepository
from .catalog_repository import CatalogRepository
from .non_conformity_repository import NonConformityRepository
from .action_plan_repository import ActionPlanRepository
from .user_repository import UserRepository


class UnitOfWork:
    """
    Repositories of the quality workflow over a single session.

        uow = UnitOfWork(session)
        test_ids = uow.catalog.get_applicable_test_ids(product_id)
        uow.inspection_tests.bulk_add(inspection.id, test_ids)
        uow.commit()

    Services decide when to commit; a failed commit must be followed by
    ``rollback()`` before the session is reused.
    """

    def __init__(self, session):
        self.session = session
        self.catalog = CatalogRepository(session)
        self.users = UserRepository(session)
        self.inspections = InspectionRepository(session)
        self.inspection_tests = InspectionTestRepository(session)
        self.non_conformities = NonConformityRepository(session)
        self.action_plans = ActionPlanRepository(session)

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

    def flush(self):
        """Assign primary keys without ending the transaction."""
        self.session.flush()

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Uncommitted writes are discarded on error; the session is always released.
        if exc_type is not None:
            self.rollback()
        self.close()
        return False
