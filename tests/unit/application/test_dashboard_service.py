"""Tests for DashboardService."""
from datetime import date, datetime

import pytest

from controle_qualidade.application.dashboard_service import DashboardService, bucket_end
from controle_qualidade.domain.exceptions import ValidationError
from controle_qualidade.models_db import InspectionStatus
from controle_qualidade.repositories.unit_of_work import UnitOfWork

NOW = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def dashboard(db_session):
    return DashboardService(UnitOfWork(db_session))


class TestStats:

    def test_counts_and_diffs(self, dashboard, db_session, inspection_factory,
                              non_conformity_factory, action_plan_factory):
        old_pending = inspection_factory.create(db_session, created_at=datetime(2024, 6, 10))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 15, 8, 0))
        inspection_factory.create(
            db_session, created_at=datetime(2024, 6, 1), status=InspectionStatus.EXPIRED,
            expiry_date=date(2024, 6, 1),
        )
        inspection_factory.create(
            db_session, created_at=datetime(2024, 6, 1), status=InspectionStatus.EXPIRED,
            expiry_date=date(2024, 6, 14),
        )
        non_conformity_factory.create(db_session, inspection=old_pending, created_at=datetime(2024, 6, 1))
        non_conformity_factory.create(db_session, inspection=old_pending, created_at=datetime(2024, 6, 15, 9, 0))
        action_plan_factory.create(db_session, inspection=old_pending, created_at=datetime(2024, 6, 15, 10, 0))

        stats = dashboard.get_stats(now=NOW)

        assert stats == {
            'pending_inspections': 2,
            'pending_inspections_diff': 1,
            'non_conformities': 2,
            'non_conformities_diff': 1,
            'action_plans': 1,
            'action_plans_diff': 1,
            'expired_products': 2,
            'expired_products_diff': 1,
        }

    def test_empty_database(self, dashboard):
        stats = dashboard.get_stats(now=NOW)
        assert set(stats.values()) == {0}
        assert len(stats) == 8

    def test_pending_past_expiry_is_not_counted_as_pending(self, dashboard, db_session, inspection_factory):
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 1), expiry_date=date(2024, 6, 10))

        stats = dashboard.get_stats(now=NOW)

        assert stats['pending_inspections'] == 0
        assert stats['expired_products'] == 1


class TestRecentInspections:

    def test_newest_first_with_creator(self, dashboard, db_session, inspection_factory, user_factory):
        joao = user_factory.create(db_session, name='João Pereira')
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 1))
        newest = inspection_factory.create(db_session, creator=joao, created_at=datetime(2024, 6, 2))

        items = dashboard.get_recent_inspections(limit=1)

        assert len(items) == 1
        assert items[0]['id'] == str(newest.id)
        assert items[0]['product_name'] == 'Queijo Minas Frescal'
        assert items[0]['status'] == 'Pendente'
        assert items[0]['created_by_name'] == 'João Pereira'
        assert items[0]['created_by_initials'] == 'JP'

    def test_status_as_of_today(self, dashboard, db_session, inspection_factory):
        inspection_factory.create(db_session, expiry_date=date(2024, 6, 10))

        (item,) = dashboard.get_recent_inspections(today=date(2024, 6, 15))
        assert item['status'] == 'Vencido'

    def test_default_limit(self, dashboard, db_session, inspection_factory):
        for _ in range(7):
            inspection_factory.create(db_session)
        assert len(dashboard.get_recent_inspections()) == 5


class TestInspectionsByPeriod:

    def test_zero_filled_window(self, dashboard, db_session, inspection_factory):
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 12, 10, 0))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 14, 10, 0))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 14, 16, 0))
        inspection_factory.create(db_session, created_at=datetime(2024, 6, 15, 7, 0))

        series = dashboard.get_inspections_by_period(days=3, today=date(2024, 6, 15))

        assert series == [
            {'date': '13/06', 'count': 0},
            {'date': '14/06', 'count': 2},
            {'date': '15/06', 'count': 1},
        ]

    def test_default_window_is_thirty_days(self, dashboard):
        assert len(dashboard.get_inspections_by_period(today=date(2024, 6, 15))) == 30

    def test_invalid_window(self, dashboard):
        with pytest.raises(ValidationError):
            dashboard.get_inspections_by_period(days=0)


class TestOverview:

    def test_groups_into_windows(self, dashboard, db_session, inspection_factory):
        for created in (
            datetime(2024, 5, 7), datetime(2024, 5, 9), datetime(2024, 5, 31),
            datetime(2024, 6, 3), datetime(2024, 6, 13), datetime(2024, 6, 14),
        ):
            inspection_factory.create(db_session, created_at=created)

        overview = dashboard.get_overview(today=date(2024, 6, 14))

        assert overview == [
            {'name': '10/05', 'total': 2},
            {'name': '31/05', 'total': 1},
            {'name': '05/06', 'total': 1},
            {'name': '14/06', 'total': 2},
        ]

    @pytest.mark.parametrize('day,today,expected', [
        (date(2024, 6, 7), date(2024, 7, 1), date(2024, 6, 10)),
        (date(2024, 6, 10), date(2024, 7, 1), date(2024, 6, 10)),
        (date(2024, 6, 28), date(2024, 7, 1), date(2024, 6, 30)),
        (date(2024, 5, 31), date(2024, 7, 1), date(2024, 5, 31)),
        (date(2023, 2, 27), date(2024, 7, 1), date(2023, 2, 28)),
        (date(2024, 6, 12), date(2024, 6, 13), date(2024, 6, 13)),
    ])
    def test_bucket_end(self, day, today, expected):
        assert bucket_end(day, today) == expected


class TestQualityQueue:

    @pytest.fixture
    def queue_env(self, db_session, inspection_factory, inspection_test_factory):
        ready = inspection_factory.create(db_session, batch='PRONTO')
        inspection_test_factory.create(db_session, inspection=ready, result='Conforme')
        missing_color = inspection_factory.create(db_session, batch='SEM-COR', color=None)
        pending_test = inspection_factory.create(db_session, batch='TESTE-ABERTO')
        inspection_test_factory.create(db_session, inspection=pending_test)
        inspection_factory.create(db_session, batch='VENCIDO', status=InspectionStatus.EXPIRED)
        inspection_factory.create(db_session, batch='APROVADO', status=InspectionStatus.APPROVED)
        return {'missing_color': missing_color, 'pending_test': pending_test}

    def test_pending(self, dashboard, queue_env):
        assert [i['batch'] for i in dashboard.get_quality_queue('pending')] == ['PRONTO']

    def test_incomplete(self, dashboard, queue_env):
        items = {i['batch']: i for i in dashboard.get_quality_queue('incomplete')}

        assert set(items) == {'SEM-COR', 'TESTE-ABERTO'}
        assert items['SEM-COR']['missing_fields'] == ['color']
        assert items['SEM-COR']['status'] == 'Incompleto'
        assert items['TESTE-ABERTO']['pending_tests'] == 1

    def test_expired(self, dashboard, queue_env):
        assert [i['batch'] for i in dashboard.get_quality_queue('EXPIRED')] == ['VENCIDO']

    def test_expiry_passing_moves_batch_to_expired(self, dashboard, db_session, inspection_factory,
                                                   inspection_test_factory):
        stale = inspection_factory.create(db_session, batch='PASSOU', expiry_date=date(2024, 6, 10))
        inspection_test_factory.create(db_session, inspection=stale)

        before = {i['batch'] for i in dashboard.get_quality_queue('incomplete', today=date(2024, 6, 10))}
        expired = dashboard.get_quality_queue('expired', today=date(2024, 6, 11))

        assert before == {'PASSOU'}
        assert [i['batch'] for i in expired] == ['PASSOU']
        assert expired[0]['status'] == 'Vencido'
        assert dashboard.get_quality_queue('incomplete', today=date(2024, 6, 11)) == []

    def test_unknown_kind(self, dashboard):
        with pytest.raises(ValidationError):
            dashboard.get_quality_queue('approved')
