import logging
from datetime import date

from flask import Blueprint, jsonify, request

from controle_qualidade.config import config
from controle_qualidade.container import get_inspection_service, get_non_conformity_service

cron_bp = Blueprint('cron', __name__)


def _check_cron_auth():
    """Shared auth check for cron endpoints."""
    is_cron = request.headers.get('X-Appengine-Cron') == 'true'
    secret = request.args.get('secret')
    valid_secret = config.CRON_SECRET_TOKEN
    return is_cron or bool(secret and valid_secret and secret == valid_secret)


@cron_bp.route('/api/cron/refresh_statuses', methods=['GET', 'POST'])
def cron_refresh_statuses():
    """
    Persists time-driven transitions. Scheduled by Cloud Scheduler (e.g., daily at 00:05).
    - Inspeções Pendentes com validade vencida -> Vencido
    - Planos de ação abertos com prazo vencido -> Atrasado
    """
    logger = logging.getLogger('cron_refresh')

    if not _check_cron_auth():
        return jsonify({'error': 'Unauthorized'}), 401

    today = date.today()
    expired = get_inspection_service().refresh_expired_statuses(today=today)
    overdue = get_non_conformity_service().mark_overdue_action_plans(today=today)

    logger.info(f"⏰ Cron: {expired} inspeções vencidas, {overdue} planos atrasados")
    return jsonify({'status': 'ok', 'expired_inspections': expired, 'overdue_action_plans': overdue})
