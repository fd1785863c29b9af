from flask import Blueprint, jsonify, request
from flask_login import login_required

from controle_qualidade.container import get_dashboard_service

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/api/dashboard/stats', methods=['GET'])
@login_required
def stats():
    return jsonify(get_dashboard_service().get_stats())


@dashboard_bp.route('/api/dashboard/recent-inspections', methods=['GET'])
@login_required
def recent_inspections():
    limit = request.args.get('limit', type=int)
    return jsonify(get_dashboard_service().get_recent_inspections(limit=limit))


@dashboard_bp.route('/api/dashboard/inspections-by-period', methods=['GET'])
@login_required
def inspections_by_period():
    days = request.args.get('days', default=30, type=int)
    return jsonify(get_dashboard_service().get_inspections_by_period(days=days))


@dashboard_bp.route('/api/dashboard/overview', methods=['GET'])
@login_required
def overview():
    return jsonify(get_dashboard_service().get_overview())


@dashboard_bp.route('/api/dashboard/quality/<kind>', methods=['GET'])
@login_required
def quality_queue(kind):
    """Abas da página de qualidade: pending, incomplete, expired."""
    return jsonify(get_dashboard_service().get_quality_queue(kind))
