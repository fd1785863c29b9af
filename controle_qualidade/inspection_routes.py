import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required

from controle_qualidade.container import (
    get_inspection_service, get_non_conformity_service, get_test_binding_service,
)
from controle_qualidade.domain.status import current_status
from controle_qualidade.models import (
    ActionPlanCreate, ActionPlanUpdate, AddTests, InspectionComplete, InspectionCreate,
    NonConformityCreate, NonConformityRegister, NonConformityUpdate,
    NonConformityWithActionPlan, ResultRecord, SensoryFields, parse_payload,
)

inspection_bp = Blueprint('inspections', __name__)
logger = logging.getLogger('inspection_routes')

SENSORY_KEYS = tuple(SensoryFields.model_fields)


# --- Serialização ---

def _iso(value):
    return value.isoformat() if value else None


def inspection_to_dict(insp):
    return {
        'id': str(insp.id),
        'product_id': str(insp.product_id),
        'product_name': insp.product.name if insp.product else None,
        'batch': insp.batch,
        'supplier_id': str(insp.supplier_id),
        'manufacturer_id': str(insp.manufacturer_id),
        'expiry_date': _iso(insp.expiry_date),
        'status': current_status(insp).value,
        'disposition': insp.disposition.value if insp.disposition else None,
        **{key: getattr(insp, key) for key in SENSORY_KEYS},
        'notes': insp.notes,
        'photos': list(insp.photos or []),
        'created_by': str(insp.created_by),
        'created_at': _iso(insp.created_at),
        'updated_at': _iso(insp.updated_at),
    }


def inspection_test_to_dict(row):
    return {
        'id': str(row.id),
        'test_id': str(row.test_id),
        'test_name': row.test.name if row.test else None,
        'result': row.result,
        'notes': row.notes,
        'passed': row.passed,
    }


def non_conformity_to_dict(nc):
    return {
        'id': str(nc.id),
        'inspection_id': str(nc.inspection_id),
        'description': nc.description,
        'severity': nc.severity.value,
        'created_by': str(nc.created_by),
        'created_at': _iso(nc.created_at),
    }


def action_plan_to_dict(plan):
    return {
        'id': str(plan.id),
        'inspection_id': str(plan.inspection_id),
        'description': plan.description,
        'status': plan.status.value,
        'due_date': _iso(plan.due_date),
        'created_by': str(plan.created_by),
        'created_at': _iso(plan.created_at),
    }


def _sensory(payload):
    return {key: getattr(payload, key) for key in SENSORY_KEYS}


def _uploaded_photos():
    return [(f.filename, f.read()) for f in request.files.getlist('photos') if f and f.filename]


# --- Inspeções ---

@inspection_bp.route('/api/inspections', methods=['GET'])
@login_required
def list_inspections():
    inspections = get_inspection_service().list_inspections(
        status=request.args.get('status') or None,
        product_id=request.args.get('product_id') or None,
        supplier_id=request.args.get('supplier_id') or None,
        limit=request.args.get('limit', type=int),
    )
    return jsonify([inspection_to_dict(i) for i in inspections])


@inspection_bp.route('/api/inspections', methods=['POST'])
@login_required
def create_inspection():
    """Aceita JSON ou multipart (campos no form + arquivos em 'photos')."""
    data = request.form.to_dict() if request.files or request.form else request.get_json(silent=True)
    payload = parse_payload(InspectionCreate, data)

    result = get_inspection_service().create_inspection(
        product_id=payload.product_id,
        batch=payload.batch,
        supplier_id=payload.supplier_id,
        manufacturer_id=payload.manufacturer_id,
        expiry_date=payload.expiry_date,
        sensory=_sensory(payload),
        notes=payload.notes,
        photos=_uploaded_photos(),
    )
    if result.degraded.any:
        logger.warning(
            f"⚠️ Inspeção {result.inspection.id} criada com pendências "
            f"(testes={result.degraded.tests}, fotos={result.degraded.photos})"
        )

    return jsonify({
        'inspection': inspection_to_dict(result.inspection),
        'test_count': result.test_count,
        'photo_urls': result.photo_urls,
        'degraded': {'tests': result.degraded.tests, 'photos': result.degraded.photos},
    }), 201


@inspection_bp.route('/api/inspections/<inspection_id>', methods=['GET'])
@login_required
def get_inspection(inspection_id):
    detail = get_inspection_service().get_inspection_detail(inspection_id)
    return jsonify({
        'inspection': inspection_to_dict(detail['inspection']),
        'tests': [inspection_test_to_dict(t) for t in detail['tests']],
        'non_conformities': [non_conformity_to_dict(nc) for nc in detail['non_conformities']],
        'action_plans': [action_plan_to_dict(ap) for ap in detail['action_plans']],
        'display_status': detail['display_status'].value,
        'missing_fields': detail['missing_fields'],
    })


@inspection_bp.route('/api/inspections/<inspection_id>/complete', methods=['POST'])
@login_required
def complete_inspection(inspection_id):
    payload = parse_payload(InspectionComplete, request.get_json(silent=True))
    inspection = get_inspection_service().complete_inspection(
        inspection_id,
        payload.disposition,
        sensory=_sensory(payload),
        notes=payload.notes,
        allow_override=payload.allow_override,
    )
    return jsonify(inspection_to_dict(inspection))


@inspection_bp.route('/api/inspections/<inspection_id>/tests', methods=['POST'])
@login_required
def add_tests(inspection_id):
    payload = parse_payload(AddTests, request.get_json(silent=True))
    rows = get_inspection_service().add_tests(
        inspection_id, [t.model_dump() for t in payload.tests],
    )
    return jsonify([inspection_test_to_dict(r) for r in rows]), 201


@inspection_bp.route('/api/inspections/<inspection_id>/tests/<test_id>', methods=['PUT'])
@login_required
def record_test_result(inspection_id, test_id):
    payload = parse_payload(ResultRecord, request.get_json(silent=True))
    row = get_inspection_service().record_test_result(
        inspection_id, test_id, payload.result, notes=payload.notes, passed=payload.passed,
    )
    return jsonify(inspection_test_to_dict(row))


@inspection_bp.route('/api/inspections/<inspection_id>/photos', methods=['POST'])
@login_required
def attach_photos(inspection_id):
    upload = get_inspection_service().attach_photos(inspection_id, _uploaded_photos())
    return jsonify({'photo_urls': upload.urls, 'failed': upload.failed}), 201


@inspection_bp.route('/api/products/<product_id>/tests', methods=['GET'])
@login_required
def available_tests(product_id):
    tests = get_test_binding_service().get_available_tests(product_id)
    return jsonify([
        {'id': str(t.id), 'name': t.name, 'description': t.description}
        for t in tests
    ])


@inspection_bp.route('/api/inspections/<inspection_id>/non-conformities', methods=['POST'])
@login_required
def register_non_conformity(inspection_id):
    payload = parse_payload(NonConformityRegister, request.get_json(silent=True))
    result = get_non_conformity_service().register_non_conformity(
        inspection_id,
        payload.description,
        payload.severity,
        create_action_plan=payload.create_action_plan,
        action_plan_description=payload.action_plan_description,
        action_plan_due_date=payload.action_plan_due_date,
    )
    return jsonify({
        'non_conformity': non_conformity_to_dict(result.non_conformity),
        'action_plan': action_plan_to_dict(result.action_plan) if result.action_plan else None,
    }), 201


# --- Não conformidades ---

@inspection_bp.route('/api/non-conformities', methods=['GET'])
@login_required
def list_non_conformities():
    items = get_non_conformity_service().list_non_conformities(request.args.get('inspection_id') or None)
    return jsonify([non_conformity_to_dict(nc) for nc in items])


@inspection_bp.route('/api/non-conformities', methods=['POST'])
@login_required
def create_non_conformity():
    payload = parse_payload(NonConformityCreate, request.get_json(silent=True))
    nc = get_non_conformity_service().create_non_conformity(
        payload.inspection_id, payload.description, payload.severity,
    )
    return jsonify(non_conformity_to_dict(nc)), 201


@inspection_bp.route('/api/non-conformities/with-action-plan', methods=['POST'])
@login_required
def create_non_conformity_with_action_plan():
    payload = parse_payload(NonConformityWithActionPlan, request.get_json(silent=True))
    result = get_non_conformity_service().create_non_conformity_with_action_plan(
        payload.non_conformity.model_dump(), payload.action_plan.model_dump(),
    )
    return jsonify({
        'non_conformity': non_conformity_to_dict(result.non_conformity),
        'action_plan': action_plan_to_dict(result.action_plan),
    }), 201


@inspection_bp.route('/api/non-conformities/<nc_id>', methods=['PATCH'])
@login_required
def update_non_conformity(nc_id):
    payload = parse_payload(NonConformityUpdate, request.get_json(silent=True))
    nc = get_non_conformity_service().update_non_conformity(
        nc_id, description=payload.description, severity=payload.severity,
    )
    return jsonify(non_conformity_to_dict(nc))


@inspection_bp.route('/api/non-conformities/<nc_id>', methods=['DELETE'])
@login_required
def delete_non_conformity(nc_id):
    get_non_conformity_service().delete_non_conformity(nc_id)
    return '', 204


# --- Planos de ação ---

@inspection_bp.route('/api/action-plans', methods=['GET'])
@login_required
def list_action_plans():
    plans = get_non_conformity_service().list_action_plans(request.args.get('inspection_id') or None)
    return jsonify([action_plan_to_dict(p) for p in plans])


@inspection_bp.route('/api/action-plans', methods=['POST'])
@login_required
def create_action_plan():
    payload = parse_payload(ActionPlanCreate, request.get_json(silent=True))
    plan = get_non_conformity_service().create_action_plan(
        payload.inspection_id, payload.description, due_date=payload.due_date, status=payload.status,
    )
    return jsonify(action_plan_to_dict(plan)), 201


@inspection_bp.route('/api/action-plans/<plan_id>', methods=['PATCH'])
@login_required
def update_action_plan(plan_id):
    payload = parse_payload(ActionPlanUpdate, request.get_json(silent=True))
    plan = get_non_conformity_service().update_action_plan(
        plan_id, description=payload.description, status=payload.status, due_date=payload.due_date,
    )
    return jsonify(action_plan_to_dict(plan))


@inspection_bp.route('/api/action-plans/<plan_id>', methods=['DELETE'])
@login_required
def delete_action_plan(plan_id):
    get_non_conformity_service().delete_action_plan(plan_id)
    return '', 204
