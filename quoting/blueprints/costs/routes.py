"""Real cost routes."""
from flask import jsonify
from flask_login import login_required, current_user

from quoting.blueprints.costs import costs_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import costs_required
from quoting.forms import COST_FORMS, submitted_fields
from quoting.services import CostService

KIND = 'any(labor, materials, petty, transport)'


@costs_bp.route(f'/<quotation_id>/<{KIND}:kind>')
@login_required
@costs_required
def list(quotation_id, kind):
    return jsonify([r.to_dict() for r in CostService.list_costs(quotation_id, kind)])


@costs_bp.route(f'/<quotation_id>/<{KIND}:kind>', methods=['POST'])
@login_required
@costs_required
def add(quotation_id, kind):
    form = COST_FORMS[kind]()
    if not form.validate_on_submit():
        return form_error(form)
    record = CostService.record_cost(quotation_id, kind, submitted_fields(form), recorded_by_id=current_user.id)
    return jsonify(record.to_dict()), 201


@costs_bp.route(f'/<{KIND}:kind>/<record_id>', methods=['PUT'])
@login_required
@costs_required
def edit(kind, record_id):
    form = COST_FORMS[kind]()
    if not form.validate_on_submit():
        return form_error(form)
    record = CostService.update_cost(kind, record_id, submitted_fields(form), updated_by_id=current_user.id)
    return jsonify(record.to_dict())


@costs_bp.route(f'/<{KIND}:kind>/<record_id>', methods=['DELETE'])
@login_required
@costs_required
def delete(kind, record_id):
    CostService.delete_cost(kind, record_id, deleted_by_id=current_user.id)
    return '', 204
