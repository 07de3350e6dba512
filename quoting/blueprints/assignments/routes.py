"""Worker assignment routes."""
from flask import jsonify, request
from flask_login import login_required, current_user

from quoting.blueprints.assignments import assignments_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import manager_required
from quoting.forms import AssignmentUpdateForm
from quoting.services import AssignmentService


@assignments_bp.route('/<assignment_id>', methods=['PUT'])
@login_required
@manager_required
def edit(assignment_id):
    form = AssignmentUpdateForm()
    if not form.validate_on_submit():
        return form_error(form)
    notes = form.notes.data if 'notes' in (request.get_json(silent=True) or {}) else None
    row = AssignmentService.update_payout(
        assignment_id, form.payout.data, notes=notes, updated_by_id=current_user.id)
    return jsonify(row.to_dict())


@assignments_bp.route('/<assignment_id>', methods=['DELETE'])
@login_required
@manager_required
def delete(assignment_id):
    AssignmentService.remove(assignment_id, removed_by_id=current_user.id)
    return '', 204
