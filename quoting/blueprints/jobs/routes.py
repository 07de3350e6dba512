"""Job routes."""
from flask import jsonify, request
from flask_login import login_required, current_user

from quoting.blueprints.jobs import jobs_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import manager_required
from quoting.forms import JobForm, submitted_fields
from quoting.services import JobService


@jobs_bp.route('/')
@login_required
def list():
    jobs = JobService.list_jobs(status=request.args.get('status') or None)
    return jsonify([j.to_dict() for j in jobs])


@jobs_bp.route('/<job_id>', methods=['PUT'])
@login_required
@manager_required
def edit(job_id):
    form = JobForm()
    if not form.validate_on_submit():
        return form_error(form)
    job = JobService.update_job(job_id, updated_by_id=current_user.id, **submitted_fields(form))
    return jsonify(job.to_dict())
