"""Quotation routes."""
from flask import request, jsonify, current_app
from flask_login import login_required, current_user

from quoting.blueprints.quotations import quotations_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import manager_required, quotations_required
from quoting.draft import QuotationDraft
from quoting.forms import QuotationForm, QuotationEditForm, StatusForm, PaymentForm, AssignmentForm
from quoting.services import (
    QuotationService, HistoryService, ReconciliationService, AssignmentService, AuditService,
)


def _payload():
    return request.get_json(silent=True) or {}


def _totals_json(totals):
    return {
        'subtotal_materials': str(totals.subtotal_materials),
        'subtotal_services': str(totals.subtotal_services),
        'subtotal': str(totals.subtotal),
        'discount': str(totals.discount),
        'iva': str(totals.iva),
        'total': str(totals.total),
        'source': totals.source,
    }


@quotations_bp.route('/')
@login_required
def list():
    page = request.args.get('page', 1, type=int)
    query = QuotationService.list_quotations(
        status=request.args.get('status') or None,
        company=request.args.get('company') or None,
        seller_id=request.args.get('seller_id') or None,
        created_by_id=request.args.get('created_by_id') or None,
    )
    quotations = query.paginate(page=page, per_page=current_app.config['ITEMS_PER_PAGE'], error_out=False)
    return jsonify({
        'quotations': [q.to_dict() for q in quotations.items],
        'page': quotations.page,
        'pages': quotations.pages,
        'total': quotations.total,
    })


@quotations_bp.route('/', methods=['POST'])
@login_required
@quotations_required
def add():
    form = QuotationForm()
    if not form.validate_on_submit():
        return form_error(form)
    payload = _payload()
    seller_id = form.seller_id.data or None
    if seller_id is None and current_user.role == 'seller':
        seller_id = current_user.id
    quo = QuotationService.create_quotation(
        company=form.company.data,
        client_name=form.client_name.data,
        client_email=form.client_email.data,
        client_phone=form.client_phone.data,
        client_address=form.client_address.data,
        items_data=payload.get('items') or [],
        materials_data=payload.get('materials') or [],
        services_data=payload.get('services') or [],
        margin_percent=form.margin_percent.data,
        iva_percent=form.iva_percent.data,
        discount_percent=form.discount_percent.data or 0,
        seller_id=seller_id,
        notes=form.notes.data,
        created_by_id=current_user.id,
    )
    return jsonify(quo.to_dict()), 201


@quotations_bp.route('/draft/totals', methods=['POST'])
@login_required
def draft_totals():
    draft = QuotationDraft.from_payload(_payload())
    totals = draft.totals(QuotationService.default_iva_percent())
    return jsonify({'totals': _totals_json(totals), 'items': len(draft.items)})


@quotations_bp.route('/draft', methods=['POST'])
@login_required
@quotations_required
def add_from_draft():
    payload = _payload()
    draft = QuotationDraft.from_payload(payload.get('draft'))
    seller_id = payload.get('seller_id') or None
    if seller_id is None and current_user.role == 'seller':
        seller_id = current_user.id
    quo = QuotationService.create_from_draft(draft, seller_id=seller_id, created_by_id=current_user.id)
    return jsonify(quo.to_dict()), 201


@quotations_bp.route('/<quotation_id>')
@login_required
def detail(quotation_id):
    quo = QuotationService.get_quotation(quotation_id)
    data = quo.to_dict()
    data['job_id'] = quo.job.id if quo.job else None
    data['balance_due'] = str(quo.balance_due)
    return jsonify(data)


@quotations_bp.route('/<quotation_id>', methods=['PUT'])
@login_required
@quotations_required
def edit(quotation_id):
    form = QuotationEditForm()
    if not form.validate_on_submit():
        return form_error(form)
    payload = _payload()
    fields = {
        name: form[name].data
        for name in ('client_name', 'client_email', 'client_phone', 'client_address', 'notes',
                     'margin_percent', 'iva_percent', 'discount_percent')
        if name in payload
    }
    quo = QuotationService.update_quotation(
        quotation_id,
        description=form.description.data,
        author_id=current_user.id,
        items_data=payload.get('items'),
        materials_data=payload.get('materials'),
        services_data=payload.get('services'),
        **fields,
    )
    return jsonify(quo.to_dict())


@quotations_bp.route('/<quotation_id>/status', methods=['POST'])
@login_required
@manager_required
def change_status(quotation_id):
    form = StatusForm()
    if not form.validate_on_submit():
        return form_error(form)
    quo = QuotationService.change_status(
        quotation_id,
        form.status.data,
        seller_id=form.seller_id.data or None,
        seller_payout=form.seller_payout.data,
        worker_assignments=_payload().get('worker_assignments') or [],
        changed_by_id=current_user.id,
    )
    body = {'quotation': quo.to_dict()}
    if quo.status == 'accepted':
        body['job_id'] = quo.job.id
        body['client_id'] = quo.job.client_id
    elif quo.status == 'pending':
        body['side_effects_kept'] = quo.job is not None
    return jsonify(body)


@quotations_bp.route('/<quotation_id>/payment', methods=['POST'])
@login_required
@manager_required
def payment(quotation_id):
    form = PaymentForm()
    if not form.validate_on_submit():
        return form_error(form)
    quo = QuotationService.update_payment(
        quotation_id,
        form.amount_paid.data,
        payment_status=form.payment_status.data or None,
        updated_by_id=current_user.id,
    )
    return jsonify(quo.to_dict())


@quotations_bp.route('/<quotation_id>/history')
@login_required
def history(quotation_id):
    QuotationService.get_quotation(quotation_id)
    return jsonify([h.to_dict() for h in HistoryService.list_for_quotation(quotation_id)])


@quotations_bp.route('/<quotation_id>/activity')
@login_required
def activity(quotation_id):
    QuotationService.get_quotation(quotation_id)
    return jsonify([entry.to_dict() for entry in AuditService.trail('Quotation', quotation_id)])


@quotations_bp.route('/<quotation_id>/reconciliation')
@login_required
@manager_required
def reconciliation(quotation_id):
    return jsonify(ReconciliationService.compare(quotation_id))


@quotations_bp.route('/<quotation_id>/assignments')
@login_required
def assignments(quotation_id):
    return jsonify([a.to_dict() for a in AssignmentService.list_for_quotation(quotation_id)])


@quotations_bp.route('/<quotation_id>/assignments', methods=['POST'])
@login_required
@manager_required
def add_assignment(quotation_id):
    form = AssignmentForm()
    if not form.validate_on_submit():
        return form_error(form)
    row = AssignmentService.assign(
        quotation_id,
        form.worker_id.data,
        form.payout.data,
        notes=form.notes.data,
        assigned_by_id=current_user.id,
    )
    return jsonify(row.to_dict()), 201
