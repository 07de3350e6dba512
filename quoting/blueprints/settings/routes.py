"""Settings routes (pricing defaults, audit log)."""
from flask import request, jsonify, current_app
from flask_login import login_required, current_user

from quoting.blueprints.settings import settings_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import admin_required
from quoting.forms import PricingSettingsForm
from quoting.models import Setting, AuditLog
from quoting.services import QuotationService


def _pricing():
    return {
        'iva_percent': str(QuotationService.default_iva_percent()),
        'margin_percent': str(QuotationService.default_margin_percent()),
    }


@settings_bp.route('/pricing')
@login_required
def pricing():
    return jsonify(_pricing())


@settings_bp.route('/pricing', methods=['PUT'])
@login_required
@admin_required
def save_pricing():
    form = PricingSettingsForm()
    if not form.validate_on_submit():
        return form_error(form)
    for field in (form.iva_percent, form.margin_percent):
        if field.data is not None:
            Setting.set(field.name, field.data, updated_by_id=current_user.id)
    current_app.logger.info('Pricing defaults updated by %s', current_user.username)
    return jsonify(_pricing())


@settings_bp.route('/audit-log')
@login_required
@admin_required
def audit_log():
    page = request.args.get('page', 1, type=int)
    logs = AuditLog.query.order_by(AuditLog.created_at.desc()).paginate(page=page, per_page=50, error_out=False)
    return jsonify({
        'entries': [entry.to_dict() for entry in logs.items],
        'page': logs.page,
        'pages': logs.pages,
        'total': logs.total,
    })
