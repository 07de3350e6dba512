"""Liquidation routes."""
from flask import jsonify, abort
from flask_login import login_required, current_user

from quoting.blueprints.liquidations import liquidations_bp
from quoting.blueprints.errors import form_error
from quoting.decorators import liquidations_required
from quoting.forms import LiquidationForm
from quoting.services import LiquidationService


def _money_dict(data):
    return {k: str(v) if k in ('earned', 'liquidated', 'balance_pending', 'amount') else v
            for k, v in data.items()}


@liquidations_bp.route('/balances')
@login_required
@liquidations_required
def balances():
    return jsonify([_money_dict(b) for b in LiquidationService.all_balances()])


@liquidations_bp.route('/summary')
@login_required
@liquidations_required
def summary():
    return jsonify({k: str(v) if not isinstance(v, int) else v
                    for k, v in LiquidationService.summary().items()})


@liquidations_bp.route('/people/<person_id>')
@login_required
def person(person_id):
    # People can always look at their own balance.
    if person_id != current_user.id and not current_user.can_manage_liquidations():
        abort(403)
    detail = LiquidationService.person_detail(person_id)
    earnings = []
    for line in detail['earnings']:
        line = _money_dict(line)
        line['date'] = line['date'].isoformat() if line['date'] else None
        earnings.append(line)
    return jsonify({
        'balance': _money_dict(detail['balance']),
        'earnings': earnings,
        'liquidations': [liq.to_dict() for liq in detail['liquidations']],
    })


@liquidations_bp.route('/', methods=['POST'])
@login_required
@liquidations_required
def add():
    form = LiquidationForm()
    if not form.validate_on_submit():
        return form_error(form)
    liquidation = LiquidationService.create_liquidation(
        form.person_id.data,
        form.amount.data,
        method=form.method.data or None,
        reference_number=form.reference_number.data,
        notes=form.notes.data,
        authorized_by_id=current_user.id,
    )
    return jsonify(liquidation.to_dict()), 201
