"""Report routes."""
from flask import jsonify
from flask_login import login_required

from quoting.blueprints.reports import reports_bp
from quoting.decorators import manager_required
from quoting.services import ReconciliationService


@reports_bp.route('/profitability')
@login_required
@manager_required
def profitability():
    stats = ReconciliationService.profitability_stats()
    stats['projects'] = [
        {k: str(v) if k in ('total', 'real_cost', 'profit', 'profit_percent') else v for k, v in p.items()}
        for p in stats['projects']
    ]
    for key in ('total_profit', 'average_profit', 'petty_expenses_total'):
        stats[key] = str(stats[key])
    return jsonify(stats)
