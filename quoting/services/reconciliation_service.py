"""Budget vs real cost comparison and project profitability."""
from flask import current_app

from quoting.models import (
    Quotation, RealLaborRecord, RealMaterialRecord, PettyExpense, TransportCost,
)
from quoting.pricing import to_decimal, round2, ZERO, HUNDRED
from quoting.services.store import get_or_raise

CATEGORIES = (
    ('labor', RealLaborRecord),
    ('materials', RealMaterialRecord),
    ('petty', PettyExpense),
    ('transport', TransportCost),
)
BUDGETED = ('labor', 'materials')


def _percent(part, whole):
    whole = to_decimal(whole)
    if whole == 0:
        return round2(ZERO)
    return round2(to_decimal(part) / whole * HUNDRED)


class ReconciliationService:
    @staticmethod
    def scope_multiplier(record, unit_quantity):
        """How many times a record's base amount counts towards the project.

        per_unit records cost one unit, partial ones cover ``applied_units``
        units and total ones the whole batch. A partial lump sum (manual labor
        amount, petty expense, transport) already covers its units.
        """
        if record.scope == 'total':
            return 1
        if record.scope == 'partial':
            if record.is_rate_based():
                return record.applied_units or 1
            return 1
        return unit_quantity

    @staticmethod
    def budget(quotation):
        """Budgeted labor and materials cost of the whole quotation."""
        items = quotation.parsed_items()
        if not items:
            return {
                'labor': to_decimal(quotation.subtotal_services),
                'materials': to_decimal(quotation.subtotal_materials),
            }
        labor = sum((item.services_cost() for item in items), ZERO)
        materials = sum((item.materials_cost() for item in items), ZERO)
        return {'labor': labor, 'materials': materials}

    @staticmethod
    def real_records(quotation_id):
        return {
            name: model.query.filter(model.quotation_id == quotation_id).order_by(model.created_at).all()
            for name, model in CATEGORIES
        }

    @staticmethod
    def actual(quotation, records=None):
        """Real cost per category after applying each record's scope."""
        if records is None:
            records = ReconciliationService.real_records(quotation.id)
        unit_quantity = quotation.unit_quantity
        return {
            name: sum((
                record.base_amount() * ReconciliationService.scope_multiplier(record, unit_quantity)
                for record in rows
            ), ZERO)
            for name, rows in records.items()
        }

    @staticmethod
    def compare(quotation_id):
        quotation = get_or_raise(Quotation, quotation_id, 'Quotation')
        records = ReconciliationService.real_records(quotation.id)
        unit_quantity = quotation.unit_quantity
        budget = ReconciliationService.budget(quotation)
        actual = ReconciliationService.actual(quotation, records)

        variance = {}
        for name in BUDGETED:
            diff = actual[name] - budget[name]
            variance[name] = {'amount': str(round2(diff)), 'percent': str(_percent(diff, budget[name]))}
        budget_base = sum((budget[name] for name in BUDGETED), ZERO)
        base_diff = sum((actual[name] for name in BUDGETED), ZERO) - budget_base
        variance['base'] = {'amount': str(round2(base_diff)), 'percent': str(_percent(base_diff, budget_base))}

        total = to_decimal(quotation.total)
        budget_total = sum(budget.values(), ZERO)
        actual_total = sum(actual.values(), ZERO)
        budgeted_profit = total - budget_total - to_decimal(quotation.iva)
        real_profit = total - actual_total

        detail = {
            name: [
                dict(record.to_dict(),
                     multiplier=ReconciliationService.scope_multiplier(record, unit_quantity),
                     adjusted_amount=str(round2(
                         record.base_amount() * ReconciliationService.scope_multiplier(record, unit_quantity))))
                for record in rows
            ]
            for name, rows in records.items()
        }

        current_app.logger.debug('Reconciled %s: budget %s, actual %s',
                                 quotation.quotation_number, budget_total, actual_total)
        return {
            'quotation_id': quotation.id,
            'quotation_number': quotation.quotation_number,
            'unit_quantity': unit_quantity,
            'total': str(round2(total)),
            'budget': {
                'labor': str(round2(budget['labor'])),
                'materials': str(round2(budget['materials'])),
                'total': str(round2(budget_total)),
            },
            'actual': {
                'labor': str(round2(actual['labor'])),
                'materials': str(round2(actual['materials'])),
                'petty': str(round2(actual['petty'])),
                'transport': str(round2(actual['transport'])),
                'total': str(round2(actual_total)),
            },
            'variance': variance,
            'unbudgeted': {
                'petty': str(round2(actual['petty'])),
                'transport': str(round2(actual['transport'])),
            },
            'budgeted_profit': str(round2(budgeted_profit)),
            'real_profit': str(round2(real_profit)),
            'profit_difference': str(round2(real_profit - budgeted_profit)),
            'real_profit_percent': str(_percent(real_profit, total)),
            'records': detail,
        }

    @staticmethod
    def profitability_stats():
        """Real profit of every accepted quotation, best first."""
        projects = []
        petty_total = ZERO
        for quotation in Quotation.query.filter(Quotation.status == 'accepted').all():
            actual = ReconciliationService.actual(quotation)
            real = sum(actual.values(), ZERO)
            total = to_decimal(quotation.total)
            profit = total - real
            petty_total += actual['petty']
            projects.append({
                'quotation_id': quotation.id,
                'quotation_number': quotation.quotation_number,
                'client_name': quotation.client_name,
                'total': round2(total),
                'real_cost': round2(real),
                'profit': round2(profit),
                'profit_percent': _percent(profit, total),
            })

        projects.sort(key=lambda p: p['profit'], reverse=True)
        total_profit = sum((p['profit'] for p in projects), ZERO)
        return {
            'projects_count': len(projects),
            'projects_with_costs': len([p for p in projects if p['real_cost'] > 0]),
            'total_profit': round2(total_profit),
            'average_profit': round2(total_profit / len(projects)) if projects else ZERO,
            'profitable': len([p for p in projects if p['profit'] > 0]),
            'loss_making': len([p for p in projects if p['profit'] < 0]),
            'petty_expenses_total': round2(petty_total),
            'projects': projects,
        }
