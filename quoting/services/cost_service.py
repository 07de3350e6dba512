"""Recording of real (incurred) costs against a quotation."""
from datetime import date

from flask import current_app

from quoting import db
from quoting.errors import ValidationError, NotFoundError
from quoting.models import (
    Quotation, User, RealLaborRecord, RealMaterialRecord, PettyExpense, TransportCost,
)
from quoting.models.costs import ScopedCost
from quoting.pricing import to_decimal, round2
from quoting.services.audit_service import AuditService
from quoting.services.store import get_or_raise

KINDS = {
    'labor': RealLaborRecord,
    'materials': RealMaterialRecord,
    'petty': PettyExpense,
    'transport': TransportCost,
}


def _value(data, record, field):
    if field in data:
        return data[field]
    return getattr(record, field)


def _amount(value, field):
    try:
        value = to_decimal(value)
    except ArithmeticError:
        raise ValidationError(f'Invalid {field} "{value}"', field=field)
    if value < 0:
        raise ValidationError(f'{field} cannot be negative.', field=field)
    return value


def _date(value, field):
    if value is None or value == '':
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f'Invalid date "{value}"', field=field)


def _required_text(value, field):
    if not value or not str(value).strip():
        raise ValidationError(f'{field} is required.', field=field)
    return str(value).strip()


class CostService:
    @staticmethod
    def model_for(kind):
        try:
            return KINDS[kind]
        except KeyError:
            raise ValidationError(f'Unknown cost kind "{kind}"', field='kind')

    @staticmethod
    def validate_scope(quotation, scope, applied_units):
        """Normalize scope/applied_units for a record on ``quotation``."""
        scope = scope or 'per_unit'
        if scope not in ScopedCost.SCOPES:
            raise ValidationError(f'Unknown scope "{scope}"', field='scope')
        if scope != 'partial':
            return scope, None
        if applied_units in (None, ''):
            raise ValidationError('Partial records need applied_units.', field='applied_units')
        try:
            units = int(applied_units)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid applied_units "{applied_units}"', field='applied_units')
        if units < 1:
            raise ValidationError('applied_units must be at least 1.', field='applied_units')
        if units > quotation.unit_quantity:
            raise ValidationError(
                f'applied_units ({units}) exceeds the quotation quantity ({quotation.unit_quantity}).',
                field='applied_units')
        return scope, units

    @staticmethod
    def _apply_labor(record, data):
        worker_id = _value(data, record, 'worker_id') or None
        if worker_id:
            worker = db.session.get(User, worker_id)
            if worker is None:
                raise NotFoundError('Worker', worker_id)
        calculation_type = _value(data, record, 'calculation_type') or 'hours'
        if calculation_type not in RealLaborRecord.CALCULATION_TYPES:
            raise ValidationError(f'Unknown calculation type "{calculation_type}"',
                                  field='calculation_type')
        hours = _amount(_value(data, record, 'hours_worked'), 'hours_worked')
        rate = _amount(_value(data, record, 'hourly_rate'), 'hourly_rate')
        manual = _value(data, record, 'manual_amount')
        if calculation_type == 'amount':
            if manual in (None, ''):
                raise ValidationError('A manual amount is required.', field='manual_amount')
            manual = _amount(manual, 'manual_amount')
        else:
            manual = None
        work_date = _date(_value(data, record, 'work_date'), 'work_date')

        record.worker_id = worker_id
        record.calculation_type = calculation_type
        record.hours_worked = hours
        record.hourly_rate = rate
        record.manual_amount = manual
        record.work_date = work_date
        record.payment_method = _value(data, record, 'payment_method') or None
        record.notes = _value(data, record, 'notes') or None
        record.total_paid = round2(record.compute_total_paid())

    @staticmethod
    def _apply_materials(record, data):
        name = _required_text(_value(data, record, 'material_name'), 'material_name')
        values = {
            field: _amount(_value(data, record, field), field)
            for field in ('budgeted_quantity', 'budgeted_unit_price', 'real_quantity', 'real_unit_price')
        }
        purchase_date = _date(_value(data, record, 'purchase_date'), 'purchase_date')

        record.material_name = name
        for field, value in values.items():
            setattr(record, field, value)
        record.purchase_date = purchase_date
        for field in ('item_ref', 'material_id', 'unit', 'supplier', 'invoice_number', 'notes'):
            setattr(record, field, _value(data, record, field) or None)

    @staticmethod
    def _apply_petty(record, data):
        description = _required_text(_value(data, record, 'description'), 'description')
        amount = _amount(_value(data, record, 'amount'), 'amount')
        record.expense_date = _date(_value(data, record, 'expense_date'), 'expense_date')
        record.description = description
        record.amount = amount

    @staticmethod
    def _apply_transport(record, data):
        description = _required_text(_value(data, record, 'description'), 'description')
        cost = _amount(_value(data, record, 'cost'), 'cost')
        record.transport_date = _date(_value(data, record, 'transport_date'), 'transport_date')
        record.description = description
        record.cost = cost

    @staticmethod
    def _apply(kind, quotation, record, data):
        scope, units = CostService.validate_scope(
            quotation, _value(data, record, 'scope'), _value(data, record, 'applied_units'))
        getattr(CostService, f'_apply_{kind}')(record, data)
        record.scope = scope
        record.applied_units = units

    @staticmethod
    def record_cost(quotation_id, kind, data, recorded_by_id=None):
        model = CostService.model_for(kind)
        quotation = get_or_raise(Quotation, quotation_id, 'Quotation')
        record = model(quotation_id=quotation.id)
        CostService._apply(kind, quotation, record, data)
        db.session.add(record)
        db.session.commit()
        current_app.logger.info('Recorded %s cost %s on %s (scope %s)',
                                kind, record.base_amount(), quotation.quotation_number, record.scope)
        AuditService.log(f'cost.{kind}.create', model.__name__, record.id,
                         quotation.quotation_number, recorded_by_id)
        return record

    @staticmethod
    def update_cost(kind, record_id, data, updated_by_id=None):
        model = CostService.model_for(kind)
        record = get_or_raise(model, record_id, model.__name__)
        quotation = get_or_raise(Quotation, record.quotation_id, 'Quotation')
        try:
            CostService._apply(kind, quotation, record, data)
        except ValidationError:
            db.session.rollback()
            raise
        db.session.commit()
        AuditService.log(f'cost.{kind}.update', model.__name__, record.id, None, updated_by_id)
        return record

    @staticmethod
    def delete_cost(kind, record_id, deleted_by_id=None):
        model = CostService.model_for(kind)
        record = get_or_raise(model, record_id, model.__name__)
        db.session.delete(record)
        db.session.commit()
        current_app.logger.info('Deleted %s cost %s', kind, record_id)
        AuditService.log(f'cost.{kind}.delete', model.__name__, record_id, None, deleted_by_id)

    @staticmethod
    def list_costs(quotation_id, kind):
        model = CostService.model_for(kind)
        get_or_raise(Quotation, quotation_id, 'Quotation')
        return (
            model.query
            .filter(model.quotation_id == quotation_id)
            .order_by(model.created_at)
            .all()
        )
