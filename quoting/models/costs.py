"""Real (incurred) cost records attached to a quotation."""
import uuid
from datetime import datetime, date
from decimal import Decimal

from quoting import db


class ScopedCost:
    """Columns shared by every real-cost record.

    ``scope`` tells how a record spreads over the quotation's units:
    ``per_unit`` is the cost of one unit, ``partial`` covers
    ``applied_units`` units and ``total`` covers the whole batch.
    """
    scope = db.Column(db.String(20), default='per_unit', nullable=False)
    applied_units = db.Column(db.Integer, nullable=True)

    SCOPES = ['per_unit', 'partial', 'total']

    def base_amount(self):
        raise NotImplementedError

    def is_rate_based(self):
        """True when the amount is a per-unit rate product, not a lump sum."""
        raise NotImplementedError

    def _scope_dict(self):
        return {'scope': self.scope, 'applied_units': self.applied_units}


class RealLaborRecord(ScopedCost, db.Model):
    __tablename__ = 'real_labor_records'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    worker_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    calculation_type = db.Column(db.String(10), default='hours', nullable=False)
    hours_worked = db.Column(db.Numeric(10, 2), default=0, nullable=False)
    hourly_rate = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    manual_amount = db.Column(db.Numeric(14, 2), nullable=True)
    total_paid = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    work_date = db.Column(db.Date, nullable=False, default=date.today)
    payment_method = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    worker = db.relationship('User')

    CALCULATION_TYPES = ['hours', 'amount']

    def compute_total_paid(self):
        if self.calculation_type == 'amount':
            return Decimal(self.manual_amount or 0)
        return Decimal(self.hours_worked or 0) * Decimal(self.hourly_rate or 0)

    def base_amount(self):
        return Decimal(self.total_paid or 0)

    def is_rate_based(self):
        return self.calculation_type == 'hours'

    def to_dict(self):
        data = {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'worker_id': self.worker_id,
            'calculation_type': self.calculation_type,
            'hours_worked': str(self.hours_worked),
            'hourly_rate': str(self.hourly_rate),
            'manual_amount': str(self.manual_amount) if self.manual_amount is not None else None,
            'total_paid': str(self.total_paid),
            'work_date': self.work_date.isoformat() if self.work_date else None,
            'payment_method': self.payment_method,
            'notes': self.notes,
        }
        data.update(self._scope_dict())
        return data

    def __repr__(self):
        return f'<RealLaborRecord {self.quotation_id} {self.total_paid}>'


class RealMaterialRecord(ScopedCost, db.Model):
    __tablename__ = 'real_material_records'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    item_ref = db.Column(db.String(64), nullable=True)
    material_id = db.Column(db.String(36), nullable=True)
    material_name = db.Column(db.String(200), nullable=False)
    unit = db.Column(db.String(30), nullable=True)
    budgeted_quantity = db.Column(db.Numeric(12, 3), default=0, nullable=False)
    budgeted_unit_price = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    real_quantity = db.Column(db.Numeric(12, 3), default=0, nullable=False)
    real_unit_price = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    purchase_date = db.Column(db.Date, nullable=False, default=date.today)
    supplier = db.Column(db.String(200), nullable=True)
    invoice_number = db.Column(db.String(60), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def base_amount(self):
        return Decimal(self.real_quantity or 0) * Decimal(self.real_unit_price or 0)

    def budgeted_amount(self):
        return Decimal(self.budgeted_quantity or 0) * Decimal(self.budgeted_unit_price or 0)

    def is_rate_based(self):
        return True

    def to_dict(self):
        data = {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'item_ref': self.item_ref,
            'material_id': self.material_id,
            'material_name': self.material_name,
            'unit': self.unit,
            'budgeted_quantity': str(self.budgeted_quantity),
            'budgeted_unit_price': str(self.budgeted_unit_price),
            'real_quantity': str(self.real_quantity),
            'real_unit_price': str(self.real_unit_price),
            'purchase_date': self.purchase_date.isoformat() if self.purchase_date else None,
            'supplier': self.supplier,
            'invoice_number': self.invoice_number,
            'notes': self.notes,
        }
        data.update(self._scope_dict())
        return data

    def __repr__(self):
        return f'<RealMaterialRecord {self.material_name}>'


class PettyExpense(ScopedCost, db.Model):
    """Small unbudgeted shop purchases (screws, glue, sandpaper...)."""
    __tablename__ = 'petty_expenses'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    expense_date = db.Column(db.Date, nullable=False, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def base_amount(self):
        return Decimal(self.amount or 0)

    def is_rate_based(self):
        return False

    def to_dict(self):
        data = {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'description': self.description,
            'amount': str(self.amount),
            'expense_date': self.expense_date.isoformat() if self.expense_date else None,
        }
        data.update(self._scope_dict())
        return data

    def __repr__(self):
        return f'<PettyExpense {self.description}>'


class TransportCost(ScopedCost, db.Model):
    __tablename__ = 'transport_costs'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    cost = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    transport_date = db.Column(db.Date, nullable=False, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def base_amount(self):
        return Decimal(self.cost or 0)

    def is_rate_based(self):
        return False

    def to_dict(self):
        data = {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'description': self.description,
            'cost': str(self.cost),
            'transport_date': self.transport_date.isoformat() if self.transport_date else None,
        }
        data.update(self._scope_dict())
        return data

    def __repr__(self):
        return f'<TransportCost {self.description}>'
