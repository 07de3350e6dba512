"""Quotation and numbering lock models."""
import uuid
from datetime import datetime
from decimal import Decimal

from quoting import db
from quoting.schemas import parse_items


class Quotation(db.Model):
    __tablename__ = 'quotations'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    company = db.Column(db.String(30), nullable=False, index=True)

    # Client snapshot, copied at quoting time. Not a foreign key.
    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(120), nullable=True)
    client_phone = db.Column(db.String(50), nullable=True)
    client_address = db.Column(db.String(255), nullable=True)

    items = db.Column(db.JSON, nullable=False, default=list)
    # Flat lists kept for quotations priced before items existed.
    materials = db.Column(db.JSON, nullable=False, default=list)
    services = db.Column(db.JSON, nullable=False, default=list)

    subtotal_materials = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    subtotal_services = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    subtotal = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    discount_percent = db.Column(db.Numeric(5, 2), default=0, nullable=False)
    iva_percent = db.Column(db.Numeric(5, 2), default=19, nullable=False)
    iva = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    margin_percent = db.Column(db.Numeric(5, 2), default=0, nullable=False)
    total = db.Column(db.Numeric(14, 2), default=0, nullable=False)

    status = db.Column(db.String(20), default='pending', nullable=False, index=True)
    payment_status = db.Column(db.String(20), default='unpaid', nullable=False)
    amount_paid = db.Column(db.Numeric(14, 2), default=0, nullable=False)

    seller_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True, index=True)
    seller_payout = db.Column(db.Numeric(14, 2), nullable=True)
    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    seller = db.relationship('User', foreign_keys=[seller_id])
    created_by = db.relationship('User', foreign_keys=[created_by_id])
    job = db.relationship('Job', back_populates='quotation', uselist=False)
    assignments = db.relationship('WorkerAssignment', back_populates='quotation', lazy='dynamic')
    history = db.relationship('ModificationHistory', backref='quotation', lazy='dynamic')

    STATUSES = ['pending', 'accepted', 'rejected']
    PAYMENT_STATUSES = ['unpaid', 'partially_paid', 'paid']

    def parsed_items(self):
        return parse_items(self.items)

    @property
    def unit_quantity(self):
        """Batch size the real-cost records are scaled against.

        The quantity of the first item ordered in bulk (quantity > 1), else 1.
        """
        for item in self.items or []:
            quantity = int(item.get('quantity') or 0)
            if quantity > 1:
                return quantity
        return 1

    @property
    def balance_due(self):
        return Decimal(self.total or 0) - Decimal(self.amount_paid or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'quotation_number': self.quotation_number,
            'company': self.company,
            'client': {
                'name': self.client_name,
                'email': self.client_email,
                'phone': self.client_phone,
                'address': self.client_address,
            },
            'items': self.items or [],
            'materials': self.materials or [],
            'services': self.services or [],
            'subtotal_materials': str(self.subtotal_materials),
            'subtotal_services': str(self.subtotal_services),
            'subtotal': str(self.subtotal),
            'discount_percent': str(self.discount_percent),
            'iva_percent': str(self.iva_percent),
            'iva': str(self.iva),
            'margin_percent': str(self.margin_percent),
            'total': str(self.total),
            'status': self.status,
            'payment_status': self.payment_status,
            'amount_paid': str(self.amount_paid),
            'seller_id': self.seller_id,
            'seller_payout': str(self.seller_payout) if self.seller_payout is not None else None,
            'created_by_id': self.created_by_id,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Quotation {self.quotation_number}>'


class NumberingLock(db.Model):
    """One row per company, locked while a quotation number is assigned."""
    __tablename__ = 'numbering_locks'

    company = db.Column(db.String(30), primary_key=True)
    last_issued = db.Column(db.String(30), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<NumberingLock {self.company}>'
