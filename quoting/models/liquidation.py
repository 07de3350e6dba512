"""Liquidation (payout to a seller or shop worker) model."""
import uuid
from datetime import datetime

from quoting import db


class Liquidation(db.Model):
    """Append-only payment record. Balances are always derived from these."""
    __tablename__ = 'liquidations'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    person_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    person_role = db.Column(db.String(20), nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    method = db.Column(db.String(20), nullable=True)
    reference_number = db.Column(db.String(60), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    authorized_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    liquidated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    person = db.relationship('User', foreign_keys=[person_id])
    authorized_by = db.relationship('User', foreign_keys=[authorized_by_id])

    METHODS = ['cash', 'transfer', 'cheque', 'other']

    def to_dict(self):
        return {
            'id': self.id,
            'person_id': self.person_id,
            'person_role': self.person_role,
            'amount': str(self.amount),
            'method': self.method,
            'reference_number': self.reference_number,
            'notes': self.notes,
            'authorized_by_id': self.authorized_by_id,
            'liquidated_at': self.liquidated_at.isoformat() if self.liquidated_at else None,
        }

    def __repr__(self):
        return f'<Liquidation {self.person_id} {self.amount}>'
