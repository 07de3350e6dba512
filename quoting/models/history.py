"""Quotation modification history model."""
import uuid
from datetime import datetime

from quoting import db


class ModificationHistory(db.Model):
    __tablename__ = 'modification_history'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    author_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    description = db.Column(db.Text, nullable=False)
    changes = db.Column(db.JSON, nullable=False, default=dict)
    total_before = db.Column(db.Numeric(14, 2), nullable=True)
    total_after = db.Column(db.Numeric(14, 2), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    author = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'author_id': self.author_id,
            'description': self.description,
            'changes': self.changes,
            'total_before': str(self.total_before) if self.total_before is not None else None,
            'total_after': str(self.total_after) if self.total_after is not None else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<ModificationHistory {self.quotation_id} at {self.created_at}>'
