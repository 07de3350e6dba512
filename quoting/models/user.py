"""User model."""
import uuid
from datetime import datetime
from flask_login import UserMixin

from quoting import db


class User(UserMixin, db.Model):
    """Staff member. Sellers and shop workers are the people liquidations pay."""
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=True, index=True)
    full_name = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(20), nullable=False, default='seller')
    specialty = db.Column(db.String(80), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    ROLES = ['admin', 'manager', 'seller', 'worker']
    # Roles that accumulate payouts and can be liquidated.
    PAYEE_ROLES = ['seller', 'worker']

    def can_manage_quotations(self):
        return self.role in ('admin', 'manager', 'seller')

    def can_manage_costs(self):
        return self.role in ('admin', 'manager')

    def can_manage_liquidations(self):
        return self.role in ('admin', 'manager')

    @property
    def display_name(self):
        return self.full_name or self.username

    def __repr__(self):
        return f'<User {self.username}>'
