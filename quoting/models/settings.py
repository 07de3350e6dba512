"""Workshop-wide pricing defaults editable at runtime."""
import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation

from quoting import db

PRICING = 'pricing'


class Setting(db.Model):
    """Key/value overrides for values otherwise read from config (IVA, margin)."""
    __tablename__ = 'settings'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)
    updated_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def get(key, default=None):
        s = Setting.query.filter_by(key=key).first()
        return s.value if s and s.value is not None else default

    @staticmethod
    def get_decimal(key, default):
        """Stored percentage as Decimal; unparseable values fall back to ``default``."""
        raw = Setting.get(key)
        if raw is None:
            return Decimal(str(default))
        try:
            value = Decimal(raw)
        except InvalidOperation:
            return Decimal(str(default))
        return value if value.is_finite() else Decimal(str(default))

    @staticmethod
    def set(key, value, category=PRICING, updated_by_id=None):
        s = Setting.query.filter_by(key=key).first()
        if s is None:
            s = Setting(key=key)
            db.session.add(s)
        s.value = str(value) if value is not None else None
        s.category = category
        s.updated_by_id = updated_by_id
        db.session.commit()
        return s

    def __repr__(self):
        return f'<Setting {self.key}={self.value}>'
