"""Job and WorkerAssignment models."""
import uuid
from datetime import datetime

from quoting import db


class Job(db.Model):
    """Work order created once a quotation is accepted."""
    __tablename__ = 'jobs'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=False)
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), unique=True, nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    estimated_end_date = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = db.relationship('Client', back_populates='jobs')
    quotation = db.relationship('Quotation', back_populates='job')
    assignments = db.relationship('WorkerAssignment', back_populates='job', lazy='dynamic')

    STATUSES = ['pending', 'in_progress', 'completed', 'cancelled']

    @property
    def assigned_worker_ids(self):
        return [a.worker_id for a in self.assignments]

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'quotation_id': self.quotation_id,
            'status': self.status,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'estimated_end_date': self.estimated_end_date.isoformat() if self.estimated_end_date else None,
            'notes': self.notes,
            'assigned_worker_ids': self.assigned_worker_ids,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Job {self.id} {self.status}>'


class WorkerAssignment(db.Model):
    """A shop worker's agreed payout on a quotation."""
    __tablename__ = 'worker_assignments'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quotation_id = db.Column(db.String(36), db.ForeignKey('quotations.id'), nullable=False, index=True)
    job_id = db.Column(db.String(36), db.ForeignKey('jobs.id'), nullable=True)
    worker_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    payout = db.Column(db.Numeric(14, 2), default=0, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quotation = db.relationship('Quotation', back_populates='assignments')
    job = db.relationship('Job', back_populates='assignments')
    worker = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'quotation_id': self.quotation_id,
            'job_id': self.job_id,
            'worker_id': self.worker_id,
            'payout': str(self.payout),
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<WorkerAssignment {self.worker_id} {self.payout}>'
