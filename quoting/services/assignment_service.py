"""Worker assignments (agreed payouts) on quotations."""
from flask import current_app

from quoting import db
from quoting.errors import ValidationError, NotFoundError
from quoting.models import User, Quotation, Job, WorkerAssignment
from quoting.pricing import to_decimal
from quoting.services.audit_service import AuditService
from quoting.services.store import get_or_raise


class AssignmentService:
    @staticmethod
    def _validated_payout(payout):
        try:
            value = to_decimal(payout)
        except ArithmeticError:
            raise ValidationError(f'Invalid payout "{payout}"', field='payout')
        if value < 0:
            raise ValidationError('Payout cannot be negative.', field='payout')
        return value

    @staticmethod
    def _worker(worker_id):
        worker = db.session.get(User, worker_id) if worker_id else None
        if worker is None:
            raise NotFoundError('Worker', worker_id)
        if worker.role != 'worker':
            raise ValidationError(f'User {worker_id} is not a shop worker.', field='worker_id')
        return worker

    @staticmethod
    def validate_entries(entries):
        """Normalize ``[{worker_id, payout, notes}]`` before any row is written."""
        normalized = []
        for entry in entries or []:
            worker = AssignmentService._worker(entry.get('worker_id'))
            normalized.append({
                'worker_id': worker.id,
                'payout': AssignmentService._validated_payout(entry.get('payout', 0)),
                'notes': entry.get('notes') or None,
            })
        return normalized

    @staticmethod
    def add_rows(quotation, job, entries):
        """Insert already-validated entries. Flushes, does not commit."""
        rows = []
        for entry in entries:
            row = WorkerAssignment(
                quotation_id=quotation.id,
                job_id=job.id if job else None,
                worker_id=entry['worker_id'],
                payout=entry['payout'],
                notes=entry['notes'],
            )
            db.session.add(row)
            rows.append(row)
        db.session.flush()
        return rows

    @staticmethod
    def upsert_rows(quotation, job, entries):
        """Apply entries on acceptance without duplicating a worker's payout.

        A worker already assigned to the quotation (for example before a
        revert) has that row updated and linked to ``job``. Returns
        ``[(row, created)]``. Flushes, does not commit.
        """
        existing = {
            row.worker_id: row
            for row in WorkerAssignment.query.filter(WorkerAssignment.quotation_id == quotation.id)
        }
        result = []
        for entry in entries:
            row = existing.get(entry['worker_id'])
            if row is None:
                row = AssignmentService.add_rows(quotation, job, [entry])[0]
                existing[row.worker_id] = row
                result.append((row, True))
                continue
            row.payout = entry['payout']
            if entry['notes']:
                row.notes = entry['notes']
            row.job_id = job.id if job else row.job_id
            result.append((row, False))
        db.session.flush()
        return result

    @staticmethod
    def assign(quotation_id, worker_id, payout, notes=None, assigned_by_id=None):
        quotation = get_or_raise(Quotation, quotation_id, 'Quotation')
        entries = AssignmentService.validate_entries(
            [{'worker_id': worker_id, 'payout': payout, 'notes': notes}])
        job = Job.query.filter(Job.quotation_id == quotation.id).first()
        row = AssignmentService.add_rows(quotation, job, entries)[0]
        db.session.commit()
        current_app.logger.info('Worker %s assigned to %s (payout %s)',
                                worker_id, quotation.quotation_number, row.payout)
        AuditService.log('assignment.create', 'WorkerAssignment', row.id,
                         f'{quotation.quotation_number} {row.payout}', assigned_by_id)
        return row

    @staticmethod
    def update_payout(assignment_id, payout, notes=None, updated_by_id=None):
        row = get_or_raise(WorkerAssignment, assignment_id, 'WorkerAssignment')
        if payout is not None:
            row.payout = AssignmentService._validated_payout(payout)
        if notes is not None:
            row.notes = notes or None
        db.session.commit()
        AuditService.log('assignment.update', 'WorkerAssignment', row.id, str(row.payout), updated_by_id)
        return row

    @staticmethod
    def remove(assignment_id, removed_by_id=None):
        row = get_or_raise(WorkerAssignment, assignment_id, 'WorkerAssignment')
        db.session.delete(row)
        db.session.commit()
        current_app.logger.info('Worker assignment %s removed', assignment_id)
        AuditService.log('assignment.delete', 'WorkerAssignment', assignment_id, None, removed_by_id)

    @staticmethod
    def list_for_quotation(quotation_id):
        get_or_raise(Quotation, quotation_id, 'Quotation')
        return (
            WorkerAssignment.query
            .filter(WorkerAssignment.quotation_id == quotation_id)
            .order_by(WorkerAssignment.created_at)
            .all()
        )
