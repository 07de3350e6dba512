"""Job creation and updates."""
from flask import current_app

from quoting import db
from quoting.errors import ValidationError
from quoting.models import Job
from quoting.services.audit_service import AuditService
from quoting.services.store import get_or_raise


class JobService:
    @staticmethod
    def ensure_job(quotation, client):
        """The quotation's job, created if it doesn't exist yet.

        Returns ``(job, created)``. Flushes but does not commit.
        """
        job = Job.query.filter(Job.quotation_id == quotation.id).first()
        if job:
            return job, False
        job = Job(client_id=client.id, quotation_id=quotation.id, status='pending')
        db.session.add(job)
        db.session.flush()
        return job, True

    @staticmethod
    def update_job(job_id, status=None, start_date=None, estimated_end_date=None, notes=None,
                   updated_by_id=None):
        job = get_or_raise(Job, job_id, 'Job')
        if status is not None and status not in Job.STATUSES:
            raise ValidationError(f'Unknown job status "{status}"', field='status')
        start = start_date if start_date is not None else job.start_date
        end = estimated_end_date if estimated_end_date is not None else job.estimated_end_date
        if start and end and end < start:
            raise ValidationError('Estimated end date is before the start date.',
                                  field='estimated_end_date')
        if status is not None:
            job.status = status
        job.start_date = start
        job.estimated_end_date = end
        if notes is not None:
            job.notes = notes
        db.session.commit()
        current_app.logger.info('Job %s updated (status=%s)', job.id, job.status)
        AuditService.log('job.update', 'Job', job.id, job.status, updated_by_id)
        return job

    @staticmethod
    def list_jobs(status=None):
        query = Job.query
        if status:
            query = query.filter(Job.status == status)
        return query.order_by(Job.created_at.desc()).all()
