"""Append-only record of edits made to existing quotations."""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from quoting import db
from quoting.models import ModificationHistory


class HistoryService:
    @staticmethod
    def snapshot(quotation):
        """Financial content of a quotation, as it is before an edit."""
        return {
            'materials': list(quotation.materials or []),
            'services': list(quotation.services or []),
            'items': list(quotation.items or []),
            'total': str(quotation.total) if quotation.total is not None else None,
        }

    @staticmethod
    def build_changes(before, after):
        return {
            key: {'before': before[key], 'after': after[key]}
            for key in ('materials', 'services', 'items', 'total')
        }

    @staticmethod
    def record(quotation, before, description, author_id=None):
        """Write one history row for an edit that is already committed.

        Runs in its own transaction so it can never undo the edit it documents.
        A failed write is logged and reported as ``None``.
        """
        after = HistoryService.snapshot(quotation)
        entry = ModificationHistory(
            quotation_id=quotation.id,
            author_id=author_id,
            description=description,
            changes=HistoryService.build_changes(before, after),
            total_before=before['total'],
            total_after=after['total'],
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(
                'Could not record modification history for %s', quotation.quotation_number)
            return None
        return entry

    @staticmethod
    def list_for_quotation(quotation_id):
        return (
            ModificationHistory.query
            .filter(ModificationHistory.quotation_id == quotation_id)
            .order_by(ModificationHistory.created_at.desc())
            .all()
        )
