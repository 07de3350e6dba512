"""Audit trail writer."""
from flask import request, has_request_context, current_app

from quoting import db
from quoting.models import AuditLog


class AuditService:
    @staticmethod
    def log(action, entity_type=None, entity_id=None, details=None, user_id=None):
        """Record an operation that already committed. Commits on its own."""
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=(details or '')[:1000] or None,
            ip_address=request.remote_addr if has_request_context() else None,
        )
        db.session.add(entry)
        db.session.commit()
        current_app.logger.debug('audit %s %s:%s by %s', action, entity_type, entity_id, user_id)
        return entry

    @staticmethod
    def trail(entity_type, entity_id):
        return (
            AuditLog.query
            .filter(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
            .order_by(AuditLog.created_at)
            .all()
        )
