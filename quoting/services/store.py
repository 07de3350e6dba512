"""Helpers around the data store session."""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from quoting import db
from quoting.errors import OperationTimeoutError, NotFoundError


def get_or_raise(model_class, entity_id, label=None):
    obj = db.session.get(model_class, entity_id) if entity_id else None
    if obj is None:
        raise NotFoundError(label or model_class.__name__, entity_id)
    return obj


def apply_statement_timeout():
    """Bound every statement of the current transaction (PostgreSQL only)."""
    seconds = current_app.config.get('OPERATION_TIMEOUT_SECONDS')
    if not seconds or db.engine.dialect.name != 'postgresql':
        return
    db.session.execute(text(f"SET LOCAL statement_timeout = {int(seconds * 1000)}"))


def _is_cancelled(exc):
    orig = getattr(exc, 'orig', None)
    return getattr(orig, 'pgcode', None) == '57014' or 'statement timeout' in str(exc).lower()


@contextmanager
def bounded(operation):
    """Run a unit of work under the configured statement timeout.

    A cancelled statement surfaces as OperationTimeoutError; the caller has to
    re-read state before retrying since the write may have landed.
    """
    apply_statement_timeout()
    try:
        yield
    except OperationalError as e:
        if not _is_cancelled(e):
            raise
        db.session.rollback()
        current_app.logger.warning('%s timed out: %s', operation, e)
        raise OperationTimeoutError(
            f'{operation} timed out; re-check its state before retrying.',
            operation=operation,
        ) from e
