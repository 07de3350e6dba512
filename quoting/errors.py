"""Domain errors raised by the services layer.

Every error carries a stable ``kind`` so API clients can tell failures apart,
plus the HTTP status the JSON layer answers with.
"""


class QuotingError(Exception):
    kind = 'error'
    status_code = 500

    def __init__(self, message, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        data = {'error': self.kind, 'message': self.message}
        data.update(self.payload)
        return data


class ValidationError(QuotingError):
    """Malformed or out-of-range input."""
    kind = 'validation_error'
    status_code = 400


class InvalidTransitionError(ValidationError):
    """Quotation status change not allowed from the current status."""
    kind = 'invalid_transition'


class NotFoundError(QuotingError):
    kind = 'not_found'
    status_code = 404

    def __init__(self, entity, entity_id):
        super().__init__(f'{entity} {entity_id} not found', entity=entity, entity_id=entity_id)


class NumberingConflictError(QuotingError):
    """Two creations raced to the same quotation number."""
    kind = 'numbering_conflict'
    status_code = 409


class PartialAcceptanceFailure(QuotingError):
    """An acceptance side effect failed after earlier steps had run.

    ``step`` names the failing step; ``created`` lists the rows written (and
    rolled back) before it, as ``{'entity': ..., 'id': ...}`` dicts.
    """
    kind = 'partial_acceptance_failure'
    status_code = 500

    def __init__(self, step, created, cause=None):
        message = f'Acceptance failed at step "{step}"'
        if cause is not None:
            message = f'{message}: {cause}'
        super().__init__(message, step=step, created=list(created))
        self.step = step
        self.created = list(created)


class ConfigurationError(QuotingError):
    kind = 'configuration_error'
    status_code = 500


class OperationTimeoutError(QuotingError):
    """The store cancelled a statement. The write may still have completed."""
    kind = 'operation_timeout'
    status_code = 504
