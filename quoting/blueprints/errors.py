"""JSON error responses."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from quoting.errors import QuotingError


def json_error(kind, message, status, **payload):
    body = {'error': kind, 'message': message}
    body.update(payload)
    return jsonify(body), status


def form_error(form):
    """Flask-WTF field errors as a validation_error response."""
    return json_error('validation_error', 'Invalid input.', 400, errors=form.errors)


def register_error_handlers(app):
    @app.errorhandler(QuotingError)
    def handle_quoting_error(e):
        if e.status_code >= 500:
            app.logger.error('%s: %s', e.kind, e.message)
        else:
            app.logger.info('%s: %s', e.kind, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        kind = (e.name or 'error').lower().replace(' ', '_')
        return json_error(kind, e.description, e.code)
