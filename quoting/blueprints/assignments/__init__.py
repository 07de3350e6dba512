from flask import Blueprint

assignments_bp = Blueprint('assignments', __name__)

from quoting.blueprints.assignments import routes  # noqa: E402, F401
