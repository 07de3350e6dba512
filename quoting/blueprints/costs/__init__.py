from flask import Blueprint

costs_bp = Blueprint('costs', __name__)

from quoting.blueprints.costs import routes  # noqa: E402, F401
