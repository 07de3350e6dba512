from flask import Blueprint

jobs_bp = Blueprint('jobs', __name__)

from quoting.blueprints.jobs import routes  # noqa: E402, F401
