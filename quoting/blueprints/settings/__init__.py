from flask import Blueprint

settings_bp = Blueprint('settings', __name__)

from quoting.blueprints.settings import routes  # noqa: E402, F401
