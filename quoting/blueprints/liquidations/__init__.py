from flask import Blueprint

liquidations_bp = Blueprint('liquidations', __name__)

from quoting.blueprints.liquidations import routes  # noqa: E402, F401
