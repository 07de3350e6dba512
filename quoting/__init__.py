"""Flask application factory."""
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    from quoting.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        from quoting.blueprints.errors import json_error
        return json_error('unauthorized', 'Login required.', 401)

    # Register blueprints
    from quoting.blueprints.quotations import quotations_bp
    from quoting.blueprints.assignments import assignments_bp
    from quoting.blueprints.costs import costs_bp
    from quoting.blueprints.jobs import jobs_bp
    from quoting.blueprints.clients import clients_bp
    from quoting.blueprints.liquidations import liquidations_bp
    from quoting.blueprints.reports import reports_bp
    from quoting.blueprints.settings import settings_bp

    app.register_blueprint(quotations_bp, url_prefix='/quotations')
    app.register_blueprint(assignments_bp, url_prefix='/assignments')
    app.register_blueprint(costs_bp, url_prefix='/costs')
    app.register_blueprint(jobs_bp, url_prefix='/jobs')
    app.register_blueprint(clients_bp, url_prefix='/clients')
    app.register_blueprint(liquidations_bp, url_prefix='/liquidations')
    app.register_blueprint(reports_bp, url_prefix='/reports')
    app.register_blueprint(settings_bp, url_prefix='/settings')

    # Error handlers
    from quoting.blueprints.errors import register_error_handlers
    register_error_handlers(app)

    # Ignore "already exists" so multiple workers or an existing DB don't crash the app.
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            if "already exists" in str(e).lower() or "duplicate key" in str(e).lower():
                app.logger.debug('Tables already present: %s', e)
            else:
                raise

    return app
