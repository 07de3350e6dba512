"""Application configuration."""
import os
from datetime import timedelta


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}

    # Session
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Application
    ITEMS_PER_PAGE = 20

    # Pricing defaults (percentages). Setting rows override these at runtime.
    DEFAULT_IVA_PERCENT = 19
    DEFAULT_MARGIN_PERCENT = 30

    # Operating companies: quotation number prefix and first number issued.
    COMPANIES = {
        'casablanca': {
            'name': 'Mueblería Casablanca',
            'legal_name': 'FIX PRO SPA',
            'prefix': 'CASA',
            'start_number': 400,
        },
        'kubica': {
            'name': 'KUBICA',
            'legal_name': 'KUBICA Mobiliario',
            'prefix': 'KUB',
            'start_number': 1000,
        },
    }

    # Extra attempts after a quotation number collides on insert.
    NUMBERING_RETRIES = 1

    # Upper bound for quotation creation/acceptance statements (seconds).
    OPERATION_TIMEOUT_SECONDS = int(os.environ.get('OPERATION_TIMEOUT_SECONDS', 10))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL'
    ) or 'sqlite:///quoting-dev.db'
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    SERVER_NAME = 'localhost'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    SESSION_COOKIE_SECURE = True


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}
