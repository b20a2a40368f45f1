import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config:
    """Base configuration"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    @staticmethod
    def get_database_url():
        """Get properly formatted database URL string"""
        database_url = os.environ.get('DATABASE_URL')

        if database_url:
            # Ensure we're using postgresql:// not postgres://
            if database_url.startswith('postgres://'):
                database_url = database_url.replace('postgres://', 'postgresql://', 1)
            return database_url
        else:
            # Fallback for local development
            return 'sqlite:///' + os.path.join(basedir, 'instance', '3dq.sqlite')

    SQLALCHEMY_DATABASE_URI = None  # Will be set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }

    CORS_ORIGINS = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    CORS_SUPPORTS_CREDENTIALS = False

    # --- Business & Report Settings ---
    TIMEZONE = os.environ.get('TIMEZONE', 'Europe/London')
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'Prints Inc')

    # Seeded into the settings table when a key is missing. Values are stored as strings.
    DEFAULT_SETTINGS = {
        'electricity_cost_per_kwh': '0.2166',
        'labour_rate_per_hour': '13.00',
        'default_markup_percent': '50',
        'tax_rate': '0',
        'currency_symbol': '£',
        'quote_prefix': '3DQ',
        'company_name': COMPANY_NAME,
        'next_quote_number': '1',
        'spoolman_url': 'http://localhost:7912',
        'spoolman_sync_enabled': 'false',
    }

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Seconds to wait on the Spoolman API before giving up
    SPOOLMAN_TIMEOUT = int(os.environ.get('SPOOLMAN_TIMEOUT', 10))

    def __init__(self):
        """Initialize configuration with proper database URL"""
        self.SQLALCHEMY_DATABASE_URI = self.get_database_url()


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()

        dev_database_url = os.environ.get('DEV_DATABASE_URL')
        if dev_database_url:
            if dev_database_url.startswith('postgres://'):
                dev_database_url = dev_database_url.replace('postgres://', 'postgresql://', 1)
            self.SQLALCHEMY_DATABASE_URI = dev_database_url

        self.CORS_ORIGINS = [
            'http://localhost:3000',
            'http://127.0.0.1:3000',
            'http://localhost:3001',
        ]


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    DEVELOPMENT = False

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = os.environ.get('DATABASE_URL')
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")

        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)

        self.SQLALCHEMY_DATABASE_URI = database_url

        cors_origins = os.environ.get('CORS_ORIGINS')
        if cors_origins:
            self.CORS_ORIGINS = [origin.strip() for origin in cors_origins.split(',') if origin.strip()]

        self.SQLALCHEMY_ENGINE_OPTIONS = {
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'pool_size': 10,
            'max_overflow': 20,
            'pool_timeout': 30,
        }


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.CORS_ORIGINS = ['*']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from process variables"""

    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
]
