import os
import logging

from flask import Flask, request, jsonify
from sqlalchemy import text

from config import config, get_config_name
from models import db
from middleware.cors import setup_cors
from middleware.errors import register_error_handlers
from services.settings_store import seed_default_settings


def configure_logging(app, config_name):
    """Root logging for the service modules; Flask's own logger follows the same level."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if app.debug:
        level = logging.DEBUG

    if config_name == 'production':
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        )
    else:
        logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(level)


def register_blueprints(app):
    """Register every blueprint the routes package managed to import."""
    # Imported here so blueprint import logging goes through the configured handlers
    import routes

    registered_blueprints = []
    for name, blueprint in routes.list_available_blueprints().items():
        url_prefix = routes.URL_PREFIXES[name]
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        registered_blueprints.append(name)
        app.logger.info(f"✓ Registered {name} blueprint at {url_prefix}")

    status = routes.validate_blueprints()
    if not status['all_critical_present']:
        app.logger.error(f"❌ Missing critical blueprints: {status['critical_missing']}")
    return registered_blueprints


def create_app(config_name=None):
    """
    Application factory
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    config_class = config[config_name]
    app.config.from_object(config_class())

    configure_logging(app, config_name)
    app.logger.info(f"✓ Configuration loaded successfully for {config_name} environment")

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if 'sqlite' in db_uri.lower():
        app.logger.info("✓ Using SQLite database")
        # The default database file lives under backend/instance
        if db_uri.startswith('sqlite:///') and ':memory:' not in db_uri:
            os.makedirs(os.path.dirname(db_uri[len('sqlite:///'):]) or '.', exist_ok=True)
    elif 'postgresql' in db_uri.lower():
        app.logger.info("✓ Using PostgreSQL database")

    db.init_app(app)
    app.logger.info("✓ Database initialized successfully")

    setup_cors(app)
    registered_blueprints = register_blueprints(app)
    register_error_handlers(app)

    @app.route('/')
    def index():
        """Root endpoint with API information"""
        return jsonify({
            'message': '3D Print Quote API',
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'quotes': '/api/quotes',
                'quick_quote': '/api/quick-quote',
                'pricing': '/api/pricing/calculate',
                'filaments': '/api/filaments',
                'printers': '/api/printers',
                'hardware': '/api/hardware',
                'settings': '/api/settings',
                'counts': '/api/counts',
                'spoolman': '/api/spoolman'
            },
            'blueprint_status': {
                'registered': registered_blueprints,
                'total_routes': len(list(app.url_map.iter_rules()))
            },
            'documentation': {
                'health_check': f"{request.host_url}api/health",
                'simple_health': f"{request.host_url}api/health/simple"
            }
        })

    with app.app_context():
        db.session.execute(text('SELECT 1'))
        app.logger.info("✓ Database connection test successful")

        db.create_all()
        app.logger.info("✓ Database tables created/verified successfully")

        seed_default_settings(app.config['DEFAULT_SETTINGS'])

    api_routes = len([rule for rule in app.url_map.iter_rules() if rule.rule.startswith('/api/')])
    app.logger.info("✓ 3D Print Quote API created successfully")
    app.logger.info(f"✓ Environment: {config_name}")
    app.logger.info(f"✓ API routes: {api_routes}, blueprints: {len(registered_blueprints)}")

    return app


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
