# backend/routes/health.py
from datetime import datetime

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import db, Setting
from services.numbering import COUNTER_KEY

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint
    Tests database connectivity, seeded settings and registered blueprints
    """
    health_status = {
        'status': 'healthy',
        'app': current_app.config.get('APP_NAME', '3D Print Quote API'),
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': {}
    }
    status_code = 200

    # Database connection
    try:
        db.session.execute(text('SELECT 1'))
        db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')
        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': 'SQLite' if 'sqlite' in db_url.lower() else 'PostgreSQL' if 'postgres' in db_url.lower() else 'Unknown',
            'connected': True
        }
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        health_status['status'] = 'unhealthy'
        status_code = 503

    # Seeded settings
    if status_code == 200:
        counter = db.session.get(Setting, COUNTER_KEY)
        health_status['checks']['settings'] = {
            'status': 'healthy' if counter is not None else 'warning',
            'next_quote_number': counter.value if counter is not None else None
        }
        if counter is None:
            current_app.logger.warning("Quote counter setting is missing")
            health_status['status'] = 'degraded'

    registered = [bp.name for bp in current_app.blueprints.values()]
    health_status['checks']['application'] = {
        'status': 'healthy',
        'blueprints': registered,
        'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                           if rule.rule.startswith('/api/')])
    }

    current_app.logger.info(f"Health check completed: {health_status['status']}")
    return jsonify(health_status), status_code


@health_bp.route('/health/simple', methods=['GET'])
def simple_health_check():
    """
    Simple health check for basic monitoring
    Returns minimal response for load balancers and simple monitoring
    """
    try:
        db.session.execute(text('SELECT 1'))
        return jsonify({
            'status': 'healthy',
            'message': 'Service is running'
        }), 200
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Simple health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'message': 'Database connection failed'
        }), 503
