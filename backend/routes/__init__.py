"""
Routes package for the 3D print quote API
This package contains all the Flask blueprints for the API endpoints.
"""

import logging

logger = logging.getLogger(__name__)

# Blueprint import registry - tracks successful and failed imports
blueprint_registry = {
    'successful': [],
    'failed': [],
    'blueprints': {}
}


def safe_import_blueprint(module_name, blueprint_name, description):
    """
    Import a blueprint, logging and recording the failure instead of raising

    Args:
        module_name (str): The module to import from (e.g., 'quotes')
        blueprint_name (str): The blueprint variable name (e.g., 'quotes_bp')
        description (str): Human-readable description for logging

    Returns:
        Blueprint or None: The imported blueprint or None if import failed
    """
    try:
        module = __import__(f'routes.{module_name}', fromlist=[blueprint_name])
        blueprint = getattr(module, blueprint_name)

        if hasattr(blueprint, 'name') and hasattr(blueprint, 'url_prefix'):
            blueprint_registry['successful'].append(description)
            blueprint_registry['blueprints'][blueprint_name] = blueprint
            logger.info(f"✓ {description} blueprint imported successfully")
            return blueprint
        raise AttributeError(f"{blueprint_name} is not a valid Flask Blueprint")

    except ImportError as e:
        logger.error(f"❌ Import error for {description}: {str(e)}")
        blueprint_registry['failed'].append({
            'name': description,
            'error': 'ImportError',
            'details': str(e)
        })
        return None

    except AttributeError as e:
        logger.error(f"❌ Blueprint {blueprint_name} not found in {module_name}: {str(e)}")
        blueprint_registry['failed'].append({
            'name': description,
            'error': 'AttributeError',
            'details': str(e)
        })
        return None


logger.info("Starting blueprint imports for 3D print quote API...")

# Quotes
quotes_bp = safe_import_blueprint('quotes', 'quotes_bp', 'Quotes')
quick_quote_bp = safe_import_blueprint('quick_quote', 'quick_quote_bp', 'Quick Quote')
pricing_bp = safe_import_blueprint('pricing', 'pricing_bp', 'Pricing')

# Reference data
filaments_bp = safe_import_blueprint('filaments', 'filaments_bp', 'Filaments')
printers_bp = safe_import_blueprint('printers', 'printers_bp', 'Printers')
hardware_bp = safe_import_blueprint('hardware', 'hardware_bp', 'Hardware')

# Supporting blueprints
settings_bp = safe_import_blueprint('settings', 'settings_bp', 'Settings')
counts_bp = safe_import_blueprint('counts', 'counts_bp', 'Counts')
spoolman_bp = safe_import_blueprint('spoolman', 'spoolman_bp', 'Spoolman')
health_bp = safe_import_blueprint('health', 'health_bp', 'Health Check')

successful_count = len(blueprint_registry['successful'])
failed_count = len(blueprint_registry['failed'])

logger.info(f"Blueprint import summary: {successful_count}/{successful_count + failed_count} successful")

if failed_count > 0:
    logger.warning(f"❌ Failed imports: {failed_count}")
    for failure in blueprint_registry['failed']:
        logger.warning(f"  - {failure['name']}: {failure['error']} - {failure['details']}")

critical_blueprints = ['Quotes', 'Settings']
missing_critical = [bp for bp in critical_blueprints if bp not in blueprint_registry['successful']]

if missing_critical:
    logger.error(f"🚨 CRITICAL: Missing essential blueprints: {', '.join(missing_critical)}")

# url prefix for each blueprint, relative to the app root
URL_PREFIXES = {
    'quotes_bp': '/api/quotes',
    'quick_quote_bp': '/api/quick-quote',
    'pricing_bp': '/api/pricing',
    'filaments_bp': '/api/filaments',
    'printers_bp': '/api/printers',
    'hardware_bp': '/api/hardware',
    'settings_bp': '/api/settings',
    'counts_bp': '/api/counts',
    'spoolman_bp': '/api/spoolman',
    'health_bp': '/api',
}

__all__ = [
    'quotes_bp',
    'quick_quote_bp',
    'pricing_bp',
    'filaments_bp',
    'printers_bp',
    'hardware_bp',
    'settings_bp',
    'counts_bp',
    'spoolman_bp',
    'health_bp',
    'blueprint_registry',
    'URL_PREFIXES',
]


def validate_blueprints():
    """
    Blueprint import status for app.py

    Returns:
        dict: Blueprint validation results with counts and status
    """
    return {
        'successful_imports': successful_count,
        'failed_imports': failed_count,
        'critical_missing': missing_critical,
        'all_critical_present': len(missing_critical) == 0,
        'successful_blueprints': blueprint_registry['successful'],
        'failed_blueprints': [f['name'] for f in blueprint_registry['failed']],
    }


def list_available_blueprints():
    """
    Returns:
        dict: Dictionary of blueprint_name -> blueprint_instance
    """
    return blueprint_registry['blueprints'].copy()
