# backend/services/settings_store.py
import logging

from sqlalchemy.exc import SQLAlchemyError

from models import db, Setting
from services.errors import NotFoundError, ValidationError, StorageError

logger = logging.getLogger(__name__)


def seed_default_settings(defaults):
    """Insert any missing default settings. Existing values are left alone."""
    existing = {setting.key for setting in Setting.query.all()}
    added = []
    for key, value in defaults.items():
        if key not in existing:
            db.session.add(Setting(key=key, value=str(value)))
            added.append(key)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to seed default settings: {e}")
        raise StorageError('Failed to seed default settings') from e

    if added:
        logger.info(f"Seeded default settings: {', '.join(added)}")
    return added


def get_settings():
    """All settings as a plain key -> value dict."""
    return {setting.key: setting.value for setting in Setting.query.order_by(Setting.key).all()}


def get_setting(key, default=None):
    setting = db.session.get(Setting, key)
    if setting is None or setting.value in (None, ''):
        return default
    return setting.value


def update_setting(key, value):
    if value is None:
        raise ValidationError('Please provide a value', field='value')

    setting = db.session.get(Setting, key)
    if setting is None:
        raise NotFoundError(f'Setting {key} not found', field='key')

    setting.value = str(value)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating setting {key}: {e}")
        raise StorageError(f'Failed to update setting {key}') from e
    return {'key': setting.key, 'value': setting.value}


def update_settings(values):
    """Update several existing settings in one transaction. Unknown keys are ignored."""
    if not isinstance(values, dict) or not values:
        raise ValidationError('Please provide settings object')

    for key, value in values.items():
        if value is None:
            raise ValidationError(f'Setting {key} needs a value', field=key)
        setting = db.session.get(Setting, key)
        if setting is None:
            logger.warning(f"Ignoring unknown setting {key}")
            continue
        setting.value = str(value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating settings: {e}")
        raise StorageError('Failed to update settings') from e
    return get_settings()
