from datetime import timedelta

from config import config


def test_session_lifetime_is_not_overridden(app):
    assert not any(hasattr(cls, 'PERMANENT_SESSION_LIFETIME') for cls in config.values())
    assert app.config['PERMANENT_SESSION_LIFETIME'] == timedelta(days=31)


def test_spoolman_defaults_are_seeded(app):
    assert app.config['SPOOLMAN_TIMEOUT'] == 10
    assert app.config['DEFAULT_SETTINGS']['spoolman_url'] == 'http://localhost:7912'
    assert app.config['DEFAULT_SETTINGS']['spoolman_sync_enabled'] == 'false'
