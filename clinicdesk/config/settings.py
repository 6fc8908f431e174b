import os
import sys


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'

    # Determine project root in both source and frozen (PyInstaller) modes.
    if getattr(sys, 'frozen', False):
        PROJECT_ROOT = os.path.dirname(sys.executable)
        BASE_DIR = PROJECT_ROOT
    else:
        # Regular source layout: clinicdesk/config -> clinicdesk -> project root
        BASE_DIR = os.path.abspath(os.path.dirname(__file__))
        PROJECT_ROOT = os.path.dirname(os.path.dirname(BASE_DIR))

    # ':memory:' keeps the whole clinic in process memory; point it at a file to persist.
    DATABASE_PATH = os.environ.get('CLINIC_DATABASE_PATH') or ':memory:'
    SEED_DEMO_DATA = os.environ.get('CLINIC_SEED_DEMO', '1') == '1'

    DEBUG = True
    TESTING = False

    # Scheduling
    SCHEDULING_SCOPE = os.environ.get('CLINIC_SCHEDULING_SCOPE') or 'doctor'  # 'doctor' or 'clinic'
    SCHEDULING_BUFFER_MINUTES = 15
    DEFAULT_APPOINTMENT_MINUTES = 15
    MAX_APPOINTMENT_MINUTES = 24 * 60

    # Accounts
    BCRYPT_ROUNDS = 12
    DEFAULT_PATIENT_PASSWORD = 'password123'
    ADMIN_USERNAME = 'Admin'
    ADMIN_PASSWORD = os.environ.get('CLINIC_ADMIN_PASSWORD') or 'admin123'
    ADMIN_FULL_NAME = 'Administrator'
    ADMIN_RECOVERY_PHONE = os.environ.get('CLINIC_ADMIN_PHONE') or '0333-4216580'
    MAX_FAILED_LOGINS = 5
    LOCKOUT_MINUTES = 15


class TestConfig(Config):
    TESTING = True
    DEBUG = False
    DATABASE_PATH = ':memory:'
    SEED_DEMO_DATA = False
    BCRYPT_ROUNDS = 4
    SECRET_KEY = 'test'


def settings_from_object(obj) -> dict:
    """Upper-case attributes of a config class as a plain dict."""
    return {key: getattr(obj, key) for key in dir(obj) if key.isupper()}


def current_settings():
    """Settings of the running Flask app, or the defaults from `Config` outside of one."""
    from flask import current_app, has_app_context

    if has_app_context():
        return current_app.config
    return settings_from_object(Config)
