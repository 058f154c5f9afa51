"""Configuration settings for the Site Shift Planner application."""

import os
from dotenv import load_dotenv

load_dotenv()


def _get_database_url():
    """Get and normalize the database URL."""
    url = os.environ.get('DATABASE_URL', 'sqlite:///shiftplanner.db')
    # Some hosts still hand out postgres:// but SQLAlchemy needs postgresql://
    if url and url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _get_engine_options(db_url):
    """Get SQLAlchemy engine options based on database type.

    PostgreSQL connections need pool management to handle:
    - Cold starts
    - Connection timeouts
    - Stale connections after idle periods
    """
    if db_url and db_url.startswith('postgresql://'):
        return {
            'pool_pre_ping': True,  # Verify connections before use
            'pool_recycle': 300,    # Recycle connections every 5 minutes
            'pool_size': 5,
            'max_overflow': 10,
        }
    return {}  # SQLite doesn't need pooling options


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Database configuration
    SQLALCHEMY_DATABASE_URI = _get_database_url()
    SQLALCHEMY_ENGINE_OPTIONS = _get_engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session config
    SESSION_COOKIE_SECURE = os.environ.get('FLASK_ENV') == 'production'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Test configuration: in-memory database, fast password hashing."""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BCRYPT_LOG_ROUNDS = 4
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = 'WARNING'


# Config selector
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(name=None):
    """Get the configuration by name, falling back to FLASK_ENV."""
    env = name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
