# config.py
# Flask application configuration

import os


def _float_list(value):
    return [float(part) for part in value.split(',') if part.strip()]


class Config:
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(BASE_DIR, "instance", "review.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')

    # Shared key for the administrator session
    ADMIN_KEY = os.environ.get('ADMIN_KEY', 'admin')

    # 'round' (half-up) or 'truncate'; applies to every two-decimal mean
    MEAN_ROUNDING = os.environ.get('MEAN_ROUNDING', 'round')
    # 'sequential' or 'shared'
    RANKING_TIES = os.environ.get('RANKING_TIES', 'sequential')

    # Transient storage failures only
    STORE_RETRY_ATTEMPTS = int(os.environ.get('STORE_RETRY_ATTEMPTS', 3))
    STORE_RETRY_BACKOFF = _float_list(os.environ.get('STORE_RETRY_BACKOFF', '0.05,0.15,0.3'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test'
    ADMIN_KEY = 'test-admin-key'
    STORE_RETRY_BACKOFF = [0, 0, 0]
