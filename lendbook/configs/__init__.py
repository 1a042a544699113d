#!/usr/bin/env python

"""
    Configurations for Lendbook

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
HOST = os.environ.get('LENDBOOK_HOST', 'localhost')
PORT = int(os.environ.get('LENDBOOK_PORT', 8080))
WORKERS = int(os.environ.get('LENDBOOK_WORKERS', 1))
DEBUG = bool(int(os.environ.get('LENDBOOK_DEBUG', 0)))
LOG_LEVEL = os.environ.get('LENDBOOK_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('LENDBOOK_SSL_CRT')
SSL_KEY = os.environ.get('LENDBOOK_SSL_KEY')

# Signing key for access tokens and how long (seconds) a token stays valid
SEED = os.environ.get('LENDBOOK_SEED', 'lendbook-dev-seed')
TOKEN_TTL = int(os.environ.get('LENDBOOK_TOKEN_TTL', 604800))

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'lendbook'),
}

# Seconds a transaction may wait on a lock or statement before giving up
DB_TIMEOUT = float(os.environ.get('DB_TIMEOUT', 5))

# Database configuration
DB_URI = os.environ.get('LENDBOOK_DB_URI') or (
    "sqlite:///lendbook.db" if TESTING else
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

__all__ = [
    'HOST', 'PORT', 'DEBUG', 'LOG_LEVEL', 'OPTIONS', 'DB_URI', 'DB_CONFIG',
    'DB_TIMEOUT', 'SEED', 'TOKEN_TTL', 'TESTING'
]
