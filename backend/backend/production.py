"""
Deployment settings: DATABASE_URL, whitenoise static files, HTTPS-only cookies.

Builds new containers instead of mutating the ones imported from settings.
"""

import logging
import os

import dj_database_url

from .settings import *  # noqa: F401,F403
from .settings import ALLOWED_HOSTS as BASE_ALLOWED_HOSTS, DATABASES as BASE_DATABASES, MIDDLEWARE as BASE_MIDDLEWARE

logger = logging.getLogger(__name__)

DEBUG = os.getenv('DEBUG', 'False') == 'True'

DATABASES = dict(BASE_DATABASES)
if os.getenv('DATABASE_URL'):
    DATABASES['default'] = dj_database_url.config(conn_max_age=600, conn_health_checks=True)

STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}

MIDDLEWARE = list(BASE_MIDDLEWARE)
if 'whitenoise.middleware.WhiteNoiseMiddleware' not in MIDDLEWARE:
    # Directly after SecurityMiddleware
    MIDDLEWARE.insert(1, 'whitenoise.middleware.WhiteNoiseMiddleware')

ALLOWED_HOSTS = BASE_ALLOWED_HOSTS + [
    host.strip() for host in os.getenv('EXTRA_ALLOWED_HOSTS', '').split(',') if host.strip()
]

CORS_ALLOW_CREDENTIALS = True

# Without AI_GATEWAY_URL every submission is credited with the fallback estimate
REQUIRED_ENV_VARS = [
    'SECRET_KEY',
    'DATABASE_URL',
    'CELERY_BROKER_URL',
    'AI_GATEWAY_URL',
    'AI_GATEWAY_API_KEY',
]

missing_env_vars = [var for var in REQUIRED_ENV_VARS if not os.environ.get(var)]
if missing_env_vars:
    logger.warning(f"Missing environment variables for production: {', '.join(missing_env_vars)}")

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = os.getenv('SECURE_SSL_REDIRECT', 'True') == 'True'
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = int(os.getenv('SECURE_HSTS_SECONDS', 31536000))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
