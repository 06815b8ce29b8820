"""
Django settings for the AgriVision carbon credits backend.

Values come from environment variables (optionally loaded from a .env file).
"""

import os
import sys
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-dev-key-change-me')

DEBUG = os.getenv('DEBUG', 'True') == 'True'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

TESTING = any([
    os.getenv('DJANGO_TESTING') == 'True',
    'test' in sys.argv,
    'pytest' in sys.modules,
])

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'drf_spectacular',
    'corsheaders',
    'authentication',
    'farmers',
    'carbon.apps.CarbonConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'backend.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'backend.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('SQLITE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

AUTH_USER_MODEL = 'authentication.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
MEDIA_URL = 'media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

CORS_ALLOWED_ORIGINS = [
    origin for origin in os.getenv('CORS_ALLOWED_ORIGINS', 'http://localhost:3000').split(',') if origin
]

# REST framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.getenv('JWT_ACCESS_MINUTES', 60))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.getenv('JWT_REFRESH_DAYS', 7))),
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'AgriVision Carbon Credits API',
    'DESCRIPTION': 'Climate-smart activity logging, carbon credit aggregation and leaderboard',
    'VERSION': '1.0.0',
}

# AI inference gateway
AI_GATEWAY_URL = os.getenv('AI_GATEWAY_URL', '')
AI_GATEWAY_API_KEY = os.getenv('AI_GATEWAY_API_KEY', '')
AI_GATEWAY_TIMEOUT = float(os.getenv('AI_GATEWAY_TIMEOUT', 30))

# Carbon credit pipeline
CARBON_FALLBACK_CREDITS = float(os.getenv('CARBON_FALLBACK_CREDITS', 1.5))
CARBON_VERIFIER_ROLES = [
    role.strip() for role in os.getenv('CARBON_VERIFIER_ROLES', 'ADMIN').split(',') if role.strip()
]
CARBON_AGGREGATE_ADMIN_APPROVALS = os.getenv('CARBON_AGGREGATE_ADMIN_APPROVALS', 'False') == 'True'
LEADERBOARD_RANK_INTERVAL_MINUTES = int(os.getenv('LEADERBOARD_RANK_INTERVAL_MINUTES', 60))
CARBON_AGGREGATION_SWEEP_INTERVAL_MINUTES = int(os.getenv('CARBON_AGGREGATION_SWEEP_INTERVAL_MINUTES', 15))
CARBON_AGGREGATION_SWEEP_GRACE_MINUTES = int(os.getenv('CARBON_AGGREGATION_SWEEP_GRACE_MINUTES', 5))

# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = os.getenv('CELERY_TASK_ALWAYS_EAGER', str(TESTING)) == 'True'
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_TASK_ACKS_LATE = True
CELERY_BEAT_SCHEDULE = {
    'update-leaderboard-ranks': {
        'task': 'carbon.update_leaderboard_ranks',
        'schedule': timedelta(minutes=LEADERBOARD_RANK_INTERVAL_MINUTES),
    },
    'requeue-unaggregated-activities': {
        'task': 'carbon.requeue_unaggregated_activities',
        'schedule': timedelta(minutes=CARBON_AGGREGATION_SWEEP_INTERVAL_MINUTES),
    },
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'django.db.backends': {
            'level': 'WARNING',
        },
    },
}
