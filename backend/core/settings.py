"""
Django settings for the media server.

Everything deployment specific is read from MEDIA_SERVER_* environment variables.
App-specific options live in the MEDIA_SERVER dict and are read by media.config.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default):
    return os.environ.get(name, str(default)).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return [item.strip() for item in raw.split(',') if item.strip()]


SECRET_KEY = os.environ.get('MEDIA_SERVER_SECRET_KEY', 'django-insecure-media-server-dev-key')

DEBUG = _env_bool('MEDIA_SERVER_DEBUG', False)

ALLOWED_HOSTS = _env_list('MEDIA_SERVER_ALLOWED_HOSTS', ['localhost', '127.0.0.1', 'testserver'])

INSTALLED_APPS = [
    'corsheaders',
    'rest_framework',
    'media.apps.MediaAppConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    # CorsMiddleware must come before CommonMiddleware
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'core.urls'

WSGI_APPLICATION = 'core.wsgi.application'

# No persisted models: the storage root on disk is the only store.
DATABASES = {}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True


# Storage root. Raw files are served under MEDIA_URL in development (core/urls.py).
MEDIA_ROOT = os.environ.get('MEDIA_SERVER_STORAGE_ROOT', str(BASE_DIR / 'uploads'))
MEDIA_URL = '/uploads/'

MEDIA_SERVER = {
    'MEDIA_URL_PREFIX': os.environ.get('MEDIA_SERVER_MEDIA_URL_PREFIX', '/api/media/'),
    'UPLOAD_URL': os.environ.get('MEDIA_SERVER_UPLOAD_URL', '/api/upload'),
    'UPLOAD_FIELD': 'uploaded_file',
    'ACCEPTED_TYPES': {
        'png': 'image/png',
        'jpg': 'image/jpeg',
        'gif': 'image/gif',
        'webp': 'image/webp',
    },
}

# No authentication and no pagination: every caller sees the whole storage tree.
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.MultiPartParser',
        'rest_framework.parsers.FormParser',
    ],
    'UNAUTHENTICATED_USER': None,
}

# Browser front-ends allowed to call the API (credentials included).
CORS_ALLOWED_ORIGINS = _env_list('MEDIA_SERVER_CORS_ORIGINS', ['http://localhost:4200'])
CORS_ALLOW_CREDENTIALS = True

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'media': {
            'handlers': ['console'],
            'level': os.environ.get('MEDIA_SERVER_LOG_LEVEL', 'INFO').upper(),
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
