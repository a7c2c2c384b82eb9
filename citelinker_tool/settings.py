"""
Django settings for the citelinker_tool.

This file contains only the configuration needed by the citation API.
The service is stateless: no database, sessions or user accounts are
configured. Upstream credentials (OpenAI, Serper, Open PageRank) and the
domain-quality configuration file are read from the environment.

Please consult the Django documentation for additional configuration
options: https://docs.djangoproject.com/en/4.2/ref/settings/
"""

from __future__ import annotations

import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-change-me')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DJANGO_DEBUG', 'false').lower() == 'true'

RUNNING_TESTS = os.getenv('PYTEST_CURRENT_TEST') is not None
if RUNNING_TESTS:
    DEBUG = True

if not DEBUG and SECRET_KEY == 'django-insecure-change-me' and not RUNNING_TESTS:
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set when DEBUG is False.')

ALLOWED_HOSTS: list[str] = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', '127.0.0.1,localhost').split(',')
    if host.strip()
]

# Application definition
INSTALLED_APPS = [
    'citelinker',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'citelinker.middleware.sliding_window_rate_throttle',
]

ROOT_URLCONF = 'citelinker_tool.urls'

WSGI_APPLICATION = 'citelinker_tool.wsgi.application'

# Nothing is persisted between requests.
DATABASES: dict[str, dict[str, object]] = {}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'citelinker',
    }
}

# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

# Article text is capped at 10k characters; leave room for JSON overhead.
DATA_UPLOAD_MAX_MEMORY_SIZE = int(os.getenv('CITELINKER_MAX_BODY_BYTES', str(256 * 1024)))

# Security headers
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
USE_X_FORWARDED_HOST = True

if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv('DJANGO_SECURE_SSL_REDIRECT', 'true').lower() == 'true'
    SECURE_HSTS_SECONDS = int(os.getenv('DJANGO_SECURE_HSTS_SECONDS', '31536000'))
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
else:
    SECURE_SSL_REDIRECT = False

# Upstream services
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')
OPENAI_API_BASE = os.getenv('OPENAI_API_BASE') or None
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
OPENAI_EMBEDDING_MODEL = os.getenv('OPENAI_EMBEDDING_MODEL', 'text-embedding-3-small')
SERPER_API_KEY = os.getenv('SERPER_API_KEY', '')
OPENPAGERANK_API_KEY = os.getenv('OPENPAGERANK_API_KEY', '')
CITELINKER_UPSTREAM_TIMEOUT = float(os.getenv('CITELINKER_UPSTREAM_TIMEOUT', '10'))

# Allow-list, blacklist and brand-priority map; merged over built-in defaults.
CITELINKER_CONFIG = Path(os.getenv('CITELINKER_CONFIG', BASE_DIR / 'config' / 'domain_quality.yaml'))

# Rate limiting / throttling defaults (per IP per route)
THROTTLED_ROUTES = [
    'citelinker:keywords',
    'citelinker:search',
    'citelinker:reason',
]
THROTTLE_LIMIT = int(os.getenv('CITELINKER_THROTTLE_LIMIT', '30'))
THROTTLE_WINDOW = int(os.getenv('CITELINKER_THROTTLE_WINDOW', '60'))
THROTTLE_IP_HEADER = os.getenv('CITELINKER_THROTTLE_HEADER', 'HTTP_X_FORWARDED_FOR')
THROTTLE_KEY_PREFIX = 'citelinker:throttle'


log_level = os.getenv('DJANGO_LOG_LEVEL', 'INFO').upper()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
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
        'level': log_level,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': log_level,
            'propagate': False,
        },
        'citelinker': {
            'handlers': ['console'],
            'level': os.getenv('CITELINKER_LOG_LEVEL', log_level).upper(),
            'propagate': False,
        },
    },
}
