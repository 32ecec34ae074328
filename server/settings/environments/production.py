"""
This file contains all the settings used in production.

This file is required and if development.py is present these
values are overridden.
"""

from django.core.exceptions import ImproperlyConfigured

from server.settings.components import config
from server.settings.components.assets import JWT_SECRET_KEY
from server.settings.components.common import SECRET_KEY

# Production flags:
# https://docs.djangoproject.com/en/5.1/howto/deployment/

DEBUG = False

ALLOWED_HOSTS = [
    # We only accept connections from our own domain:
    config('DOMAIN_NAME'),
]

if not SECRET_KEY or not JWT_SECRET_KEY:
    raise ImproperlyConfigured(
        'DJANGO_SECRET_KEY and JWT_SECRET_KEY must be set in production',
    )

# Security
# https://docs.djangoproject.com/en/5.1/topics/security/

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
