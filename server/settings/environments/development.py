"""
This file contains all the settings that defines the development server.

SECURITY WARNING: don't run with debug turned on in production!
"""

from server.settings.components import config
from server.settings.components.assets import JWT_SECRET_KEY
from server.settings.components.common import SECRET_KEY as _SECRET_KEY

# Setting the development status:

DEBUG = True

ALLOWED_HOSTS = [
    config('DOMAIN_NAME', default='localhost'),
    'localhost',
    '0.0.0.0',  # noqa: S104
    '127.0.0.1',
    'testserver',
]

SECRET_KEY = _SECRET_KEY or 'django-insecure-development-only'

# Tokens are signed with the Django secret unless configured
JWT_SECRET_KEY = JWT_SECRET_KEY or SECRET_KEY
