"""Asset lifecycle policy and identity provider settings."""

from server.settings.components import config

# Upload policy
ASSETS_MAX_UPLOAD_BYTES = config(
    'ASSETS_MAX_UPLOAD_BYTES',
    cast=int,
    default=30 * 1024 * 1024,
)

# Lifetimes in seconds
ASSETS_TICKET_TTL = config('ASSETS_TICKET_TTL', cast=int, default=300)
ASSETS_UPLOAD_URL_TTL = config(
    'ASSETS_UPLOAD_URL_TTL',
    cast=int,
    default=ASSETS_TICKET_TTL,
)
ASSETS_DOWNLOAD_URL_TTL = config(
    'ASSETS_DOWNLOAD_URL_TTL',
    cast=int,
    default=120,
)

# Let grantees with `can_download` request download URLs
ASSETS_SHARED_DOWNLOADS = config(
    'ASSETS_SHARED_DOWNLOADS',
    cast=bool,
    default=False,
)

# Bearer tokens
JWT_SECRET_KEY = config('JWT_SECRET_KEY', default='')
JWT_ALGORITHM = config('JWT_ALGORITHM', default='HS256')
JWT_AUDIENCE = config('JWT_AUDIENCE', default=None)
