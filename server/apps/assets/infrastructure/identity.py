"""Identity provider integration: bearer tokens and user directory.

Bearer credentials are HS256 JWTs whose ``sub`` claim holds the
primary key of a Django user.
"""

import logging
from typing import TYPE_CHECKING, Final

from django.conf import settings
from django.contrib.auth import get_user_model
from jose import JWTError, jwt

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_BEARER_PREFIX: Final = 'Bearer '


def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token part of an ``Authorization`` header.

    Args:
        authorization: Raw header value, may be None.

    Returns:
        Token string, empty if the header is missing or not a bearer.
    """
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        return ''
    return authorization[len(_BEARER_PREFIX):].strip()


def verify_token(token: str) -> str | None:
    """Verify a JWT and return its subject.

    Args:
        token: Encoded JWT.

    Returns:
        The ``sub`` claim, or None if the token is invalid.
    """
    audience = settings.JWT_AUDIENCE
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=audience,
            options={'verify_aud': bool(audience)},
        )
    except JWTError as error:
        logger.info('Rejected bearer token: %s', error)
        return None

    subject = claims.get('sub')
    return subject if isinstance(subject, str) else None


def resolve_bearer_user(authorization: str | None) -> 'User | None':
    """Resolve the calling user from an ``Authorization`` header.

    Args:
        authorization: Raw header value.

    Returns:
        Active user identified by the token, or None.
    """
    token = extract_bearer_token(authorization)
    if not token:
        return None

    subject = verify_token(token)
    if subject is None:
        return None

    user_model = get_user_model()
    try:
        return user_model.objects.get(pk=subject, is_active=True)
    except (user_model.DoesNotExist, ValueError):
        logger.info('Bearer token subject has no active user: %s', subject)
        return None


def find_user_by_email(email: str) -> 'User | None':
    """Look up a user by email address (case-insensitive).

    Args:
        email: Email address to search for.

    Returns:
        Matching active user, or None.
    """
    normalized = email.strip()
    if not normalized:
        return None
    return (
        get_user_model().objects
        .filter(email__iexact=normalized, is_active=True)
        .order_by('pk')
        .first()
    )
