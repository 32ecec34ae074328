"""Business logic for reading, listing and deleting assets."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Final, final
from uuid import UUID

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from server.apps.assets.exceptions import BadRequestError, VersionConflictError
from server.apps.assets.infrastructure.storage import get_asset_storage
from server.apps.assets.logic.guards import (
    Relation,
    load_asset_for,
    visible_assets,
)
from server.apps.assets.models import Asset

# User type for Django's dynamic user model
_User = Any

_DEFAULT_PAGE_SIZE: Final = 20
_MAX_PAGE_SIZE: Final = 50

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class AssetPage:
    """One page of a cursor-paginated asset listing."""

    assets: list[Asset]
    end_cursor: str | None
    has_next_page: bool


def encode_cursor(asset: Asset) -> str:
    """Build the pagination cursor for an asset.

    Args:
        asset: Asset at the cursor position.

    Returns:
        ISO-8601 creation timestamp.
    """
    return asset.created_at.isoformat()


def decode_cursor(cursor: str) -> datetime:
    """Parse a pagination cursor.

    Args:
        cursor: ISO-8601 timestamp produced by ``encode_cursor``.

    Returns:
        Aware datetime.

    Raises:
        BadRequestError: If the cursor is not a timestamp.
    """
    try:
        parsed = parse_datetime(cursor)
    except ValueError:
        parsed = None
    if parsed is None:
        raise BadRequestError(f'Invalid cursor: {cursor}')
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, UTC)
    return parsed


def clamp_page_size(first: int | None) -> int:
    """Normalize the requested page size.

    Args:
        first: Requested size, may be None.

    Returns:
        20 when missing or non-positive, at most 50.
    """
    if first is None or first <= 0:
        return _DEFAULT_PAGE_SIZE
    return min(first, _MAX_PAGE_SIZE)


def list_assets(
    user: _User,
    after: str | None = None,
    first: int | None = None,
    query: str | None = None,
) -> AssetPage:
    """List assets visible to the user, newest first.

    Args:
        user: Caller.
        after: Cursor of the last row of the previous page.
        first: Requested page size.
        query: Case-insensitive filename substring filter.

    Returns:
        AssetPage with at most ``first`` assets.

    Raises:
        BadRequestError: If the cursor is invalid.
    """
    limit = clamp_page_size(first)

    assets = visible_assets(user).order_by('-created_at')
    if after:
        assets = assets.filter(created_at__lt=decode_cursor(after))
    if query and query.strip():
        assets = assets.filter(filename__icontains=query.strip())

    # Over-fetch one row to learn whether another page exists
    rows = list(assets[:limit + 1])
    has_next_page = len(rows) > limit
    page = rows[:limit]

    logger.debug(
        'Listed %d assets for user %s (next=%s)',
        len(page),
        user.pk,
        has_next_page,
    )

    return AssetPage(
        assets=page,
        end_cursor=encode_cursor(page[-1]) if page else None,
        has_next_page=has_next_page,
    )


def get_asset(user: _User, asset_id: UUID | str) -> Asset:
    """Get a single asset the user owns or was granted.

    Args:
        user: Caller.
        asset_id: ID of the asset.

    Returns:
        Asset instance.

    Raises:
        NotFoundError: If the asset does not exist.
        ForbiddenError: If the asset is not visible to the caller.
    """
    return load_asset_for(user, asset_id, Relation.VIEWER)


def delete_asset(user: _User, asset_id: UUID | str, version: int) -> bool:
    """Hard-delete an asset owned by the user.

    The stored object is removed by the post_delete signal handler;
    the ticket and shares go with the row via cascading foreign keys.

    Args:
        user: Caller, must own the asset.
        asset_id: ID of the asset.
        version: Asset version observed by the caller.

    Returns:
        True once deleted.

    Raises:
        NotFoundError: If the asset does not exist.
        ForbiddenError: If the caller does not own the asset.
        VersionConflictError: If ``version`` is stale.
        BadRequestError: If the delete fails.
    """
    asset = load_asset_for(user, asset_id, Relation.OWNER, version=version)

    try:
        with transaction.atomic():
            _, deleted = Asset.objects.filter(
                id=asset.id,
                version=version,
            ).delete()
    except DatabaseError as error:
        logger.exception('Failed to delete asset %s', asset.id)
        raise BadRequestError('Failed to delete asset') from error

    if not deleted.get(Asset._meta.label, 0):
        raise VersionConflictError(expected=version)

    logger.info('Asset deleted: %s (%s)', asset.id, asset.storage_path)
    return True


def get_download_url(user: _User, asset_id: UUID | str) -> str:
    """Issue a short-lived signed download URL.

    Only the owner may download unless ``ASSETS_SHARED_DOWNLOADS`` is
    enabled, in which case grantees with ``can_download`` may too.

    Args:
        user: Caller.
        asset_id: ID of the asset.

    Returns:
        Signed URL valid for ``ASSETS_DOWNLOAD_URL_TTL`` seconds.

    Raises:
        NotFoundError: If the asset does not exist.
        ForbiddenError: If the caller may not download it.
        BadRequestError: If the URL cannot be signed.
    """
    if getattr(settings, 'ASSETS_SHARED_DOWNLOADS', False):
        relation = Relation.DOWNLOADER
    else:
        relation = Relation.OWNER
    asset = load_asset_for(user, asset_id, relation)

    expires_in = getattr(settings, 'ASSETS_DOWNLOAD_URL_TTL', 120)
    try:
        return get_asset_storage().create_signed_download_url(
            asset.storage_path,
            expires_in=expires_in,
        )
    except (BotoCoreError, ClientError) as error:
        raise BadRequestError('Failed to create download URL') from error
