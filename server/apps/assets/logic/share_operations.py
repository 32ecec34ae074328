"""Business logic for sharing assets with other users."""

import logging
from typing import Any
from uuid import UUID

from django.db import DatabaseError, transaction

from server.apps.assets.exceptions import BadRequestError, NotFoundError
from server.apps.assets.infrastructure.identity import find_user_by_email
from server.apps.assets.logic.guards import (
    Relation,
    apply_versioned_update,
    load_asset_for,
)
from server.apps.assets.models import Asset, AssetShare

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def share_asset(
    user: _User,
    asset_id: UUID | str,
    to_email: str,
    version: int,
    *,
    can_download: bool,
) -> Asset:
    """Grant another user access to an asset.

    Sharing with oneself is a no-op and does not bump the version.

    Args:
        user: Caller, must own the asset.
        asset_id: ID of the asset.
        to_email: Email of the grantee.
        version: Asset version observed by the caller.
        can_download: Whether the grantee may download the object.

    Returns:
        The updated asset.

    Raises:
        NotFoundError: If the asset or target user does not exist.
        ForbiddenError: If the caller does not own the asset.
        VersionConflictError: If ``version`` is stale.
        BadRequestError: If the share cannot be stored.
    """
    asset = load_asset_for(user, asset_id, Relation.OWNER, version=version)

    target = find_user_by_email(to_email)
    if target is None:
        raise NotFoundError('User not found')

    if target.pk == user.pk:
        logger.info('Ignoring self-share of asset %s', asset.id)
        return asset

    try:
        with transaction.atomic():
            AssetShare.objects.update_or_create(
                asset=asset,
                to_user=target,
                defaults={'can_download': can_download},
            )
            asset = apply_versioned_update(asset, version)
    except DatabaseError as error:
        logger.exception('Failed to share asset %s', asset.id)
        raise BadRequestError('Failed to share asset') from error

    logger.info(
        'Asset %s shared with user %s (download=%s), version %d',
        asset.id,
        target.pk,
        can_download,
        asset.version,
    )
    return asset


def revoke_share(
    user: _User,
    asset_id: UUID | str,
    to_email: str,
    version: int,
) -> Asset:
    """Remove another user's access to an asset.

    Revoking an absent share (or an unknown user) still succeeds and
    bumps the version.

    Args:
        user: Caller, must own the asset.
        asset_id: ID of the asset.
        to_email: Email of the grantee.
        version: Asset version observed by the caller.

    Returns:
        The updated asset.

    Raises:
        NotFoundError: If the asset does not exist.
        ForbiddenError: If the caller does not own the asset.
        VersionConflictError: If ``version`` is stale.
        BadRequestError: If the change cannot be stored.
    """
    asset = load_asset_for(user, asset_id, Relation.OWNER, version=version)
    target = find_user_by_email(to_email)

    try:
        with transaction.atomic():
            removed = 0
            if target is not None:
                removed, _ = AssetShare.objects.filter(
                    asset=asset,
                    to_user=target,
                ).delete()
            asset = apply_versioned_update(asset, version)
    except DatabaseError as error:
        logger.exception('Failed to revoke share on asset %s', asset.id)
        raise BadRequestError('Failed to revoke share') from error

    logger.info(
        'Share revoked on asset %s (%d rows), version %d',
        asset.id,
        removed,
        asset.version,
    )
    return asset
