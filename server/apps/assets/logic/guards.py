"""Authorization guard and version-checked writes."""

import enum
import logging
from typing import Any
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import F, Q, QuerySet
from django.utils import timezone

from server.apps.assets.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    VersionConflictError,
)
from server.apps.assets.models import Asset, AssetShare

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


class Relation(enum.Enum):
    """Relation a caller must hold to an asset."""

    OWNER = 'owner'
    DOWNLOADER = 'downloader'  # owner, or share with can_download
    VIEWER = 'viewer'  # owner, or any share


def require_user(user: _User | None) -> _User:
    """Ensure a caller identity was resolved.

    Args:
        user: Resolved caller or None.

    Returns:
        The caller.

    Raises:
        UnauthenticatedError: If there is no caller.
    """
    if user is None or not user.is_authenticated:
        raise UnauthenticatedError
    return user


def visible_assets(user: _User) -> QuerySet[Asset]:
    """Assets the user may read: owned, or shared with them.

    Args:
        user: Caller.

    Returns:
        QuerySet of visible assets.
    """
    shared_ids = AssetShare.objects.filter(
        to_user=user,
    ).values('asset_id')
    return Asset.objects.filter(
        Q(owner=user) | Q(id__in=shared_ids),
    )


def has_relation(asset: Asset, user: _User, relation: Relation) -> bool:
    """Check whether ``user`` holds ``relation`` to ``asset``.

    Args:
        asset: Asset to check.
        user: Caller.
        relation: Required relation.

    Returns:
        True if the relation holds.
    """
    if asset.is_owned_by(user.pk):
        return True
    if relation is Relation.OWNER:
        return False

    shares = AssetShare.objects.filter(asset=asset, to_user=user)
    if relation is Relation.DOWNLOADER:
        shares = shares.filter(can_download=True)
    return shares.exists()


def authorize(asset: Asset, user: _User, relation: Relation) -> None:
    """Raise unless ``user`` holds ``relation`` to ``asset``.

    Args:
        asset: Asset to check.
        user: Caller.
        relation: Required relation.

    Raises:
        ForbiddenError: If the relation does not hold.
    """
    if not has_relation(asset, user, relation):
        logger.warning(
            'User %s denied %s access to asset %s',
            user.pk,
            relation.value,
            asset.id,
        )
        raise ForbiddenError


def load_asset_for(
    user: _User,
    asset_id: UUID | str,
    relation: Relation = Relation.OWNER,
    version: int | None = None,
) -> Asset:
    """Load an asset and check the caller's relation and observed version.

    The version check here rejects obviously stale callers early; the
    write itself is still guarded by ``apply_versioned_update``.

    Args:
        user: Caller.
        asset_id: ID of the asset.
        relation: Relation the caller must hold.
        version: Version observed by the caller, None to skip the check.

    Returns:
        Asset instance.

    Raises:
        NotFoundError: If the asset does not exist.
        ForbiddenError: If the caller lacks the relation.
        VersionConflictError: If ``version`` is stale.
    """
    try:
        asset = Asset.objects.get(id=asset_id)
    except (Asset.DoesNotExist, ValidationError):
        raise NotFoundError('Asset not found') from None

    authorize(asset, user, relation)

    if version is not None and asset.version != version:
        logger.info(
            'Stale version for asset %s: got %d, stored %d',
            asset.id,
            version,
            asset.version,
        )
        raise VersionConflictError(expected=version, actual=asset.version)

    return asset


def apply_versioned_update(
    asset: Asset,
    version: int,
    **changes: object,
) -> Asset:
    """Atomically apply ``changes`` and bump the version.

    Runs ``UPDATE asset SET ..., version = version + 1
    WHERE id = X AND version = V`` so concurrent writers holding the
    same observed version cannot both succeed.

    Args:
        asset: Asset to update.
        version: Version the caller observed.
        **changes: Field values to set alongside the version bump.

    Returns:
        The refreshed Asset instance.

    Raises:
        VersionConflictError: If another write landed first.
    """
    updated = Asset.objects.filter(id=asset.id, version=version).update(
        version=F('version') + 1,
        updated_at=timezone.now(),
        **changes,
    )
    if updated == 0:
        logger.warning(
            'Concurrent write on asset %s, version %d lost',
            asset.id,
            version,
        )
        raise VersionConflictError(expected=version)

    asset.refresh_from_db()
    return asset
