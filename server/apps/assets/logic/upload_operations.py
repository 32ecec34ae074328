"""Business logic for upload tickets and finalize (integrity check)."""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final, final
from uuid import UUID

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from server.apps.assets.exceptions import (
    BadRequestError,
    ForbiddenError,
    IntegrityCheckError,
    NotFoundError,
    VersionConflictError,
)
from server.apps.assets.infrastructure.metadata import (
    build_storage_path,
    checksums_match,
    is_mime_allowed,
    sanitize_filename,
)
from server.apps.assets.infrastructure.storage import (
    ObjectUnavailableError,
    get_asset_storage,
)
from server.apps.assets.logic.guards import (
    Relation,
    apply_versioned_update,
    load_asset_for,
)
from server.apps.assets.models import Asset, AssetStatus, UploadTicket

# User type for Django's dynamic user model
_User = Any

_NONCE_BYTES: Final = 32  # 64 hex chars

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class UploadGrant:
    """Everything a client needs to upload the bytes of a new asset."""

    asset_id: UUID
    storage_path: str
    upload_url: str
    expires_at: datetime
    nonce: str


def get_max_upload_bytes() -> int:
    """Get the upload size ceiling.

    Returns:
        Maximum size in bytes from settings or 30 MiB.
    """
    return getattr(settings, 'ASSETS_MAX_UPLOAD_BYTES', 30 * 1024 * 1024)


def get_ticket_ttl() -> int:
    """Get upload ticket lifetime in seconds.

    Returns:
        Lifetime from settings or default of 300 (5 min).
    """
    return getattr(settings, 'ASSETS_TICKET_TTL', 300)


def get_upload_url_ttl() -> int:
    """Get signed upload URL lifetime in seconds.

    Returns:
        Lifetime from settings, defaults to the ticket lifetime.
    """
    return getattr(settings, 'ASSETS_UPLOAD_URL_TTL', get_ticket_ttl())


def validate_upload_request(mime: str, size: int) -> None:
    """Validate declared MIME type and size against the upload policy.

    Args:
        mime: Declared MIME type.
        size: Declared size in bytes.

    Raises:
        BadRequestError: If the MIME type or size is not allowed.
    """
    if not is_mime_allowed(mime):
        raise BadRequestError(f'MIME type not allowed: {mime}')

    max_bytes = get_max_upload_bytes()
    if size <= 0 or size > max_bytes:
        raise BadRequestError(
            f'Invalid size: {size} (allowed 1..{max_bytes} bytes)',
        )


def create_upload_url(
    user: _User,
    filename: str,
    mime: str,
    size: int,
) -> UploadGrant:
    """Create an asset in ``uploading`` state and a signed upload URL.

    The asset row, the upload ticket and the signed URL are produced
    inside one transaction: if any step fails nothing is persisted.

    Args:
        user: Owner of the new asset.
        filename: Client-supplied filename.
        mime: Declared MIME type.
        size: Declared size in bytes.

    Returns:
        UploadGrant with the asset id, path, URL, expiry and nonce.

    Raises:
        BadRequestError: If validation, persistence or signing fails.
    """
    validate_upload_request(mime, size)

    asset_id = uuid.uuid4()
    nonce = secrets.token_hex(_NONCE_BYTES)
    now = timezone.now()
    expires_at = now + timedelta(seconds=get_ticket_ttl())

    safe_name = sanitize_filename(filename)
    storage_path = build_storage_path(user.pk, asset_id, safe_name, now)
    storage = get_asset_storage()

    try:
        with transaction.atomic():
            Asset.objects.create(
                id=asset_id,
                owner=user,
                filename=safe_name,
                mime=mime,
                size=size,
                storage_path=storage_path,
                status=AssetStatus.UPLOADING,
                version=1,
            )
            UploadTicket.objects.create(
                asset_id=asset_id,
                user=user,
                nonce=nonce,
                mime=mime,
                size=size,
                storage_path=storage_path,
                expires_at=expires_at,
                used=False,
            )
            upload_url = storage.create_signed_upload_url(
                storage_path,
                content_type=mime,
                content_length=size,
                expires_in=get_upload_url_ttl(),
            )
    except DatabaseError as error:
        logger.exception('Failed to persist asset: %s', storage_path)
        raise BadRequestError('Failed to create asset') from error
    except (BotoCoreError, ClientError) as error:
        logger.exception('Failed to create upload URL: %s', storage_path)
        raise BadRequestError('Failed to create upload URL') from error

    logger.info(
        'Upload ticket issued: asset=%s user=%s path=%s',
        asset_id,
        user.pk,
        storage_path,
    )

    return UploadGrant(
        asset_id=asset_id,
        storage_path=storage_path,
        upload_url=upload_url,
        expires_at=expires_at,
        nonce=nonce,
    )


def _load_ticket(user: _User, asset: Asset) -> UploadTicket:
    try:
        ticket = UploadTicket.objects.get(asset=asset)
    except UploadTicket.DoesNotExist:
        raise NotFoundError('Ticket not found') from None

    if ticket.user_id != user.pk:
        raise ForbiddenError
    return ticket


def finalize_upload(
    user: _User,
    asset_id: UUID | str,
    client_sha256: str,
    version: int,
) -> Asset:
    """Verify the uploaded object and settle the asset status.

    The server downloads the stored bytes and is authoritative for the
    final hash; the client's hash is only a cross-check. A finalize on
    an already used ticket returns the current asset unchanged, without
    checking the supplied version.

    Args:
        user: Caller, must own the asset.
        asset_id: ID of the asset.
        client_sha256: Hex SHA256 claimed by the client.
        version: Asset version observed by the caller.

    Returns:
        The asset in ``ready`` state (or unchanged on a repeated call).

    Raises:
        NotFoundError: If the asset or ticket does not exist.
        ForbiddenError: If the caller does not own the asset or ticket.
        VersionConflictError: If ``version`` is stale.
        BadRequestError: If the ticket expired.
        IntegrityCheckError: If the object is missing or its size or hash
            differs from the declared one.
    """
    asset = load_asset_for(user, asset_id, Relation.OWNER)
    ticket = _load_ticket(user, asset)

    if ticket.used:
        logger.info('Repeated finalize for asset %s, returning as is', asset.id)
        return asset

    if asset.version != version:
        raise VersionConflictError(expected=version, actual=asset.version)

    if ticket.is_expired(timezone.now()):
        logger.warning(
            'Finalize after ticket expiry: asset=%s expired_at=%s',
            asset.id,
            ticket.expires_at.isoformat(),
        )
        raise BadRequestError('Ticket expired')

    storage = get_asset_storage()
    try:
        stored_size = storage.stored_size(ticket.storage_path)
        server_sha256 = None
        # Never hash a body whose size differs from the declared one
        if stored_size == asset.size:
            server_sha256 = storage.checksum(ticket.storage_path)
    except ObjectUnavailableError as error:
        apply_versioned_update(asset, version, status=AssetStatus.CORRUPT)
        logger.warning('Object unavailable at finalize: asset=%s', asset.id)
        raise IntegrityCheckError('Object missing') from error

    failure = None
    if server_sha256 is None:
        logger.warning(
            'Size mismatch at finalize: asset=%s declared=%d stored=%d',
            asset.id,
            asset.size,
            stored_size,
        )
        failure = 'Size mismatch'
    elif not checksums_match(server_sha256, client_sha256):
        failure = 'Hash mismatch'

    status = AssetStatus.CORRUPT if failure else AssetStatus.READY
    with transaction.atomic():
        asset = apply_versioned_update(
            asset,
            version,
            sha256=server_sha256,
            status=status,
        )
        UploadTicket.objects.filter(pk=ticket.pk).update(used=True)

    logger.info(
        'Asset finalized: asset=%s status=%s version=%d',
        asset.id,
        asset.status,
        asset.version,
    )

    if failure:
        raise IntegrityCheckError(failure)
    return asset
