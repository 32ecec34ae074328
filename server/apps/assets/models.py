"""Database models for assets app."""

import uuid
from datetime import datetime
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_FILENAME_MAX_LENGTH: Final = 200
_MIME_TYPE_MAX_LENGTH: Final = 255
_STORAGE_PATH_MAX_LENGTH: Final = 512
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_NONCE_MAX_LENGTH: Final = 64


class AssetStatus(models.TextChoices):
    """Lifecycle status of an asset."""

    UPLOADING = 'uploading', 'Uploading'
    READY = 'ready', 'Ready'
    CORRUPT = 'corrupt', 'Corrupt'


@final
class Asset(models.Model):
    """File asset owned by a user and stored in S3-compatible storage.

    The asset row is created before the bytes exist (status ``uploading``)
    and moves to ``ready`` or ``corrupt`` once the server has hashed the
    stored object.

    ``version`` is a generic "asset state changed" counter used for
    optimistic concurrency: every accepted mutation (finalize, share,
    revoke) increments it by exactly one.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # Owner relationship
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='assets',
        db_index=True,
    )

    filename = models.CharField(
        max_length=_FILENAME_MAX_LENGTH,
        help_text='Sanitized original filename',
    )

    mime = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type declared by the uploader',
    )

    size = models.BigIntegerField(
        help_text='Declared file size in bytes',
    )

    storage_path = models.CharField(
        max_length=_STORAGE_PATH_MAX_LENGTH,
        unique=True,
        help_text='Path in storage: private/{owner_id}/{yyyy}/{mm}/{id}-{name}',
    )

    sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        null=True,
        blank=True,
        help_text='Server-computed SHA256, set on finalize',
    )

    status = models.CharField(
        max_length=16,
        choices=AssetStatus.choices,
        default=AssetStatus.UPLOADING,
        db_index=True,
    )

    version = models.PositiveIntegerField(default=1)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Asset'  # type: ignore[mutable-override]
        verbose_name_plural = 'Assets'  # type: ignore[mutable-override]
        ordering = ['-created_at']

        indexes = [
            # Optimize cursor pagination of a user's assets
            models.Index(
                fields=['owner', '-created_at'],
                name='assets_owner_recent_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(version__gte=1),
                name='assets_version_positive',
            ),
            models.CheckConstraint(
                condition=models.Q(size__gt=0),
                name='assets_size_positive',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner_id}:{self.filename} (v{self.version})'

    def is_owned_by(self, user_id: object) -> bool:
        """Check whether the given user id owns this asset.

        Args:
            user_id: Primary key of the user.

        Returns:
            True if the user is the owner.
        """
        return self.owner_id == user_id


@final
class UploadTicket(models.Model):
    """Time-bounded authorization for a pending upload.

    Created together with the asset and consumed exactly once by a
    finalize call (successful or not).
    """

    asset = models.OneToOneField(
        Asset,
        on_delete=models.CASCADE,
        related_name='upload_ticket',
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='upload_tickets',
    )

    nonce = models.CharField(max_length=_NONCE_MAX_LENGTH)

    mime = models.CharField(max_length=_MIME_TYPE_MAX_LENGTH)

    size = models.BigIntegerField()

    storage_path = models.CharField(max_length=_STORAGE_PATH_MAX_LENGTH)

    expires_at = models.DateTimeField(db_index=True)

    used = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Upload Ticket'  # type: ignore[mutable-override]
        verbose_name_plural = 'Upload Tickets'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        state = 'used' if self.used else 'pending'
        return f'ticket:{self.asset_id} ({state})'

    def is_expired(self, now: datetime) -> bool:
        """Check if the ticket expired before ``now``.

        Args:
            now: Current aware datetime.

        Returns:
            True if the ticket can no longer be consumed.
        """
        return self.expires_at < now


@final
class AssetShare(models.Model):
    """Grant of an asset to another user."""

    asset = models.ForeignKey(
        Asset,
        on_delete=models.CASCADE,
        related_name='shares',
    )

    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='shared_assets',
    )

    can_download = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Asset Share'  # type: ignore[mutable-override]
        verbose_name_plural = 'Asset Shares'  # type: ignore[mutable-override]

        constraints = [
            # One grant per (asset, grantee) pair
            models.UniqueConstraint(
                fields=['asset', 'to_user'],
                name='asset_share_unique_grantee',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.asset_id} -> {self.to_user_id}'
