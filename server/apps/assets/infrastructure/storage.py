"""Custom storage backend for S3-compatible object storage."""

import logging
from typing import cast, final, override

from botocore.exceptions import BotoCoreError, ClientError
from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

from server.apps.assets.infrastructure.metadata import calculate_checksum

logger = logging.getLogger(__name__)


class ObjectUnavailableError(Exception):
    """Raised when a stored object cannot be downloaded."""


@final
class AssetStorage(S3Storage):
    """Custom S3 storage backend for user assets.

    Extends django-storages S3Storage with:
    - Signed PUT URLs so clients upload bytes directly to the bucket
    - Short-lived signed GET URLs for downloads
    - Server-side checksum of stored objects
    """

    def create_signed_upload_url(
        self,
        name: str,
        content_type: str,
        content_length: int,
        expires_in: int,
    ) -> str:
        """Issue a time-limited URL allowing a single PUT of ``name``.

        Content type and length are signed, so the store rejects a body
        of any other size.

        Args:
            name: Storage path of the object.
            content_type: MIME type the client must upload with.
            content_length: Exact body size in bytes.
            expires_in: URL lifetime in seconds.

        Returns:
            Signed upload URL.

        Raises:
            Exception: If the URL cannot be signed.
        """
        key = self._normalize_name(clean_name(name))
        try:
            signed_url = self.bucket.meta.client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                    'ContentLength': content_length,
                },
                ExpiresIn=expires_in,
                HttpMethod='PUT',
            )
        except Exception:
            logger.exception('Failed to sign upload URL: %s', name)
            raise
        logger.debug('Signed upload URL for %s (%ds)', name, expires_in)
        return signed_url

    def create_signed_download_url(self, name: str, expires_in: int) -> str:
        """Issue a time-limited read URL for ``name``.

        Args:
            name: Storage path of the object.
            expires_in: URL lifetime in seconds.

        Returns:
            Signed download URL.
        """
        try:
            signed_url = self.url(name, expire=expires_in)
        except Exception:
            logger.exception('Failed to sign download URL: %s', name)
            raise
        logger.debug('Signed download URL for %s (%ds)', name, expires_in)
        return signed_url

    def checksum(self, name: str) -> str:
        """Download the stored object and compute its SHA256.

        Args:
            name: Storage path of the object.

        Returns:
            Hex-encoded SHA256 of the stored bytes.

        Raises:
            ObjectUnavailableError: If the object is missing or unreadable.
        """
        try:
            with self.open(name, 'rb') as stored:
                return calculate_checksum(stored)
        except (FileNotFoundError, ClientError, BotoCoreError) as error:
            logger.warning('Stored object unavailable: %s (%s)', name, error)
            raise ObjectUnavailableError(name) from error

    def stored_size(self, name: str) -> int:
        """Get the size of the stored object without downloading it.

        Args:
            name: Storage path of the object.

        Returns:
            Size in bytes as reported by the store.

        Raises:
            ObjectUnavailableError: If the object is missing or unreadable.
        """
        try:
            return self.size(name)
        except (FileNotFoundError, ClientError, BotoCoreError) as error:
            logger.warning('Stored object unavailable: %s (%s)', name, error)
            raise ObjectUnavailableError(name) from error

    @override
    def delete(self, name: str) -> None:
        """Delete object from S3 with error handling and logging.

        Args:
            name: Storage path of object to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting object from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete object from storage: %s', name)
            raise


def get_asset_storage() -> AssetStorage:
    """Get the configured default storage backend.

    Returns:
        AssetStorage instance with proper S3 configuration.
    """
    return cast(AssetStorage, default_storage)
