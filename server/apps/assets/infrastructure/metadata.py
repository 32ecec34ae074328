"""Metadata utilities for assets: MIME policy, filenames, checksums."""

import hashlib
import unicodedata
from datetime import datetime
from typing import BinaryIO, Final
from uuid import UUID

_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation
_FILENAME_MAX_CHARS: Final = 200
_ALLOWED_MIME_PREFIXES: Final = ('image/', 'video/')
_ALLOWED_MIME_TYPES: Final = frozenset(('application/pdf',))
_STORAGE_ROOT: Final = 'private'


def is_mime_allowed(mime: str) -> bool:
    """Check MIME type against the upload policy.

    Images, videos and PDF documents are accepted.

    Args:
        mime: Declared MIME type (e.g., 'image/png').

    Returns:
        True if uploads of this type are allowed.
    """
    if mime in _ALLOWED_MIME_TYPES:
        return True
    return mime.startswith(_ALLOWED_MIME_PREFIXES)


def sanitize_filename(filename: str) -> str:
    """Make a client-supplied filename safe for storage paths.

    Path separators are replaced with underscores, the text is
    NFKC-normalized and truncated.

    Args:
        filename: Original filename.

    Returns:
        Sanitized filename of at most 200 characters.
    """
    flattened = filename.replace('/', '_').replace('\\', '_')
    normalized = unicodedata.normalize('NFKC', flattened)
    return normalized[:_FILENAME_MAX_CHARS]


def build_storage_path(
    owner_id: object,
    asset_id: UUID,
    safe_name: str,
    now: datetime,
) -> str:
    """Build the storage path for a new asset.

    Example: 'private/7/2026/03/<uuid>-photo.png'

    Args:
        owner_id: Owner's user ID.
        asset_id: ID of the new asset.
        safe_name: Sanitized filename.
        now: Issuance time (UTC).

    Returns:
        Storage path namespaced by owner and calendar year/month.
    """
    return '{root}/{owner}/{year:04d}/{month:02d}/{asset}-{name}'.format(
        root=_STORAGE_ROOT,
        owner=owner_id,
        year=now.year,
        month=now.month,
        asset=asset_id,
        name=safe_name,
    )


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate SHA256 checksum of file.

    Reads file in chunks to handle large files efficiently.
    Resets file pointer to beginning after calculation.

    Args:
        file_obj: File-like object to checksum.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    sha256_hash = hashlib.sha256()

    file_obj.seek(0)

    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        sha256_hash.update(chunk)

    file_obj.seek(0)

    return sha256_hash.hexdigest()


def checksums_match(server_sha256: str, client_sha256: str) -> bool:
    """Compare a server-computed hash with the client's claim.

    Args:
        server_sha256: Hex digest computed from the stored object.
        client_sha256: Hex digest claimed by the client.

    Returns:
        True if both digests are equal, ignoring hex case and whitespace.
    """
    return server_sha256.lower() == client_sha256.strip().lower()
