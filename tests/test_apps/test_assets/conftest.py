"""Shared fixtures for assets app tests."""

import hashlib

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.assets.logic.upload_operations import create_upload_url
from server.apps.assets.models import Asset

User = get_user_model()

_BUCKET = 'assets'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for sharing and isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='Other@Example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with the assets bucket.

    Yields:
        boto3 S3 resource with assets bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=_BUCKET)

        yield conn


@pytest.fixture
def sample_content():
    """Bytes of a small fake PNG."""
    return b'\x89PNG\r\n\x1a\n fake image body'


@pytest.fixture
def sample_sha256(sample_content):
    """SHA256 hex digest of ``sample_content``."""
    return hashlib.sha256(sample_content).hexdigest()


@pytest.fixture
def put_object(mock_s3):
    """Store bytes in the mocked bucket, like a client PUT would.

    Returns:
        Callable taking (storage_path, content).
    """
    def _put(storage_path: str, content: bytes) -> None:
        mock_s3.Object(_BUCKET, storage_path).put(Body=content)

    return _put


@pytest.fixture
def upload_grant(user, mock_s3, sample_content):
    """Issue an upload ticket for a PNG owned by ``user``.

    Returns:
        UploadGrant of the new asset.
    """
    return create_upload_url(
        user,
        'photo.png',
        'image/png',
        len(sample_content),
    )


@pytest.fixture
def uploaded_asset(upload_grant, put_object, sample_content):
    """Asset in ``uploading`` state whose bytes are already stored.

    Returns:
        Asset instance at version 1.
    """
    put_object(upload_grant.storage_path, sample_content)
    return Asset.objects.get(id=upload_grant.asset_id)


@pytest.fixture
def ready_asset(user, mock_s3):
    """Ready asset created directly in the database.

    Returns:
        Asset instance at version 2.
    """
    return Asset.objects.create(
        owner=user,
        filename='report.pdf',
        mime='application/pdf',
        size=2048,
        storage_path=f'private/{user.pk}/2026/01/ready-report.pdf',
        sha256='ab' * 32,
        status='ready',
        version=2,
    )
