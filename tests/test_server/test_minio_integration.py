"""Integration tests for the asset storage against MinIO.

These tests verify that MinIO is properly configured and accessible
when running in Docker Compose, and that ``AssetStorage`` signs URLs
and hashes objects against a real S3 API.
"""
import hashlib
import os
from typing import Final
from urllib.parse import parse_qs, urlparse

import boto3
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from server.apps.assets.infrastructure.storage import (
    AssetStorage,
    ObjectUnavailableError,
)

_TEST_BUCKET: Final = 'assets'
_TEST_KEY: Final = 'private/0/2026/01/integration-test.txt'
_TEST_CONTENT: Final = b'Hello from MinIO integration test!'


def _minio_options() -> dict[str, str]:
    return {
        'endpoint_url': os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
    }


@pytest.fixture
def s3_client() -> BaseClient:
    """Create S3 client for MinIO.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    options = _minio_options()
    return boto3.client(
        's3',
        endpoint_url=options['endpoint_url'],
        aws_access_key_id=options['access_key'],
        aws_secret_access_key=options['secret_key'],
        region_name='us-east-1',
    )


@pytest.fixture
def test_bucket(s3_client: BaseClient) -> str:
    """Ensure test bucket exists.

    Args:
        s3_client: boto3 S3 client.

    Returns:
        Name of the test bucket.
    """
    try:
        s3_client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=_TEST_BUCKET)

    return _TEST_BUCKET


@pytest.fixture
def storage(test_bucket: str) -> AssetStorage:
    """AssetStorage pointed at the MinIO bucket.

    Args:
        test_bucket: Name of the test bucket.

    Returns:
        Storage backend instance.
    """
    return AssetStorage(
        bucket_name=test_bucket,
        region_name='us-east-1',
        signature_version='s3v4',
        **_minio_options(),
    )


@pytest.mark.integration
def test_s3_client_connection(s3_client: BaseClient) -> None:
    """Test that S3 client can connect to MinIO."""
    response = s3_client.list_buckets()
    assert 'Buckets' in response


@pytest.mark.integration
def test_checksum_of_uploaded_object(
    s3_client: BaseClient,
    storage: AssetStorage,
) -> None:
    """Test the server-side hash matches the uploaded bytes.

    Args:
        s3_client: boto3 S3 client.
        storage: Storage backend under test.
    """
    s3_client.put_object(
        Bucket=storage.bucket_name,
        Key=_TEST_KEY,
        Body=_TEST_CONTENT,
    )

    checksum = storage.checksum(_TEST_KEY)

    assert checksum == hashlib.sha256(_TEST_CONTENT).hexdigest()


@pytest.mark.integration
def test_checksum_of_missing_object(storage: AssetStorage) -> None:
    """Test hashing a missing key fails with ObjectUnavailableError.

    Args:
        storage: Storage backend under test.
    """
    with pytest.raises(ObjectUnavailableError):
        storage.checksum('private/0/2026/01/never-uploaded.txt')


@pytest.mark.integration
def test_signed_urls(storage: AssetStorage) -> None:
    """Test signed URLs target MinIO with the requested lifetimes.

    Args:
        storage: Storage backend under test.
    """
    upload_url = storage.create_signed_upload_url(
        _TEST_KEY,
        content_type='text/plain',
        content_length=len(_TEST_CONTENT),
        expires_in=300,
    )
    download_url = storage.create_signed_download_url(_TEST_KEY, 120)

    for url, lifetime in ((upload_url, '300'), (download_url, '120')):
        parsed = urlparse(url)
        assert parsed.path.endswith(_TEST_KEY)
        assert parse_qs(parsed.query)['X-Amz-Expires'] == [lifetime]


@pytest.mark.integration
def test_delete_object(s3_client: BaseClient, storage: AssetStorage) -> None:
    """Test deleting an object through the storage backend.

    Args:
        s3_client: boto3 S3 client.
        storage: Storage backend under test.
    """
    s3_client.put_object(
        Bucket=storage.bucket_name,
        Key=_TEST_KEY,
        Body=_TEST_CONTENT,
    )

    storage.delete(_TEST_KEY)

    with pytest.raises(ClientError) as exc_info:
        s3_client.head_object(Bucket=storage.bucket_name, Key=_TEST_KEY)

    assert exc_info.value.response['Error']['Code'] == '404'
