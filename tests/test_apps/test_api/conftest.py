"""Shared fixtures for GraphQL API tests."""

import json

import boto3
import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from jose import jwt
from moto import mock_aws

User = get_user_model()


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
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with the assets bucket.

    Yields:
        boto3 S3 resource with assets bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='assets')

        yield conn


def _make_token(user) -> str:
    """Sign a bearer token whose subject is the user's pk."""
    return jwt.encode(
        {'sub': str(user.pk)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


@pytest.fixture
def gql(client):
    """Execute GraphQL documents against the endpoint.

    Returns:
        Callable taking (query, variables=None, user=None) and returning
        the decoded response body.
    """
    def _execute(query: str, variables=None, user=None) -> dict:
        headers = {}
        if user is not None:
            headers['HTTP_AUTHORIZATION'] = f'Bearer {_make_token(user)}'

        response = client.post(
            '/graphql/',
            data=json.dumps({'query': query, 'variables': variables or {}}),
            content_type='application/json',
            **headers,
        )
        assert response.status_code == 200, response.content
        return response.json()

    return _execute
