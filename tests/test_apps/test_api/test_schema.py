"""Tests for the GraphQL API."""

import hashlib

import pytest

from server.apps.assets.models import Asset, AssetShare, AssetStatus

_CREATE = """
mutation Create($filename: String!, $mime: String!, $size: Int!) {
  createUploadUrl(filename: $filename, mime: $mime, size: $size) {
    assetId
    storagePath
    uploadUrl
    expiresAt
    nonce
  }
}
"""

_FINALIZE = """
mutation Finalize($assetId: UUID!, $sha: String!, $version: Int!) {
  finalizeUpload(assetId: $assetId, clientSha256: $sha, version: $version) {
    id
    status
    version
    sha256
  }
}
"""

_MY_ASSETS = """
query MyAssets($after: String, $first: Int, $q: String) {
  myAssets(after: $after, first: $first, q: $q) {
    edges { cursor node { id filename status version } }
    pageInfo { endCursor hasNextPage }
  }
}
"""

_SHARE = """
mutation Share($assetId: UUID!, $email: String!, $version: Int!) {
  shareAsset(
    assetId: $assetId, toEmail: $email, canDownload: true, version: $version
  ) {
    id
    version
  }
}
"""

_REVOKE = """
mutation Revoke($assetId: UUID!, $email: String!, $version: Int!) {
  revokeShare(assetId: $assetId, toEmail: $email, version: $version) {
    version
  }
}
"""

_DELETE = """
mutation Delete($assetId: UUID!, $version: Int!) {
  deleteAsset(assetId: $assetId, version: $version)
}
"""

_DOWNLOAD = """
mutation Download($assetId: UUID!) {
  getDownloadUrl(assetId: $assetId)
}
"""

_ASSET = """
query Asset($assetId: UUID!) {
  asset(assetId: $assetId) { id filename mime size status version }
}
"""


def _codes(body: dict) -> list[str]:
    return [
        error.get('extensions', {}).get('code')
        for error in body.get('errors', [])
    ]


@pytest.fixture
def ready_asset(user, mock_s3):
    """Ready asset owned by ``user``.

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
        status=AssetStatus.READY,
        version=2,
    )


@pytest.mark.django_db
def test_ping_without_credentials(gql):
    """Test the health check needs no caller."""
    assert gql('{ ping }') == {'data': {'ping': 'ok'}}


@pytest.mark.django_db
@pytest.mark.parametrize('document', [
    '{ myAssets { pageInfo { hasNextPage } } }',
    'mutation { createUploadUrl(filename: "a", mime: "image/png", size: 1)'
    ' { assetId } }',
])
def test_unauthenticated_calls_are_rejected(gql, mock_s3, document):
    """Test anonymous callers get UNAUTHENTICATED and nothing is stored."""
    body = gql(document)

    assert _codes(body) == ['UNAUTHENTICATED']
    assert Asset.objects.count() == 0


@pytest.mark.django_db
def test_invalid_token_is_unauthenticated(client, mock_s3):
    """Test a garbage bearer token resolves to no caller."""
    response = client.post(
        '/graphql/',
        data='{"query": "{ myAssets { edges { cursor } } }"}',
        content_type='application/json',
        HTTP_AUTHORIZATION='Bearer not-a-jwt',
    )

    assert _codes(response.json()) == ['UNAUTHENTICATED']


@pytest.mark.django_db
def test_upload_and_finalize_flow(gql, user, mock_s3):
    """Test the full create, upload, finalize round trip."""
    content = b'%PDF-1.7 fake document'
    digest = hashlib.sha256(content).hexdigest()

    created = gql(
        _CREATE,
        {'filename': 'doc.pdf', 'mime': 'application/pdf', 'size': 22},
        user=user,
    )
    assert 'errors' not in created
    payload = created['data']['createUploadUrl']
    assert payload['storagePath'].startswith(f'private/{user.pk}/')
    assert payload['uploadUrl'].startswith('http')
    assert len(payload['nonce']) == 64

    # Client PUTs the bytes to the signed URL
    mock_s3.Object('assets', payload['storagePath']).put(Body=content)

    finalized = gql(
        _FINALIZE,
        {'assetId': payload['assetId'], 'sha': digest, 'version': 1},
        user=user,
    )

    assert 'errors' not in finalized
    assert finalized['data']['finalizeUpload'] == {
        'id': payload['assetId'],
        'status': 'ready',
        'version': 2,
        'sha256': digest,
    }


@pytest.mark.django_db
def test_create_upload_url_bad_request(gql, user, mock_s3):
    """Test disallowed MIME types surface BAD_REQUEST."""
    body = gql(
        _CREATE,
        {'filename': 'notes.txt', 'mime': 'text/plain', 'size': 5},
        user=user,
    )

    assert _codes(body) == ['BAD_REQUEST']
    assert body['data']['createUploadUrl'] is None


@pytest.mark.django_db
def test_finalize_hash_mismatch_is_integrity_error(gql, user, mock_s3):
    """Test a mismatching hash surfaces INTEGRITY_ERROR and is persisted."""
    created = gql(
        _CREATE,
        {'filename': 'a.png', 'mime': 'image/png', 'size': 3},
        user=user,
    )
    payload = created['data']['createUploadUrl']
    mock_s3.Object('assets', payload['storagePath']).put(Body=b'abc')

    body = gql(
        _FINALIZE,
        {'assetId': payload['assetId'], 'sha': '0' * 64, 'version': 1},
        user=user,
    )

    assert _codes(body) == ['INTEGRITY_ERROR']
    asset = Asset.objects.get(id=payload['assetId'])
    assert asset.status == AssetStatus.CORRUPT
    assert asset.version == 2


@pytest.mark.django_db
def test_my_assets_pagination(gql, user, mock_s3):
    """Test edges, cursors and page info."""
    for index in range(3):
        gql(
            _CREATE,
            {'filename': f'pic-{index}.png', 'mime': 'image/png', 'size': 1},
            user=user,
        )

    first = gql(_MY_ASSETS, {'first': 2}, user=user)['data']['myAssets']
    assert len(first['edges']) == 2
    assert first['pageInfo']['hasNextPage']
    assert first['pageInfo']['endCursor'] == first['edges'][-1]['cursor']
    assert first['edges'][0]['node']['status'] == 'uploading'

    filtered = gql(_MY_ASSETS, {'q': 'PIC-1'}, user=user)['data']['myAssets']
    assert [edge['node']['filename'] for edge in filtered['edges']] == [
        'pic-1.png',
    ]


@pytest.mark.django_db
def test_my_assets_invalid_cursor(gql, user):
    """Test an invalid cursor surfaces BAD_REQUEST."""
    body = gql(_MY_ASSETS, {'after': 'garbage'}, user=user)

    assert _codes(body) == ['BAD_REQUEST']


@pytest.mark.django_db
def test_asset_query_visibility(gql, user, other_user, ready_asset):
    """Test a single asset is readable by owner and grantees only."""
    variables = {'assetId': str(ready_asset.id)}

    owned = gql(_ASSET, variables, user=user)
    assert owned['data']['asset']['filename'] == 'report.pdf'
    assert owned['data']['asset']['size'] == 2048

    assert _codes(gql(_ASSET, variables, user=other_user)) == ['FORBIDDEN']

    AssetShare.objects.create(asset=ready_asset, to_user=other_user)
    shared = gql(_ASSET, variables, user=other_user)
    assert shared['data']['asset']['id'] == str(ready_asset.id)


@pytest.mark.django_db
def test_share_and_revoke(gql, user, other_user, ready_asset):
    """Test share and revoke each bump the version."""
    asset_id = str(ready_asset.id)

    shared = gql(
        _SHARE,
        {'assetId': asset_id, 'email': 'other@example.com', 'version': 2},
        user=user,
    )
    assert shared['data']['shareAsset']['version'] == 3
    assert AssetShare.objects.filter(to_user=other_user).exists()

    revoked = gql(
        _REVOKE,
        {'assetId': asset_id, 'email': 'other@example.com', 'version': 3},
        user=user,
    )
    assert revoked['data']['revokeShare']['version'] == 4
    assert not AssetShare.objects.exists()


@pytest.mark.django_db
def test_share_with_stale_version(gql, user, other_user, ready_asset):
    """Test stale versions surface VERSION_CONFLICT."""
    body = gql(
        _SHARE,
        {
            'assetId': str(ready_asset.id),
            'email': 'other@example.com',
            'version': 1,
        },
        user=user,
    )

    assert _codes(body) == ['VERSION_CONFLICT']


@pytest.mark.django_db
def test_share_with_unknown_user(gql, user, ready_asset):
    """Test unknown grantees surface NOT_FOUND."""
    body = gql(
        _SHARE,
        {
            'assetId': str(ready_asset.id),
            'email': 'ghost@example.com',
            'version': 2,
        },
        user=user,
    )

    assert _codes(body) == ['NOT_FOUND']


@pytest.mark.django_db
def test_delete_asset(gql, user, ready_asset):
    """Test delete returns true and removes the row."""
    body = gql(
        _DELETE,
        {'assetId': str(ready_asset.id), 'version': 2},
        user=user,
    )

    assert body == {'data': {'deleteAsset': True}}
    assert not Asset.objects.exists()


@pytest.mark.django_db
def test_delete_unknown_asset(gql, user):
    """Test deleting an unknown asset surfaces NOT_FOUND."""
    body = gql(
        _DELETE,
        {'assetId': '00000000-0000-0000-0000-000000000000', 'version': 1},
        user=user,
    )

    assert _codes(body) == ['NOT_FOUND']


@pytest.mark.django_db
def test_get_download_url(gql, user, other_user, ready_asset):
    """Test owners get a signed URL and others are forbidden."""
    variables = {'assetId': str(ready_asset.id)}

    owned = gql(_DOWNLOAD, variables, user=user)
    assert 'X-Amz-Signature' in owned['data']['getDownloadUrl']

    assert _codes(gql(_DOWNLOAD, variables, user=other_user)) == ['FORBIDDEN']
