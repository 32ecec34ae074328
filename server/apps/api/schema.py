"""GraphQL schema for the asset lifecycle API."""

from typing import Any
from uuid import UUID

import graphene
from graphene_django import DjangoObjectType

from server.apps.api.errors import graphql_errors
from server.apps.api.views import CALLER_ATTRIBUTE
from server.apps.assets.logic import (
    asset_operations,
    share_operations,
    upload_operations,
)
from server.apps.assets.logic.guards import require_user
from server.apps.assets.logic.upload_operations import UploadGrant
from server.apps.assets.models import Asset


def _caller(info: graphene.ResolveInfo) -> Any:
    """Return the authenticated caller or raise UnauthenticatedError."""
    return require_user(getattr(info.context, CALLER_ATTRIBUTE, None))


class AssetType(DjangoObjectType):
    """Asset as exposed to API clients."""

    class Meta:
        model = Asset
        name = 'Asset'
        fields = (
            'id',
            'filename',
            'mime',
            'size',
            'sha256',
            'status',
            'version',
            'created_at',
            'updated_at',
        )
        convert_choices_to_enum = False


class AssetEdge(graphene.ObjectType):
    """Asset with its pagination cursor."""

    cursor = graphene.String(required=True)
    node = graphene.Field(AssetType, required=True)


class PageInfo(graphene.ObjectType):
    """Cursor of the last returned row and whether more rows follow."""

    end_cursor = graphene.String()
    has_next_page = graphene.Boolean(required=True)


class AssetConnection(graphene.ObjectType):
    """One page of ``myAssets``."""

    edges = graphene.List(graphene.NonNull(AssetEdge), required=True)
    page_info = graphene.Field(PageInfo, required=True)


class UploadUrlPayload(graphene.ObjectType):
    """Result of ``createUploadUrl``."""

    asset_id = graphene.UUID(required=True)
    storage_path = graphene.String(required=True)
    upload_url = graphene.String(required=True)
    expires_at = graphene.DateTime(required=True)
    nonce = graphene.String(required=True)


class Query(graphene.ObjectType):
    ping = graphene.String()
    my_assets = graphene.Field(
        AssetConnection,
        required=True,
        after=graphene.String(),
        first=graphene.Int(),
        q=graphene.String(),
    )
    asset = graphene.Field(
        AssetType,
        asset_id=graphene.UUID(required=True),
    )

    @staticmethod
    def resolve_ping(root: None, info: graphene.ResolveInfo) -> str:
        return 'ok'

    @staticmethod
    @graphql_errors
    def resolve_my_assets(
        root: None,
        info: graphene.ResolveInfo,
        after: str | None = None,
        first: int | None = None,
        q: str | None = None,
    ) -> dict[str, Any]:
        page = asset_operations.list_assets(
            _caller(info),
            after=after,
            first=first,
            query=q,
        )
        return {
            'edges': [
                {
                    'cursor': asset_operations.encode_cursor(asset),
                    'node': asset,
                }
                for asset in page.assets
            ],
            'page_info': {
                'end_cursor': page.end_cursor,
                'has_next_page': page.has_next_page,
            },
        }

    @staticmethod
    @graphql_errors
    def resolve_asset(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
    ) -> Asset:
        return asset_operations.get_asset(_caller(info), asset_id)


class CreateUploadUrl(graphene.Mutation):
    """Register a new asset and get a signed URL to upload its bytes."""

    class Arguments:
        filename = graphene.String(required=True)
        mime = graphene.String(required=True)
        size = graphene.Int(required=True)

    Output = UploadUrlPayload

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        filename: str,
        mime: str,
        size: int,
    ) -> UploadGrant:
        return upload_operations.create_upload_url(
            _caller(info),
            filename=filename,
            mime=mime,
            size=size,
        )


class FinalizeUpload(graphene.Mutation):
    """Verify the uploaded bytes against the client's SHA256."""

    class Arguments:
        asset_id = graphene.UUID(required=True)
        client_sha256 = graphene.String(required=True)
        version = graphene.Int(required=True)

    Output = AssetType

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
        client_sha256: str,
        version: int,
    ) -> Asset:
        return upload_operations.finalize_upload(
            _caller(info),
            asset_id,
            client_sha256=client_sha256,
            version=version,
        )


class ShareAsset(graphene.Mutation):
    """Grant another user access to an owned asset."""

    class Arguments:
        asset_id = graphene.UUID(required=True)
        to_email = graphene.String(required=True)
        can_download = graphene.Boolean(required=True)
        version = graphene.Int(required=True)

    Output = AssetType

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
        to_email: str,
        can_download: bool,
        version: int,
    ) -> Asset:
        return share_operations.share_asset(
            _caller(info),
            asset_id,
            to_email=to_email,
            version=version,
            can_download=can_download,
        )


class RevokeShare(graphene.Mutation):
    """Remove another user's access to an owned asset."""

    class Arguments:
        asset_id = graphene.UUID(required=True)
        to_email = graphene.String(required=True)
        version = graphene.Int(required=True)

    Output = AssetType

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
        to_email: str,
        version: int,
    ) -> Asset:
        return share_operations.revoke_share(
            _caller(info),
            asset_id,
            to_email=to_email,
            version=version,
        )


class DeleteAsset(graphene.Mutation):
    """Hard-delete an owned asset and its stored object."""

    class Arguments:
        asset_id = graphene.UUID(required=True)
        version = graphene.Int(required=True)

    Output = graphene.Boolean

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
        version: int,
    ) -> bool:
        return asset_operations.delete_asset(
            _caller(info),
            asset_id,
            version=version,
        )


class GetDownloadUrl(graphene.Mutation):
    """Issue a short-lived signed download URL."""

    class Arguments:
        asset_id = graphene.UUID(required=True)

    Output = graphene.String

    @staticmethod
    @graphql_errors
    def mutate(
        root: None,
        info: graphene.ResolveInfo,
        asset_id: UUID,
    ) -> str:
        return asset_operations.get_download_url(_caller(info), asset_id)


class Mutation(graphene.ObjectType):
    create_upload_url = CreateUploadUrl.Field()
    finalize_upload = FinalizeUpload.Field()
    share_asset = ShareAsset.Field()
    revoke_share = RevokeShare.Field()
    delete_asset = DeleteAsset.Field()
    get_download_url = GetDownloadUrl.Field()


schema = graphene.Schema(query=Query, mutation=Mutation)
