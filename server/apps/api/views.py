"""GraphQL endpoint resolving the caller from a bearer token."""

import logging
from typing import final, override

from django.http import HttpRequest
from graphene_django.views import GraphQLView

from server.apps.assets.infrastructure.identity import resolve_bearer_user

logger = logging.getLogger(__name__)

# Attribute holding the resolved caller on the request
CALLER_ATTRIBUTE = 'asset_caller'


@final
class AssetGraphQLView(GraphQLView):
    """GraphQL view with bearer-token authentication.

    The caller (or None) is attached to the request, which graphene
    passes to resolvers as ``info.context``.
    """

    @override
    def get_context(self, request: HttpRequest) -> HttpRequest:
        """Resolve the caller and build the resolver context.

        Args:
            request: Incoming HTTP request.

        Returns:
            The request, carrying the resolved caller.
        """
        caller = resolve_bearer_user(request.headers.get('Authorization'))
        setattr(request, CALLER_ATTRIBUTE, caller)
        if caller is not None:
            logger.debug('GraphQL request from user %s', caller.pk)
        return request
