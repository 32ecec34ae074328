"""Translation of asset errors into GraphQL errors."""

import functools
import logging
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from graphql import GraphQLError

from server.apps.assets.exceptions import AssetError

_P = ParamSpec('_P')
_R = TypeVar('_R')

logger = logging.getLogger(__name__)


def to_graphql_error(error: AssetError) -> GraphQLError:
    """Convert an asset error into a GraphQL error.

    Args:
        error: Domain error raised by business logic.

    Returns:
        GraphQLError carrying the machine-readable code in extensions.
    """
    return GraphQLError(str(error), extensions={'code': error.code})


def graphql_errors(resolver: Callable[_P, _R]) -> Callable[_P, _R]:
    """Decorate a resolver so asset errors reach clients with their code.

    Args:
        resolver: Resolver or mutate function.

    Returns:
        Wrapped resolver.
    """
    @functools.wraps(resolver)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        try:
            return resolver(*args, **kwargs)
        except AssetError as error:
            logger.info('%s: %s', error.code, error)
            raise to_graphql_error(error) from error

    return wrapper
