"""Exceptions for assets app.

Every error carries a machine-readable ``code`` which the API layer
exposes as ``extensions.code`` of the GraphQL error.
"""

from typing import ClassVar


class AssetError(Exception):
    """Base class for errors surfaced to API callers."""

    code: ClassVar[str] = 'INTERNAL'
    default_message: ClassVar[str] = 'Asset operation failed'

    def __init__(self, message: str | None = None) -> None:
        """Initialize AssetError.

        Args:
            message: Human readable message, defaults to class message.
        """
        super().__init__(message or self.default_message)


class UnauthenticatedError(AssetError):
    """Raised when the caller has no valid bearer credential."""

    code = 'UNAUTHENTICATED'
    default_message = 'Unauthenticated'


class ForbiddenError(AssetError):
    """Raised when the caller lacks the required relation to an asset."""

    code = 'FORBIDDEN'
    default_message = 'Forbidden'


class NotFoundError(AssetError):
    """Raised when an asset, ticket or user does not exist."""

    code = 'NOT_FOUND'
    default_message = 'Not found'


class VersionConflictError(AssetError):
    """Raised when the caller's observed version is stale."""

    code = 'VERSION_CONFLICT'
    default_message = 'Version conflict'

    def __init__(self, expected: int, actual: int | None = None) -> None:
        """Initialize VersionConflictError.

        Args:
            expected: Version supplied by the caller.
            actual: Stored version, when known.
        """
        self.expected = expected
        self.actual = actual
        if actual is None:
            super().__init__(
                f'Version conflict: version {expected} is no longer current',
            )
        else:
            super().__init__(
                f'Version conflict: expected {expected}, stored {actual}',
            )


class BadRequestError(AssetError):
    """Raised on validation failures and persistence errors."""

    code = 'BAD_REQUEST'
    default_message = 'Bad request'


class IntegrityCheckError(AssetError):
    """Raised when the stored object is missing or its hash mismatches."""

    code = 'INTEGRITY_ERROR'
    default_message = 'Integrity check failed'
