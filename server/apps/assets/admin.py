"""Django admin configuration for assets app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.assets.models import (
    Asset,
    AssetShare,
    AssetStatus,
    UploadTicket,
)

_STATUS_COLORS = {
    AssetStatus.UPLOADING: '#6c757d',
    AssetStatus.READY: '#28a745',
    AssetStatus.CORRUPT: '#dc3545',
}


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    return f'{size_bytes / (1024 * 1024):.1f} MB'


class AssetShareInline(admin.TabularInline):  # type: ignore[type-arg]
    """Shares shown on the asset page."""

    model = AssetShare
    extra = 0
    readonly_fields = ['created_at']


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin[Asset]):
    """Admin interface for Asset model."""

    list_display = [
        'filename',
        'owner',
        'size_display',
        'mime',
        'status_display',
        'version',
        'created_at',
    ]

    list_filter = [
        'status',
        'mime',
        'created_at',
    ]

    search_fields = [
        'filename',
        'storage_path',
        'sha256',
    ]

    # Version and status only change through the lifecycle operations
    readonly_fields = [
        'id',
        'storage_path',
        'size',
        'mime',
        'sha256',
        'status',
        'version',
        'created_at',
        'updated_at',
    ]

    inlines = [AssetShareInline]

    def size_display(self, obj: Asset) -> str:
        """Display asset size in human-readable format.

        Args:
            obj: Asset instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def status_display(self, obj: Asset) -> str:
        """Display colored status label.

        Args:
            obj: Asset instance.

        Returns:
            HTML formatted status.
        """
        return format_html(
            '<span style="color: {color}; font-weight: bold;">{status}</span>',
            color=_STATUS_COLORS.get(obj.status, '#000'),
            status=obj.get_status_display(),
        )
    status_display.short_description = 'Status'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Asset]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')


@admin.register(UploadTicket)
class UploadTicketAdmin(admin.ModelAdmin[UploadTicket]):
    """Admin interface for UploadTicket model."""

    list_display = ['asset', 'user', 'expires_at', 'used']
    list_filter = ['used', 'expires_at']
    readonly_fields = [
        'asset',
        'user',
        'nonce',
        'mime',
        'size',
        'storage_path',
        'expires_at',
        'used',
        'created_at',
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[UploadTicket]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('asset', 'user')


@admin.register(AssetShare)
class AssetShareAdmin(admin.ModelAdmin[AssetShare]):
    """Admin interface for AssetShare model."""

    list_display = ['asset', 'to_user', 'can_download', 'created_at']
    list_filter = ['can_download']
    search_fields = ['to_user__email', 'asset__filename']
