"""Management command to remove uploads that were never finalized."""

import logging
from datetime import timedelta
from typing import Any, Final, final, override

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.assets.models import Asset, AssetStatus

_DEFAULT_GRACE_MINUTES: Final = 60
_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Delete ``uploading`` assets whose ticket expired unused."""

    help = 'Clean up assets stuck in uploading after their ticket expired'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max assets to process (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--grace-minutes',
            type=int,
            default=_DEFAULT_GRACE_MINUTES,
            help=(
                'Minutes after ticket expiry before an upload is stale '
                f'(default: {_DEFAULT_GRACE_MINUTES})'
            ),
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        cutoff = timezone.now() - timedelta(minutes=options['grace_minutes'])

        self.stdout.write(
            f'Looking for uploads with tickets expired before {cutoff}',
        )

        stale_assets = Asset.objects.filter(
            status=AssetStatus.UPLOADING,
            upload_ticket__used=False,
            upload_ticket__expires_at__lte=cutoff,
        ).order_by('created_at')[:batch_size]

        count = 0
        failed = 0

        for asset in stale_assets:
            if dry_run:
                self.stdout.write(
                    f'Would delete: {asset.storage_path} '
                    f'(owner: {asset.owner_id}, created: {asset.created_at})',
                )
                count += 1
                continue

            try:
                asset.delete()
                count += 1
                logger.info(
                    'Removed stale upload: %s (ID: %s)',
                    asset.storage_path,
                    asset.id,
                )
            except Exception as exc:
                self.stderr.write(f'Failed to delete {asset.id}: {exc}')
                logger.exception('Failed to remove stale upload: %s', asset.id)
                failed += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would remove {count} stale uploads'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Removed {count} stale uploads, {failed} failed',
                ),
            )
