"""Signal handlers for assets app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.assets.infrastructure.storage import get_asset_storage
from server.apps.assets.models import Asset

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Asset)
def delete_object_from_storage(
    sender: type[Asset],
    instance: Asset,
    **kwargs: object,
) -> None:
    """Delete the stored object when an Asset record is deleted.

    Assets deleted while still ``uploading`` may have no object yet,
    which is not an error.

    Args:
        sender: The Asset model class.
        instance: The Asset instance being deleted.
        **kwargs: Additional signal arguments.
    """
    storage_path = instance.storage_path
    storage = get_asset_storage()

    try:
        if storage.exists(storage_path):
            storage.delete(storage_path)
        else:
            logger.debug(
                'No stored object for deleted asset %s: %s',
                instance.id,
                storage_path,
            )
    except Exception:
        # DB delete already succeeded; the object is left for a cleanup job
        logger.exception(
            'Failed to delete object from storage (orphaned): %s',
            storage_path,
        )
