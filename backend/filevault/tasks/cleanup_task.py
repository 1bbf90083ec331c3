"""
Cleanup Task

Celery beat task that permanently deletes files left in the trash longer
than the retention period.
"""

import logging
from typing import Optional

from celery_app import celery_app
from flask import current_app

from ..application.file_service import FileService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="filevault.tasks.purge_trash")
def purge_trash(self, retention_days: Optional[int] = None):
    """
    Remove trashed files past retention along with their stored content.

    Args:
        retention_days: Days a file stays in the trash, defaults to
            TRASH_RETENTION_DAYS

    Returns:
        dict: Purge statistics
    """
    if retention_days is None:
        retention_days = current_app.config.get("TRASH_RETENTION_DAYS", 30)

    logger.info(f"Purging files trashed more than {retention_days} days ago")
    file_service = current_app.container.resolve(FileService)
    purged = file_service.purge_trash(retention_days)

    logger.info(f"Trash purge completed - Files removed: {purged}")
    return {"files_purged": purged, "retention_days": retention_days}
