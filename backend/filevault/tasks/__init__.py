"""
Celery Tasks

Periodic maintenance tasks run by the Celery worker and beat scheduler.
"""

from .cleanup_task import purge_trash
from .thumbnail_task import retry_pdf_thumbnails

__all__ = ['purge_trash', 'retry_pdf_thumbnails']
