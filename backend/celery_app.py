"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.

Run with:
    celery -A celery_app.celery_app worker -Q default,thumbnail_queue,cleanup_queue
    celery -A celery_app.celery_app beat
"""

from app_factory import create_app

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Get Celery instance from Flask app
celery_app = flask_app.celery

# Task modules import `celery_app` from here, so they are listed by name
# and imported by the worker once this module has finished loading.
celery_app.conf.imports = (
    "filevault.tasks.thumbnail_task",
    "filevault.tasks.cleanup_task",
)
