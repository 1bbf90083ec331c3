"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, and task routing.
"""

import os

from celery import Celery
from kombu import Queue


class CeleryConfig:
    """Celery configuration settings."""

    # Broker settings
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    # Task settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    task_acks_late = True
    worker_max_tasks_per_child = 100

    # Task routing
    task_routes = {
        "filevault.tasks.retry_pdf_thumbnails": {"queue": "thumbnail_queue"},
        "filevault.tasks.purge_trash": {"queue": "cleanup_queue"},
    }

    # Queue definitions
    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("thumbnail_queue", routing_key="thumbnail"),
        Queue("cleanup_queue", routing_key="cleanup"),
    )

    # Beat schedule for periodic tasks
    beat_schedule = {
        "retry-pdf-thumbnails": {
            "task": "filevault.tasks.retry_pdf_thumbnails",
            "schedule": float(os.getenv("THUMBNAIL_RETRY_INTERVAL_SECONDS", 900)),
        },
        "purge-trash": {
            "task": "filevault.tasks.purge_trash",
            "schedule": 3600.0,  # hourly
        },
    }

    # A retry batch polls each conversion for up to its own timeout
    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 1800))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 2100))

    result_expires = 3600

    worker_concurrency = int(os.getenv("CELERY_WORKER_CONCURRENCY", 2))


def make_celery(app):
    """
    Create Celery instance with Flask app context.

    Args:
        app: Flask application instance

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        app.import_name,
        backend=CeleryConfig.result_backend,
        broker=CeleryConfig.broker_url,
    )

    celery.config_from_object(CeleryConfig)

    # Ensure tasks run within Flask app context
    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    celery.flask_app = app
    return celery
