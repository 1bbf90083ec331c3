"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from filevault.api.v1 import create_api_blueprint
from filevault.application.dependency_container import DependencyContainer
from filevault.application.event_publisher import EventPublisher
from filevault.application.file_service import FileService
from filevault.application.share_service import ShareService
from filevault.application.thumbnail_service import ThumbnailService
from filevault.config.app_config import AppConfig
from filevault.config.celery_config import make_celery
from filevault.config.redis_config import init_redis
from filevault.config.uploadcare_config import ConversionConfig, UploadcareConfig
from filevault.domain.conversion import ConversionOrchestrator, ReadinessGate
from filevault.domain.conversion.gateway import IAssetGateway
from filevault.domain.file_storage import FileManager
from filevault.domain.file_storage.blob_store import IBlobStore
from filevault.domain.file_storage.repositories import FileRepository
from filevault.domain.sharing import AccessPolicyEvaluator, ShareLinkManager, SharePasswordHasher
from filevault.domain.sharing.repositories import ShareLinkRepository
from filevault.infrastructure.redis_file_repository import RedisFileRepository
from filevault.infrastructure.redis_repository import RedisConnectionManager, RedisRepository
from filevault.infrastructure.redis_share_link_repository import RedisShareLinkRepository
from filevault.infrastructure.uploadcare_gateway import (
    UploadcareAssetGateway,
    UploadcareBlobStore,
    UploadcareClient,
)

logger = logging.getLogger(__name__)

REDIS_KEY_PREFIX = "filevault"


def create_app(
    config: Optional[AppConfig] = None,
    container: Optional[DependencyContainer] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Prebuilt dependency container. When given, Redis and
            Celery are not initialized and services come from the container.

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.config.update(
        JWT_SECRET=config.jwt_secret,
        JWT_ALGORITHM=config.jwt_algorithm,
        TRASH_RETENTION_DAYS=config.trash_retention_days,
        # Room for multipart framing; the exact limit is enforced on upload
        MAX_CONTENT_LENGTH=config.max_upload_size + 64 * 1024,
    )

    CORS(
        app,
        resources={
            r"/*": {
                "origins": config.cors_origins,
                "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "expose_headers": ["Content-Type", "Location"],
                "supports_credentials": True,
                "max_age": 3600,
            }
        },
    )

    if container is None:
        redis_manager = _initialize_infrastructure(app)
        container = _initialize_services(config, redis_manager)
    else:
        app.redis_manager = container.try_resolve(RedisConnectionManager)
        app.celery = None

    app.container = container

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask) -> RedisConnectionManager:
    """
    Initialize infrastructure components (Redis, Celery).

    Neither connects eagerly, so the app starts while Redis is down and
    reports it through /health.

    Args:
        app: Flask application

    Returns:
        Redis connection manager owned by this app
    """
    redis_manager = init_redis()
    app.redis_manager = redis_manager
    logger.info("Redis connection pool created")

    app.celery = make_celery(app)
    logger.info("Celery initialized")

    return redis_manager


def _initialize_services(config: AppConfig, redis_manager: RedisConnectionManager) -> DependencyContainer:
    """
    Build the dependency container.

    Registration order:
    1. Infrastructure adapters (Redis repositories, Uploadcare adapters)
    2. Domain services
    3. Application services and event handlers

    Args:
        config: Application configuration
        redis_manager: Redis connection manager

    Returns:
        Populated DependencyContainer
    """
    container = DependencyContainer()
    conversion_config = ConversionConfig()
    uploadcare_config = UploadcareConfig()
    if not uploadcare_config.is_configured:
        logger.warning("Uploadcare credentials are not set; uploads and conversions will fail")

    # Infrastructure
    redis_repo = RedisRepository(redis_manager.client, REDIS_KEY_PREFIX)
    file_repository = RedisFileRepository(redis_repo)
    share_repository = RedisShareLinkRepository(redis_repo)
    client = UploadcareClient(uploadcare_config)
    gateway = UploadcareAssetGateway(client)
    blob_store = UploadcareBlobStore(client)

    container.register_singleton(RedisConnectionManager, redis_manager)
    container.register_singleton(RedisRepository, redis_repo)
    container.register_singleton(FileRepository, file_repository)
    container.register_singleton(ShareLinkRepository, share_repository)
    container.register_singleton(IAssetGateway, gateway)
    container.register_singleton(IBlobStore, blob_store)

    # Domain services
    file_manager = FileManager(file_repository, blob_store, max_file_size=config.max_upload_size)
    readiness_gate = ReadinessGate(gateway)
    orchestrator = ConversionOrchestrator(
        gateway,
        poll_interval=conversion_config.conversion_interval,
        timeout=conversion_config.conversion_timeout,
    )
    hasher = SharePasswordHasher()
    evaluator = AccessPolicyEvaluator(hasher)
    share_manager = ShareLinkManager(share_repository, file_repository, evaluator, hasher)

    container.register_singleton(FileManager, file_manager)
    container.register_singleton(ReadinessGate, readiness_gate)
    container.register_singleton(ConversionOrchestrator, orchestrator)
    container.register_singleton(SharePasswordHasher, hasher)
    container.register_singleton(AccessPolicyEvaluator, evaluator)
    container.register_singleton(ShareLinkManager, share_manager)

    # Application services
    event_publisher = EventPublisher()
    container.setup_event_handlers(event_publisher)

    thumbnail_service = ThumbnailService(
        gateway,
        readiness_gate,
        orchestrator,
        file_manager,
        event_publisher=event_publisher,
        readiness_timeout=conversion_config.readiness_timeout,
        readiness_interval=conversion_config.readiness_interval,
        preview_size=conversion_config.preview_size,
    )
    file_service = FileService(file_manager, thumbnail_service, event_publisher)
    share_service = ShareService(share_manager, config.frontend_url, event_publisher)

    container.register_singleton(EventPublisher, event_publisher)
    container.register_singleton(ThumbnailService, thumbnail_service)
    container.register_singleton(FileService, file_service)
    container.register_singleton(ShareService, share_service)

    logger.info(f"Application services initialized: {container.registered_count()} registrations")
    return container


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    app.register_blueprint(create_api_blueprint(config.api_version))

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
    }

    redis_manager = getattr(app, "redis_manager", None)
    if redis_manager is None:
        health_status["redis"] = "not_configured"
    elif redis_manager.health_check():
        health_status["redis"] = "connected"
    else:
        health_status["redis"] = "disconnected"
        health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
