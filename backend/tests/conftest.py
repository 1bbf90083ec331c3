"""
Shared pytest fixtures and configuration for the FileVault backend test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory repositories, gateway and clock wired into real services
- A Flask app built around an injected dependency container
"""

import pytest
from hypothesis import HealthCheck, Phase, settings

from filevault.application.dependency_container import DependencyContainer
from filevault.application.event_publisher import EventPublisher
from filevault.application.file_service import FileService
from filevault.application.share_service import ShareService
from filevault.application.thumbnail_service import ThumbnailService
from filevault.domain.conversion import ConversionOrchestrator, ReadinessGate
from filevault.domain.events import DomainEvent
from filevault.domain.file_storage import FileManager
from filevault.domain.sharing import AccessPolicyEvaluator, ShareLinkManager, SharePasswordHasher
from tests.fixtures import (
    JWT_SECRET,
    FakeAssetGateway,
    FakeClock,
    MockBlobStore,
    MockFileRepository,
    MockShareLinkRepository,
    bearer,
    make_token,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Infrastructure Fakes
# =============================================================================

@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> FakeAssetGateway:
    return FakeAssetGateway()


@pytest.fixture
def blob_store() -> MockBlobStore:
    return MockBlobStore()


@pytest.fixture
def file_repository() -> MockFileRepository:
    return MockFileRepository()


@pytest.fixture
def share_repository() -> MockShareLinkRepository:
    return MockShareLinkRepository()


@pytest.fixture
def published_events():
    """List that receives every event sent through event_publisher."""
    return []


@pytest.fixture
def event_publisher(published_events) -> EventPublisher:
    publisher = EventPublisher()
    publisher.subscribe(DomainEvent, published_events.append)
    return publisher


# =============================================================================
# Domain Services
# =============================================================================

@pytest.fixture
def hasher() -> SharePasswordHasher:
    """Argon2 hasher with minimal cost so tests stay fast."""
    return SharePasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def evaluator(hasher) -> AccessPolicyEvaluator:
    return AccessPolicyEvaluator(hasher)


@pytest.fixture
def file_manager(file_repository, blob_store) -> FileManager:
    return FileManager(file_repository, blob_store)


@pytest.fixture
def share_manager(share_repository, file_repository, evaluator, hasher) -> ShareLinkManager:
    return ShareLinkManager(share_repository, file_repository, evaluator, hasher)


@pytest.fixture
def readiness_gate(gateway, fake_clock) -> ReadinessGate:
    return ReadinessGate(gateway, clock=fake_clock)


@pytest.fixture
def orchestrator(gateway, fake_clock) -> ConversionOrchestrator:
    return ConversionOrchestrator(gateway, poll_interval=2.0, timeout=60.0, clock=fake_clock)


# =============================================================================
# Application Services
# =============================================================================

@pytest.fixture
def thumbnail_service(gateway, readiness_gate, orchestrator, file_manager, event_publisher) -> ThumbnailService:
    return ThumbnailService(
        gateway,
        readiness_gate,
        orchestrator,
        file_manager,
        event_publisher=event_publisher,
        readiness_timeout=30.0,
        readiness_interval=1.0,
        preview_size=300,
    )


@pytest.fixture
def file_service(file_manager, thumbnail_service, event_publisher) -> FileService:
    return FileService(file_manager, thumbnail_service, event_publisher)


@pytest.fixture
def share_service(share_manager, event_publisher) -> ShareService:
    return ShareService(share_manager, "https://app.test", event_publisher)


@pytest.fixture
def container(file_service, share_service, thumbnail_service, event_publisher) -> DependencyContainer:
    container = DependencyContainer()
    container.register_singleton(EventPublisher, event_publisher)
    container.register_singleton(ThumbnailService, thumbnail_service)
    container.register_singleton(FileService, file_service)
    container.register_singleton(ShareService, share_service)
    return container


# =============================================================================
# Flask Fixtures
# =============================================================================

@pytest.fixture
def app(container):
    from app_factory import create_app
    from filevault.config.app_config import AppConfig

    config = AppConfig()
    config.jwt_secret = JWT_SECRET
    config.jwt_algorithm = "HS256"

    app = create_app(config, container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return bearer(make_token("user-1"))


@pytest.fixture
def other_auth_headers():
    return bearer(make_token("user-2"))


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
