"""
Test fixtures package.

Provides factory functions and in-memory implementations for testing.
"""

from .auth import JWT_SECRET, bearer, make_token
from .domain_fixtures import create_share_link, create_stored_file, create_trashed_file
from .mock_repositories import (
    FakeAssetGateway,
    FakeClock,
    MockBlobStore,
    MockFileRepository,
    MockShareLinkRepository,
)

__all__ = [
    "JWT_SECRET",
    "FakeAssetGateway",
    "FakeClock",
    "MockBlobStore",
    "MockFileRepository",
    "MockShareLinkRepository",
    "bearer",
    "create_share_link",
    "create_stored_file",
    "create_trashed_file",
    "make_token",
]
