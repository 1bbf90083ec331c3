"""
Sharing Domain

Public share links gated by permissions, password, expiry and download quota.
"""

from .entities import ShareLink
from .passwords import SharePasswordHasher
from .policy import AccessPolicyEvaluator
from .repositories import ShareLinkRepository
from .services import SharedFileAccess, ShareLinkManager
from .value_objects import (
    UNSET,
    AccessDecision,
    AccessOutcome,
    ShareDefaults,
    ShareLinkPatch,
    ShareToken,
)

__all__ = [
    "UNSET",
    "AccessDecision",
    "AccessOutcome",
    "AccessPolicyEvaluator",
    "ShareDefaults",
    "ShareLink",
    "ShareLinkManager",
    "ShareLinkPatch",
    "ShareLinkRepository",
    "SharePasswordHasher",
    "ShareToken",
    "SharedFileAccess",
]
