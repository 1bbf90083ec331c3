"""
Sharing Value Objects

Immutable value objects for share tokens, share settings and access
decisions.
"""

import secrets
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..errors import InvalidShareRequestError


TOKEN_BYTES = 16
MAX_EXPIRY_DAYS = 365


class InvalidShareTokenError(ValueError):
    """Raised when a share token is malformed."""
    pass


@dataclass(frozen=True)
class ShareToken:
    """
    Value object for a public share token.

    Tokens are 16 random bytes rendered as 32 lowercase hex characters.
    """
    value: str

    def __post_init__(self):
        if not self._is_valid():
            raise InvalidShareTokenError(
                f"Invalid share token: expected {TOKEN_BYTES * 2} hex characters"
            )

    def _is_valid(self) -> bool:
        if not self.value or not isinstance(self.value, str):
            return False
        if len(self.value) != TOKEN_BYTES * 2:
            return False
        return all(c in "0123456789abcdef" for c in self.value)

    @classmethod
    def generate(cls) -> "ShareToken":
        return cls(secrets.token_hex(TOKEN_BYTES))

    @classmethod
    def is_well_formed(cls, value: str) -> bool:
        try:
            cls(value)
        except InvalidShareTokenError:
            return False
        return True

    def __str__(self) -> str:
        return self.value


class AccessOutcome(Enum):
    """Result of evaluating a share link that passed every blocking gate."""
    GRANTED = "granted"
    PASSWORD_REQUIRED = "password_required"


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of an access evaluation.

    can_view and can_download are only meaningful when the outcome is
    GRANTED; a PASSWORD_REQUIRED decision never exposes content.
    """
    outcome: AccessOutcome
    can_view: bool = False
    can_download: bool = False

    @classmethod
    def granted(cls, can_view: bool, can_download: bool) -> "AccessDecision":
        return cls(AccessOutcome.GRANTED, can_view, can_download)

    @classmethod
    def password_required(cls) -> "AccessDecision":
        return cls(AccessOutcome.PASSWORD_REQUIRED)

    @property
    def is_granted(self) -> bool:
        return self.outcome == AccessOutcome.GRANTED


def _validate_expires_in_days(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidShareRequestError("expiresInDays must be an integer")
    if value < 0 or value > MAX_EXPIRY_DAYS:
        raise InvalidShareRequestError(
            f"expiresInDays must be between 0 and {MAX_EXPIRY_DAYS}"
        )
    return value


def _validate_max_downloads(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidShareRequestError("maxDownloads must be a positive integer")
    return value


def _validate_password(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidShareRequestError("password must be a string")
    return value or None


def expiry_from_days(days: Optional[int], now: Optional[datetime] = None) -> Optional[datetime]:
    """Expiry timestamp for a lifetime in days; 0 or None means no expiry."""
    if not days:
        return None
    return (now or datetime.utcnow()) + timedelta(days=days)


@dataclass(frozen=True)
class ShareDefaults:
    """Settings applied when a new share link is minted."""
    can_view: bool = True
    can_download: bool = True
    password: Optional[str] = None
    expires_in_days: Optional[int] = None
    max_downloads: Optional[int] = None

    def __post_init__(self):
        for name in ("can_view", "can_download"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidShareRequestError(f"{name} must be a boolean")
        _validate_expires_in_days(self.expires_in_days)
        _validate_max_downloads(self.max_downloads)
        _validate_password(self.password)


class _Unset:
    """Marker for patch fields that were not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class ShareLinkPatch:
    """
    Partial update of share link settings.

    Fields left as UNSET keep their current value. remove_password wins
    over a supplied password. expires_in_days of 0 or None clears expiry.
    """
    can_view: Any = UNSET
    can_download: Any = UNSET
    password: Any = UNSET
    expires_in_days: Any = UNSET
    max_downloads: Any = UNSET
    remove_password: bool = False

    def __post_init__(self):
        for name in ("can_view", "can_download"):
            value = getattr(self, name)
            if value is not UNSET and not isinstance(value, bool):
                raise InvalidShareRequestError(f"{name} must be a boolean")
        if self.expires_in_days is not UNSET:
            _validate_expires_in_days(self.expires_in_days)
        if self.max_downloads is not UNSET:
            _validate_max_downloads(self.max_downloads)
        if self.password is not UNSET:
            _validate_password(self.password)

    @classmethod
    def from_request(cls, data: Dict[str, Any]) -> "ShareLinkPatch":
        """Build a patch from a camelCase request body; absent keys stay UNSET."""
        mapping = {
            "canView": "can_view",
            "canDownload": "can_download",
            "password": "password",
            "expiresInDays": "expires_in_days",
            "maxDownloads": "max_downloads",
        }
        kwargs = {attr: data[key] for key, attr in mapping.items() if key in data}
        kwargs["remove_password"] = bool(data.get("removePassword", False))
        return cls(**kwargs)

    def changed_fields(self) -> Tuple[str, ...]:
        changed = [
            f.name for f in fields(self)
            if f.name != "remove_password" and getattr(self, f.name) is not UNSET
        ]
        if self.remove_password:
            changed.append("remove_password")
        return tuple(changed)
