"""
Share Access Policy

Evaluates the access gates of a share link in a fixed order.
"""

from datetime import datetime
from typing import Optional

from ..errors import (
    PasswordIncorrectError,
    QuotaExceededError,
    ShareExpiredError,
    ShareNotFoundError,
)
from .entities import ShareLink
from .passwords import SharePasswordHasher
from .value_objects import AccessDecision


class AccessPolicyEvaluator:
    """
    Checks a share link against its gates; the first failing gate wins.

    1. missing or inactive -> ShareNotFoundError
    2. expired -> ShareExpiredError
    3. download quota used up -> QuotaExceededError
    4. password set and none supplied -> PASSWORD_REQUIRED decision
       password set and wrong -> PasswordIncorrectError
    5. otherwise a GRANTED decision carrying the link's permissions
    """

    def __init__(self, hasher: SharePasswordHasher):
        self.hasher = hasher

    def evaluate(
        self,
        link: Optional[ShareLink],
        supplied_password: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AccessDecision:
        """
        Evaluate access to a share link.

        Args:
            link: Link to evaluate, None when the token matched nothing
            supplied_password: Password given by the visitor, if any
            now: Evaluation time, defaults to the current UTC time

        Returns:
            AccessDecision with outcome GRANTED or PASSWORD_REQUIRED

        Raises:
            ShareNotFoundError, ShareExpiredError, QuotaExceededError,
            PasswordIncorrectError
        """
        if link is None or not link.is_active:
            raise ShareNotFoundError("Share link not found")

        if link.is_expired(now or datetime.utcnow()):
            raise ShareExpiredError(f"Share link {link.id} expired at {link.expires_at.isoformat()}")

        if link.is_quota_exhausted():
            raise QuotaExceededError(
                f"Share link {link.id} reached its limit of {link.max_downloads} downloads"
            )

        if link.is_password_protected:
            if supplied_password is None or supplied_password == "":
                return AccessDecision.password_required()
            if not self.hasher.verify(link.password_hash, supplied_password):
                raise PasswordIncorrectError(f"Incorrect password for share link {link.id}")

        return AccessDecision.granted(link.can_view, link.can_download)
