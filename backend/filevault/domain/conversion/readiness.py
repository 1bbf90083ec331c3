"""
Readiness Gate

Waits for a freshly stored asset to become servable before conversion is
attempted.
"""

import logging
import threading
from typing import Optional

from ..errors import AssetGatewayError, PollingTimeoutError, ReadinessTimeoutError
from .gateway import IAssetGateway, ReadyInfo
from .polling import Clock, RetrySchedule

logger = logging.getLogger(__name__)


class ReadinessGate:
    """
    Polls the asset gateway until an asset reports ready.

    Gateway errors during a single check count as "not ready yet"; only the
    overall deadline ends the wait.
    """

    def __init__(self, gateway: IAssetGateway, clock: Optional[Clock] = None):
        self.gateway = gateway
        self.clock = clock

    def await_ready(
        self,
        asset_id: str,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReadyInfo:
        """
        Block until the asset is ready.

        Args:
            asset_id: Remote asset id
            timeout: Overall wait budget in seconds
            poll_interval: Delay between checks in seconds
            cancel_event: Optional event that aborts the wait

        Returns:
            ReadyInfo of the ready asset

        Raises:
            ReadinessTimeoutError: If the asset is not ready within the budget
            PollingCancelledError: If the cancel event is set
        """
        schedule = RetrySchedule(poll_interval, timeout, self.clock)

        def check() -> Optional[ReadyInfo]:
            try:
                info = self.gateway.get_asset_info(asset_id)
            except AssetGatewayError as e:
                logger.debug(f"Readiness check for {asset_id} failed, retrying: {e}")
                return None
            return info if info.is_ready else None

        try:
            info = schedule.run(check, cancel_event, description=f"readiness of {asset_id}")
        except PollingTimeoutError as e:
            raise ReadinessTimeoutError(
                f"Asset {asset_id} not ready after {timeout}s ({e.attempts} checks)",
                original_error=e,
            )

        logger.info(f"Asset {asset_id} is ready")
        return info
