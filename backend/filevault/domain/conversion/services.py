"""
Conversion Domain Services

Runs the submit, poll and resolve lifecycle of a document-to-image
conversion against the remote asset service.
"""

import logging
import threading
from typing import Optional

from ..errors import (
    AssetGatewayError,
    ConversionFailedError,
    ConversionTimeoutError,
    NoResultAssetError,
    PollingTimeoutError,
)
from .gateway import IAssetGateway
from .polling import Clock, RetrySchedule
from .value_objects import (
    ConversionRequest,
    ConversionState,
    ConversionStatus,
    extract_job_token,
    normalize_result_asset_id,
)

logger = logging.getLogger(__name__)


class ConversionOrchestrator:
    """
    Converts the first page of a stored document into an image asset.

    Holds no per-conversion state, so the same asset can be converted
    repeatedly or from several threads.
    """

    def __init__(
        self,
        gateway: IAssetGateway,
        poll_interval: float = 2.0,
        timeout: float = 60.0,
        clock: Optional[Clock] = None,
        target_format: str = "jpg",
    ):
        """
        Initialize ConversionOrchestrator.

        Args:
            gateway: Remote asset service adapter
            poll_interval: Delay between status queries in seconds
            timeout: Overall status polling budget in seconds
            clock: Time source, defaults to the system clock
            target_format: Raster format of the produced image
        """
        self.gateway = gateway
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.clock = clock
        self.target_format = target_format

    def convert_first_page_to_image(
        self,
        asset_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Convert page 1 of a document and return the resulting asset id.

        Args:
            asset_id: Remote asset id of a ready document
            cancel_event: Optional event that aborts status polling

        Returns:
            Asset id of the converted image

        Raises:
            NoTokenError: If the submission returned no job token
            ConversionFailedError: If the job failed or was rejected
            ConversionTimeoutError: If the job did not finish within the budget
            NoResultAssetError: If the finished job carries no result asset id
            PollingCancelledError: If the cancel event is set
        """
        request = ConversionRequest(asset_id, target_format=self.target_format)

        try:
            payload = self.gateway.submit_conversion([request.path])
        except AssetGatewayError as e:
            raise ConversionFailedError(
                f"Conversion submission failed for {asset_id}: {e}", original_error=e
            )

        token = extract_job_token(payload, request.path)
        logger.info(f"Conversion job {token} submitted for asset {asset_id}")

        status = self._poll_until_terminal(token, cancel_event)

        if status.state != ConversionState.FINISHED:
            detail = status.error or status.state.value
            raise ConversionFailedError(
                f"Conversion job {token} {status.state.value}: {detail}", detail=detail
            )

        result_asset_id = normalize_result_asset_id(status.result)
        if result_asset_id is None:
            raise NoResultAssetError(f"Conversion job {token} finished without a result asset")

        logger.info(f"Conversion job {token} produced asset {result_asset_id}")
        return result_asset_id

    def _poll_until_terminal(
        self,
        token: str,
        cancel_event: Optional[threading.Event],
    ) -> ConversionStatus:
        schedule = RetrySchedule(self.poll_interval, self.timeout, self.clock)

        def check() -> Optional[ConversionStatus]:
            try:
                payload = self.gateway.get_conversion_status(token)
            except AssetGatewayError as e:
                logger.warning(f"Status query for conversion job {token} failed, retrying: {e}")
                return None

            status = ConversionStatus.from_payload(payload)
            if status.state == ConversionState.UNKNOWN:
                logger.warning(f"Conversion job {token} reported unrecognized status, retrying")
                return None
            return status if status.state.is_terminal() else None

        try:
            return schedule.run(check, cancel_event, description=f"conversion job {token}")
        except PollingTimeoutError as e:
            raise ConversionTimeoutError(
                f"Conversion job {token} did not finish within {self.timeout}s",
                original_error=e,
            )
