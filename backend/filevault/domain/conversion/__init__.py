"""
Conversion Domain

Readiness waiting and first-page document conversion against the remote
asset service.
"""

from .gateway import IAssetGateway, ReadyInfo
from .polling import Clock, RetrySchedule, SystemClock
from .readiness import ReadinessGate
from .services import ConversionOrchestrator
from .value_objects import (
    ConversionRequest,
    ConversionState,
    ConversionStatus,
    extract_job_token,
    normalize_result_asset_id,
)

__all__ = [
    "Clock",
    "ConversionOrchestrator",
    "ConversionRequest",
    "ConversionState",
    "ConversionStatus",
    "IAssetGateway",
    "ReadinessGate",
    "ReadyInfo",
    "RetrySchedule",
    "SystemClock",
    "extract_job_token",
    "normalize_result_asset_id",
]
