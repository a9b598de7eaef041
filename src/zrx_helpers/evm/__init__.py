"""Chain-bound 0x helpers built on web3."""

from .client import ZeroExHelper, protocol_fee
from .config import ZeroExHelperConfig
from .validator import (
    AcceptedOrderInfo,
    DevUtilsOrderValidator,
    OrderValidator,
    RejectedOrderInfo,
    RejectedOrderStatus,
    ValidationResults,
)

__all__ = [
    "ZeroExHelper",
    "ZeroExHelperConfig",
    "protocol_fee",
    "OrderValidator",
    "DevUtilsOrderValidator",
    "ValidationResults",
    "AcceptedOrderInfo",
    "RejectedOrderInfo",
    "RejectedOrderStatus",
]
