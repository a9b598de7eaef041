"""Batch order validation against the 0x DevUtils contract."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from eth_abi import encode as abi_encode
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.types import BlockIdentifier

from ..constants import EC_SIGNATURE_LENGTH, OrderStatus, SignatureType
from ..exceptions import ParseError
from ..orders import ORDER_ABI_TYPE, SignedOrder
from ..types import Address, Hash32
from ..utils import decode_erc20_asset_data
from .config import DEFAULT_MAX_CONTENT_LENGTH

logger = logging.getLogger(__name__)

# Bytes of a JSON-RPC eth_call envelope excluding the hex-encoded call data
_JSON_RPC_OVERHEAD = 256
# Selector plus the two head offsets of getOrderRelevantStates(Order[],bytes[])
_CALL_HEAD_LENGTH = 4 + 64 + 64


@dataclass(frozen=True)
class RejectedOrderStatus:
    code: str
    message: str


RO_ETH_RPC_REQUEST_FAILED = RejectedOrderStatus(
    "EthRPCRequestFailed", "network request to Ethereum RPC endpoint failed"
)
RO_INVALID_MAKER_ASSET_AMOUNT = RejectedOrderStatus(
    "OrderHasInvalidMakerAssetAmount", "order makerAssetAmount cannot be 0"
)
RO_INVALID_TAKER_ASSET_AMOUNT = RejectedOrderStatus(
    "OrderHasInvalidTakerAssetAmount", "order takerAssetAmount cannot be 0"
)
RO_EXPIRED = RejectedOrderStatus("OrderExpired", "order expired according to latest block timestamp")
RO_FULLY_FILLED = RejectedOrderStatus("OrderFullyFilled", "order already fully filled")
RO_CANCELLED = RejectedOrderStatus("OrderCancelled", "order cancelled")
RO_UNFUNDED = RejectedOrderStatus(
    "OrderUnfunded", "maker has insufficient balance or allowance for this order to be filled"
)
RO_INVALID_MAKER_ASSET_DATA = RejectedOrderStatus(
    "OrderHasInvalidMakerAssetData", "order makerAssetData must encode a supported assetData type"
)
RO_INVALID_TAKER_ASSET_DATA = RejectedOrderStatus(
    "OrderHasInvalidTakerAssetData", "order takerAssetData must encode a supported assetData type"
)
RO_INVALID_MAKER_FEE_ASSET_DATA = RejectedOrderStatus(
    "OrderHasInvalidMakerFeeAssetData",
    "order makerFeeAssetData must be empty or encode a supported assetData type",
)
RO_INVALID_TAKER_FEE_ASSET_DATA = RejectedOrderStatus(
    "OrderHasInvalidTakerFeeAssetData",
    "order takerFeeAssetData must be empty or encode a supported assetData type",
)
RO_INVALID_SIGNATURE = RejectedOrderStatus("OrderHasInvalidSignature", "order signature must be valid")
RO_INCORRECT_CHAIN = RejectedOrderStatus(
    "OrderForIncorrectChain", "order was created for a different chain or exchange"
)
RO_MAX_ORDER_SIZE_EXCEEDED = RejectedOrderStatus(
    "OrderMaxSizeExceeded", "order exceeds the maximum encoded size"
)
RO_INTERNAL_ERROR = RejectedOrderStatus(
    "InternalError", "an unexpected internal error has occurred"
)

_STATUS_REJECTIONS = {
    OrderStatus.INVALID_MAKER_ASSET_AMOUNT: RO_INVALID_MAKER_ASSET_AMOUNT,
    OrderStatus.INVALID_TAKER_ASSET_AMOUNT: RO_INVALID_TAKER_ASSET_AMOUNT,
    OrderStatus.EXPIRED: RO_EXPIRED,
    OrderStatus.FULLY_FILLED: RO_FULLY_FILLED,
    OrderStatus.CANCELLED: RO_CANCELLED,
}


@dataclass(frozen=True)
class AcceptedOrderInfo:
    order_hash: Hash32
    signed_order: SignedOrder
    fillable_taker_asset_amount: int


@dataclass(frozen=True)
class RejectedOrderInfo:
    order_hash: Hash32 | None
    signed_order: SignedOrder
    status: RejectedOrderStatus


@dataclass
class ValidationResults:
    accepted: list[AcceptedOrderInfo] = field(default_factory=list)
    rejected: list[RejectedOrderInfo] = field(default_factory=list)


class OrderValidator(Protocol):
    """Validates signed orders in batches."""

    def batch_validate(
        self,
        orders: Sequence[SignedOrder],
        check_onchain: bool,
        block_identifier: BlockIdentifier = "latest",
    ) -> ValidationResults: ...


class DevUtilsOrderValidator:
    """Validate orders off-chain, then via ``DevUtils.getOrderRelevantStates``.

    On-chain calls are split so that no single JSON-RPC request body is
    estimated to exceed ``max_content_length`` bytes.
    """

    def __init__(
        self,
        web3: Web3,
        dev_utils: Contract,
        *,
        chain_id: int,
        exchange_address: Address,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    ) -> None:
        self._web3 = web3
        self._dev_utils = dev_utils
        self._chain_id = chain_id
        self._exchange = HexBytes(exchange_address)
        self._max_content_length = max_content_length

    def batch_validate(
        self,
        orders: Sequence[SignedOrder],
        check_onchain: bool,
        block_identifier: BlockIdentifier = "latest",
    ) -> ValidationResults:
        results = ValidationResults()
        now = self._current_timestamp(check_onchain, block_identifier, orders, results)
        if now is None:
            return results

        candidates: list[tuple[SignedOrder, Hash32]] = []
        for order in orders:
            order_hash = order.compute_order_hash()
            status = self._offchain_rejection(order, now)
            if status is not None:
                results.rejected.append(RejectedOrderInfo(order_hash, order, status))
            elif not check_onchain:
                results.accepted.append(
                    AcceptedOrderInfo(order_hash, order, order.taker_asset_amount)
                )
            else:
                candidates.append((order, order_hash))

        for chunk in self._chunk(candidates, results):
            self._validate_chunk(chunk, block_identifier, results)

        logger.debug(
            "Validated %d orders: accepted=%d rejected=%d",
            len(orders),
            len(results.accepted),
            len(results.rejected),
        )
        return results

    # ------------------------------------------------------------------
    # Off-chain checks
    # ------------------------------------------------------------------
    def _offchain_rejection(self, order: SignedOrder, now: int) -> RejectedOrderStatus | None:
        if order.chain_id != self._chain_id or HexBytes(order.exchange_address) != self._exchange:
            return RO_INCORRECT_CHAIN
        if order.maker_asset_amount == 0:
            return RO_INVALID_MAKER_ASSET_AMOUNT
        if order.taker_asset_amount == 0:
            return RO_INVALID_TAKER_ASSET_AMOUNT
        if not _is_erc20_asset_data(order.maker_asset_data):
            return RO_INVALID_MAKER_ASSET_DATA
        if not _is_erc20_asset_data(order.taker_asset_data):
            return RO_INVALID_TAKER_ASSET_DATA
        if order.maker_fee_asset_data and not _is_erc20_asset_data(order.maker_fee_asset_data):
            return RO_INVALID_MAKER_FEE_ASSET_DATA
        if order.taker_fee_asset_data and not _is_erc20_asset_data(order.taker_fee_asset_data):
            return RO_INVALID_TAKER_FEE_ASSET_DATA
        if not _has_valid_signature_shape(order.signature):
            return RO_INVALID_SIGNATURE
        if order.expiration_time_seconds <= now:
            return RO_EXPIRED
        return None

    def _current_timestamp(
        self,
        check_onchain: bool,
        block_identifier: BlockIdentifier,
        orders: Sequence[SignedOrder],
        results: ValidationResults,
    ) -> int | None:
        if not check_onchain:
            return int(time.time())

        try:
            return int(self._web3.eth.get_block(block_identifier)["timestamp"])
        except Exception as exc:
            logger.warning("Failed to fetch block %s: %s", block_identifier, exc)
            results.rejected.extend(
                RejectedOrderInfo(None, order, RO_ETH_RPC_REQUEST_FAILED) for order in orders
            )
            return None

    # ------------------------------------------------------------------
    # On-chain checks
    # ------------------------------------------------------------------
    def _chunk(
        self,
        candidates: list[tuple[SignedOrder, Hash32]],
        results: ValidationResults,
    ) -> list[list[tuple[SignedOrder, Hash32]]]:
        budget = self._max_content_length - _JSON_RPC_OVERHEAD - 2 * _CALL_HEAD_LENGTH
        chunks: list[list[tuple[SignedOrder, Hash32]]] = []
        current: list[tuple[SignedOrder, Hash32]] = []
        used = 0

        for order, order_hash in candidates:
            size = _encoded_hex_length(order)
            if size > budget:
                results.rejected.append(
                    RejectedOrderInfo(order_hash, order, RO_MAX_ORDER_SIZE_EXCEEDED)
                )
                continue
            if current and used + size > budget:
                chunks.append(current)
                current, used = [], 0
            current.append((order, order_hash))
            used += size

        if current:
            chunks.append(current)
        return chunks

    def _validate_chunk(
        self,
        chunk: list[tuple[SignedOrder, Hash32]],
        block_identifier: BlockIdentifier,
        results: ValidationResults,
    ) -> None:
        orders = [order.as_tuple() for order, _ in chunk]
        signatures = [order.signature for order, _ in chunk]

        try:
            orders_info, fillable_amounts, valid_signatures = (
                self._dev_utils.functions.getOrderRelevantStates(orders, signatures).call(
                    block_identifier=block_identifier
                )
            )
        except Exception as exc:
            logger.warning("getOrderRelevantStates failed for %d orders: %s", len(chunk), exc)
            results.rejected.extend(
                RejectedOrderInfo(order_hash, order, RO_ETH_RPC_REQUEST_FAILED)
                for order, order_hash in chunk
            )
            return

        if not len(orders_info) == len(fillable_amounts) == len(valid_signatures) == len(chunk):
            logger.error("DevUtils returned %d states for %d orders", len(orders_info), len(chunk))
            results.rejected.extend(
                RejectedOrderInfo(order_hash, order, RO_INTERNAL_ERROR)
                for order, order_hash in chunk
            )
            return

        for (order, order_hash), info, fillable, valid_signature in zip(
            chunk, orders_info, fillable_amounts, valid_signatures
        ):
            status = _onchain_rejection(int(info[0]), int(fillable), bool(valid_signature))
            if status is None:
                results.accepted.append(AcceptedOrderInfo(order_hash, order, int(fillable)))
            else:
                results.rejected.append(RejectedOrderInfo(order_hash, order, status))


def _onchain_rejection(
    raw_status: int, fillable: int, valid_signature: bool
) -> RejectedOrderStatus | None:
    if not valid_signature:
        return RO_INVALID_SIGNATURE
    try:
        status = OrderStatus(raw_status)
    except ValueError:
        return RO_INTERNAL_ERROR
    if status in _STATUS_REJECTIONS:
        return _STATUS_REJECTIONS[status]
    if status != OrderStatus.FILLABLE:
        return RO_INTERNAL_ERROR
    if fillable == 0:
        return RO_UNFUNDED
    return None


def _is_erc20_asset_data(asset_data: bytes) -> bool:
    try:
        decode_erc20_asset_data(asset_data)
    except ParseError:
        return False
    return True


def _has_valid_signature_shape(signature: bytes) -> bool:
    if not signature:
        return False
    try:
        signature_type = SignatureType(signature[-1])
    except ValueError:
        return False
    if signature_type in (SignatureType.ILLEGAL, SignatureType.INVALID):
        return False
    if signature_type == SignatureType.ETH_SIGN:
        return len(signature) == EC_SIGNATURE_LENGTH
    return True


def _encoded_hex_length(order: SignedOrder) -> int:
    """Hex characters this order contributes to a getOrderRelevantStates call."""
    encoded = abi_encode([ORDER_ABI_TYPE, "bytes"], [order.as_tuple(), order.signature])
    # one offset word each in the orders and signatures arrays
    return 2 * (len(encoded) + 64)
