"""0x v3 helper that builds, hashes, validates and submits orders and transactions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address
from web3 import Web3
from web3.contract import Contract
from web3.types import BlockIdentifier

from ..addresses import ContractAddresses
from ..constants import EXECUTE_FILL_TX_GAS_LIMIT, PROTOCOL_FEE_MULTIPLIER
from ..exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    NetworkError,
    ValidationIncomplete,
    ValidationRejected,
)
from ..orders import ORDER_ABI_TYPE, Order, SignedOrder
from ..signer import Signer
from ..transactions import TRANSACTION_ABI_TYPE, SignedTransaction, Transaction, sign_transaction
from ..types import Address, BalanceAndAllowance, Hash32
from ..utils import encode_erc20_asset_data, generate_pseudo_random_salt, is_null_address
from .config import ZeroExHelperConfig
from .connections import Web3Connections
from .transactions import TransactionDispatcher
from .validator import DevUtilsOrderValidator, OrderValidator

logger = logging.getLogger(__name__)

FILL_ORDER_SIGNATURE = f"fillOrder({ORDER_ABI_TYPE},uint256,bytes)"
EXECUTE_TRANSACTION_SIGNATURE = f"executeTransaction({TRANSACTION_ABI_TYPE},bytes)"


def protocol_fee(gas_price: int) -> int:
    """Protocol fee (in wei) owed by a single fill at ``gas_price``."""
    return int(gas_price) * PROTOCOL_FEE_MULTIPLIER


class ZeroExHelper:
    """Bind 0x order and transaction helpers to a connected chain."""

    def __init__(
        self,
        config: ZeroExHelperConfig,
        *,
        web3: Web3 | None = None,
        validator: OrderValidator | None = None,
    ) -> None:
        self._config = config
        self._connections = Web3Connections(config, web3)
        self._dispatcher = TransactionDispatcher(
            self._connections,
            wait_for_receipt=config.wait_for_receipt,
            receipt_timeout=config.receipt_timeout,
        )
        self._custom_validator = validator
        self._validator: OrderValidator | None = validator

    @classmethod
    def from_rpc_url(cls, rpc_url: str, **config_kwargs: Any) -> ZeroExHelper:
        """Create and connect a helper for the chain behind ``rpc_url``."""

        helper = cls(ZeroExHelperConfig(rpc_url=rpc_url, **config_kwargs))
        helper.connect()
        return helper

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    def connect(self) -> None:
        try:
            self._connections.connect()
        except Exception:
            self.disconnect()
            raise

        if self._custom_validator is None:
            self._validator = DevUtilsOrderValidator(
                self._connections.web3,
                self._connections.dev_utils,
                chain_id=self._connections.chain_id,
                exchange_address=self._connections.contract_addresses.exchange,
                max_content_length=self._config.max_content_length,
            )

    def disconnect(self) -> None:
        self._connections.disconnect()
        self._validator = self._custom_validator

    def is_connected(self) -> bool:
        return self._connections.is_connected()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> Web3:
        return self._connections.web3

    @property
    def chain_id(self) -> int:
        return self._connections.chain_id

    @property
    def contract_addresses(self) -> ContractAddresses:
        return self._connections.contract_addresses

    @property
    def dev_utils(self) -> Contract:
        """Initialised DevUtils contract handle."""
        return self._connections.dev_utils

    @property
    def order_validator(self) -> OrderValidator:
        if self._validator is None:
            raise NetworkError("Order validator not available; call connect() first")
        return self._validator

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def create_order(
        self,
        maker: Address,
        taker: Address,
        sender: Address,
        fee_recipient: Address,
        maker_asset: Address,
        taker_asset: Address,
        maker_amount: int,
        taker_amount: int,
        maker_fee: int,
        taker_fee: int,
        maker_fee_asset: Address,
        taker_fee_asset: Address,
        expiration_time_seconds: int,
    ) -> Order:
        """Create an unsigned order with a fresh random salt.

        Fee asset data is left empty when the fee asset is the null address.
        """
        salt = generate_pseudo_random_salt()

        maker_fee_asset_data = b""
        if not is_null_address(maker_fee_asset):
            maker_fee_asset_data = encode_erc20_asset_data(maker_fee_asset)

        taker_fee_asset_data = b""
        if not is_null_address(taker_fee_asset):
            taker_fee_asset_data = encode_erc20_asset_data(taker_fee_asset)

        return Order(
            chain_id=self.chain_id,
            exchange_address=self.contract_addresses.exchange,
            maker_address=to_checksum_address(maker),
            maker_asset_data=encode_erc20_asset_data(maker_asset),
            maker_fee_asset_data=maker_fee_asset_data,
            maker_asset_amount=maker_amount,
            maker_fee=maker_fee,
            taker_address=to_checksum_address(taker),
            taker_asset_data=encode_erc20_asset_data(taker_asset),
            taker_fee_asset_data=taker_fee_asset_data,
            taker_asset_amount=taker_amount,
            taker_fee=taker_fee,
            sender_address=to_checksum_address(sender),
            fee_recipient_address=to_checksum_address(fee_recipient),
            expiration_time_seconds=expiration_time_seconds,
            salt=salt,
        )

    def get_fill_order_call_data(
        self, order: Order, taker_asset_amount: int, signature: bytes
    ) -> bytes:
        """Return Exchange ``fillOrder`` call data (to be wrapped in a taker-signed transaction)."""

        return function_signature_to_4byte_selector(FILL_ORDER_SIGNATURE) + abi_encode(
            [ORDER_ABI_TYPE, "uint256", "bytes"],
            [order.as_tuple(), taker_asset_amount, signature],
        )

    def get_balance_and_allowance(
        self,
        owner: Address,
        asset_data: bytes,
        block_identifier: BlockIdentifier = "latest",
    ) -> BalanceAndAllowance:
        """Read ``owner``'s balance and asset proxy allowance for ``asset_data``."""

        owner_address = to_checksum_address(owner)
        try:
            balance, allowance = self.dev_utils.functions.getBalanceAndAssetProxyAllowance(
                owner_address, asset_data
            ).call(block_identifier=block_identifier)
        except Exception as exc:
            raise NetworkError(
                "Failed to read balance and allowance",
                endpoint="getBalanceAndAssetProxyAllowance",
                details={"owner": owner_address, "error": str(exc)},
            ) from exc

        return BalanceAndAllowance(address=owner_address, balance=balance, allowance=allowance)

    def validate_fill(
        self,
        order: SignedOrder,
        taker_asset_amount: int,
        block_identifier: BlockIdentifier = "latest",
    ) -> None:
        """Validate ``order`` and, for a known taker, their balance and allowance.

        The taker must be able to cover the order's full ``taker_asset_amount``
        field. The ``taker_asset_amount`` argument does not lower that
        requirement; a partial fill is still checked against the whole order.

        Raises:
            ValidationRejected: The validator rejected the order
            ValidationIncomplete: The validator neither accepted nor rejected it
            InsufficientAllowance: Taker allowance is below the order's taker amount
            InsufficientBalance: Taker balance is below the order's taker amount
        """
        results = self.order_validator.batch_validate([order], True, block_identifier)

        if len(results.rejected) == 1:
            status = results.rejected[0].status
            raise ValidationRejected(status.message, code=status.code)

        if len(results.accepted) != 1:
            raise ValidationIncomplete(len(results.accepted), len(results.rejected))

        # a null taker can be anyone, so there is no balance to check
        if is_null_address(order.taker_address):
            return

        taker = self.get_balance_and_allowance(
            order.taker_address, order.taker_asset_data, block_identifier
        )
        want = order.taker_asset_amount
        if want > taker.allowance:
            raise InsufficientAllowance(have=taker.allowance, want=want)
        if want > taker.balance:
            raise InsufficientBalance(have=taker.balance, want=want)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def get_transaction_hash(self, tx: Transaction) -> Hash32:
        """Return the 0x transaction hash for the connected chain."""
        return tx.compute_hash(self.chain_id, self.contract_addresses.exchange)

    def sign_transaction(self, signer: Signer, tx: Transaction) -> SignedTransaction:
        return sign_transaction(signer, tx, self.chain_id, {self.chain_id: self.contract_addresses})

    def get_execute_transaction_call_data(self, tx: Transaction, signature: bytes) -> bytes:
        return function_signature_to_4byte_selector(EXECUTE_TRANSACTION_SIGNATURE) + abi_encode(
            [TRANSACTION_ABI_TYPE, "bytes"],
            [tx.as_tuple(), signature],
        )

    def execute_transaction(
        self,
        tx: Transaction,
        signature: bytes,
        *,
        tx_params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Submit ``tx`` with ``signature`` to ``Exchange.executeTransaction``.

        The call pays the protocol fee for a single fill at the transaction's
        gas price; ``tx_params`` override any of the defaults.
        """
        params: dict[str, Any] = {
            "gas": EXECUTE_FILL_TX_GAS_LIMIT,
            "gasPrice": tx.gas_price,
            "value": protocol_fee(tx.gas_price),
        }
        account = self._connections.account
        if account is not None:
            params["from"] = account.address
        params.update(tx_params or {})

        return self._dispatcher.send(
            "executeTransaction",
            [tx.as_tuple(), signature],
            tx_params=params,
            action="execute_transaction",
        )

    def execute_signed_transaction(
        self,
        stx: SignedTransaction,
        *,
        tx_params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self.execute_transaction(stx.transaction, stx.signature, tx_params=tx_params)
