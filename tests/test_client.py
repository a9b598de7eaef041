"""Tests for the chain-bound ZeroExHelper facade."""

from __future__ import annotations

from collections.abc import Sequence
from types import SimpleNamespace
from typing import Any, cast

import pytest
from eth_abi import decode as abi_decode
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3 import Web3
from web3.types import BlockIdentifier

from factories import ADDRESSES, MAKER_KEY, TAKER, TAKER_KEY, make_order
from zrx_helpers.abi import Exchange_abi
from zrx_helpers.constants import (
    EXECUTE_FILL_TX_GAS_LIMIT,
    NULL_ADDRESS,
    PROTOCOL_FEE_MULTIPLIER,
    ZERO_EX_TEST_CHAIN_ID,
)
from zrx_helpers.evm.client import ZeroExHelper, protocol_fee
from zrx_helpers.evm.config import ZeroExHelperConfig
from zrx_helpers.evm.connections import SIGNER_MIDDLEWARE_NAME
from zrx_helpers.evm.validator import (
    RO_EXPIRED,
    AcceptedOrderInfo,
    DevUtilsOrderValidator,
    RejectedOrderInfo,
    ValidationResults,
)
from zrx_helpers.exceptions import (
    ChainLookupError,
    InsufficientAllowance,
    InsufficientBalance,
    NetworkError,
    ValidationIncomplete,
    ValidationRejected,
)
from zrx_helpers.orders import ORDER_ABI_TYPE, SignedOrder, sign_order
from zrx_helpers.signer import LocalSigner
from zrx_helpers.transactions import TRANSACTION_ABI_TYPE, Transaction
from zrx_helpers.utils import encode_erc20_asset_data

TX_HASH = HexBytes(b"\xab" * 32)


class DummyCall:
    def __init__(self, result: Any, log: list[tuple[str, Any]]) -> None:
        self._result = result
        self._log = log

    def call(self, block_identifier: Any = "latest") -> Any:
        self._log.append(("call", block_identifier))
        if isinstance(self._result, Exception):
            raise self._result
        return self._result

    def transact(self, params: dict[str, Any]) -> HexBytes:
        self._log.append(("transact", params))
        if isinstance(self._result, Exception):
            raise self._result
        return TX_HASH


class DummyContract:
    def __init__(self, address: str, results: dict[str, Any]) -> None:
        self.address = address
        self.calls: list[tuple[str, tuple]] = []
        self.log: list[tuple[str, Any]] = []
        self._results = results
        self.functions = SimpleNamespace(
            **{name: self._builder(name) for name in ("executeTransaction",
                                                      "getBalanceAndAssetProxyAllowance")}
        )

    def _builder(self, name: str) -> Any:
        def build(*args: Any) -> DummyCall:
            self.calls.append((name, args))
            return DummyCall(self._results.get(name), self.log)

        return build


class DummyMiddlewareOnion:
    """Named middleware layers, keyed like web3's NamedElementOnion."""

    def __init__(self) -> None:
        self.layers: dict[str, Any] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.layers

    def add(self, middleware: Any, name: str | None = None) -> None:
        key = name or repr(middleware)
        if key in self.layers:
            raise ValueError(f"You can't add the same un-named instance twice: {key}")
        self.layers[key] = middleware

    def remove(self, name: str) -> None:
        del self.layers[name]


class DummyWeb3:
    def __init__(self, chain_id: int = ZERO_EX_TEST_CHAIN_ID, balance: int = 0, allowance: int = 0):
        self.middleware_onion = DummyMiddlewareOnion()
        self.exchange = DummyContract(ADDRESSES.exchange, {"executeTransaction": None})
        self.dev_utils = DummyContract(
            ADDRESSES.dev_utils, {"getBalanceAndAssetProxyAllowance": (balance, allowance)}
        )
        self.receipts: list[tuple[Any, float]] = []

        def contract(address: str, abi: Any) -> DummyContract:
            return self.exchange if abi is Exchange_abi else self.dev_utils

        def wait_for_transaction_receipt(tx_hash: Any, timeout: float) -> dict[str, Any]:
            self.receipts.append((tx_hash, timeout))
            return {"status": 1, "blockNumber": 7, "transactionHash": HexBytes(tx_hash)}

        self.eth = SimpleNamespace(
            chain_id=chain_id,
            contract=contract,
            wait_for_transaction_receipt=wait_for_transaction_receipt,
        )


class StaticValidator:
    def __init__(self, results: ValidationResults) -> None:
        self._results = results
        self.calls: list[tuple[int, bool, BlockIdentifier]] = []

    def batch_validate(
        self,
        orders: Sequence[SignedOrder],
        check_onchain: bool,
        block_identifier: BlockIdentifier = "latest",
    ) -> ValidationResults:
        self.calls.append((len(orders), check_onchain, block_identifier))
        return self._results


def _helper(
    web3: DummyWeb3 | None = None,
    validator: Any = None,
    **config_kwargs: Any,
) -> ZeroExHelper:
    config = ZeroExHelperConfig(rpc_url="http://localhost:8545", **config_kwargs)
    helper = ZeroExHelper(config, web3=cast(Web3, web3 or DummyWeb3()), validator=validator)
    helper.connect()
    return helper


def _signed(**overrides: Any) -> SignedOrder:
    return sign_order(LocalSigner.from_keys(MAKER_KEY), make_order(**overrides))


def _accepting(order: SignedOrder) -> StaticValidator:
    return StaticValidator(
        ValidationResults(accepted=[AcceptedOrderInfo(order.compute_order_hash(), order, 1)])
    )


class TestConnection:
    def test_connect_resolves_chain(self):
        helper = _helper()

        assert helper.is_connected()
        assert helper.chain_id == ZERO_EX_TEST_CHAIN_ID
        assert helper.contract_addresses == ADDRESSES
        assert isinstance(helper.order_validator, DevUtilsOrderValidator)

    def test_unknown_chain(self):
        with pytest.raises(ChainLookupError):
            _helper(DummyWeb3(chain_id=31337))

    def test_contract_address_override(self):
        helper = _helper(DummyWeb3(chain_id=31337), contract_addresses={31337: ADDRESSES})
        assert helper.chain_id == 31337

    def test_accessors_require_connection(self):
        helper = ZeroExHelper(ZeroExHelperConfig(rpc_url="http://localhost:8545"))
        with pytest.raises(NetworkError):
            helper.chain_id
        with pytest.raises(NetworkError):
            helper.order_validator

    def test_disconnect(self):
        helper = _helper()
        helper.disconnect()
        assert not helper.is_connected()

    def test_reconnect_keeps_single_signing_layer(self):
        web3 = DummyWeb3()
        helper = _helper(web3, private_key=TAKER_KEY)
        helper.disconnect()
        helper.connect()
        helper.connect()

        assert list(web3.middleware_onion.layers) == [SIGNER_MIDDLEWARE_NAME]
        assert web3.eth.default_account == TAKER

    def test_exchange_abi_matches_dispatched_calls(self):
        assert [entry["name"] for entry in Exchange_abi] == ["executeTransaction"]


class TestCreateOrder:
    def _create(self, helper: ZeroExHelper, **overrides: Any):
        kwargs: dict[str, Any] = {
            "maker": TAKER,
            "taker": NULL_ADDRESS,
            "sender": NULL_ADDRESS,
            "fee_recipient": NULL_ADDRESS,
            "maker_asset": ADDRESSES.weth9,
            "taker_asset": ADDRESSES.zrx_token,
            "maker_amount": 100,
            "taker_amount": 200,
            "maker_fee": 0,
            "taker_fee": 0,
            "maker_fee_asset": NULL_ADDRESS,
            "taker_fee_asset": NULL_ADDRESS,
            "expiration_time_seconds": 1_700_000_000,
        }
        kwargs.update(overrides)
        return helper.create_order(**kwargs)

    def test_null_fee_assets_leave_empty_data(self):
        order = self._create(_helper())

        assert order.maker_fee_asset_data == b""
        assert order.taker_fee_asset_data == b""
        assert order.maker_asset_data == encode_erc20_asset_data(ADDRESSES.weth9)
        assert order.taker_asset_data == encode_erc20_asset_data(ADDRESSES.zrx_token)

    def test_fee_assets_are_encoded(self):
        order = self._create(
            _helper(), maker_fee_asset=ADDRESSES.zrx_token, taker_fee_asset=ADDRESSES.weth9
        )

        assert order.maker_fee_asset_data == encode_erc20_asset_data(ADDRESSES.zrx_token)
        assert order.taker_fee_asset_data == encode_erc20_asset_data(ADDRESSES.weth9)

    def test_bound_chain_and_fields(self):
        order = self._create(_helper(), maker_amount=0, taker_fee=-1)

        assert order.chain_id == ZERO_EX_TEST_CHAIN_ID
        assert order.exchange_address == ADDRESSES.exchange
        assert order.maker_address == TAKER
        assert order.maker_asset_amount == 0
        assert order.taker_fee == -1
        assert order.expiration_time_seconds == 1_700_000_000

    def test_fresh_salt_per_order(self):
        helper = _helper()
        assert self._create(helper).salt != self._create(helper).salt


class TestValidateFill:
    def test_rejected_order(self):
        order = _signed()
        validator = StaticValidator(
            ValidationResults(rejected=[RejectedOrderInfo(None, order, RO_EXPIRED)])
        )
        with pytest.raises(ValidationRejected) as excinfo:
            _helper(validator=validator).validate_fill(order, 1)

        assert excinfo.value.message == RO_EXPIRED.message
        assert excinfo.value.code == "OrderExpired"
        assert validator.calls == [(1, True, "latest")]

    def test_incomplete_validation(self):
        with pytest.raises(ValidationIncomplete) as excinfo:
            _helper(validator=StaticValidator(ValidationResults())).validate_fill(_signed(), 1)
        assert excinfo.value.accepted == 0
        assert excinfo.value.rejected == 0

    def test_null_taker_skips_balance_check(self):
        web3 = DummyWeb3(balance=0, allowance=0)
        order = _signed()
        _helper(web3, validator=_accepting(order)).validate_fill(order, 10**30)
        assert web3.dev_utils.calls == []

    def test_insufficient_allowance(self):
        web3 = DummyWeb3(balance=1000, allowance=99)
        order = _signed(taker_address=TAKER, taker_asset_amount=100)
        with pytest.raises(InsufficientAllowance) as excinfo:
            _helper(web3, validator=_accepting(order)).validate_fill(order, 100)

        assert excinfo.value.have == 99
        assert excinfo.value.want == 100
        assert "allowance" in excinfo.value.message
        assert web3.dev_utils.calls == [
            ("getBalanceAndAssetProxyAllowance", (TAKER, order.taker_asset_data))
        ]

    def test_insufficient_balance(self):
        web3 = DummyWeb3(balance=50, allowance=1000)
        order = _signed(taker_address=TAKER, taker_asset_amount=100)
        with pytest.raises(InsufficientBalance) as excinfo:
            _helper(web3, validator=_accepting(order)).validate_fill(order, 100)

        assert excinfo.value.have == 50
        assert excinfo.value.want == 100

    def test_partial_fill_checks_full_order_amount(self):
        web3 = DummyWeb3(balance=10**18, allowance=10**30)
        order = _signed(taker_address=TAKER, taker_asset_amount=5 * 10**18)
        with pytest.raises(InsufficientBalance) as excinfo:
            _helper(web3, validator=_accepting(order)).validate_fill(order, 10**18)

        assert excinfo.value.have == 10**18
        assert excinfo.value.want == 5 * 10**18
        assert str(5 * 10**18) in excinfo.value.message

    def test_partial_fill_allowance_uses_order_amount(self):
        web3 = DummyWeb3(balance=10**30, allowance=2 * 10**18)
        order = _signed(taker_address=TAKER, taker_asset_amount=5 * 10**18)
        with pytest.raises(InsufficientAllowance) as excinfo:
            _helper(web3, validator=_accepting(order)).validate_fill(order, 10**18)
        assert excinfo.value.want == 5 * 10**18

    def test_sufficient_funds(self):
        web3 = DummyWeb3(balance=100, allowance=100)
        order = _signed(taker_address=TAKER, taker_asset_amount=100)
        _helper(web3, validator=_accepting(order)).validate_fill(order, 40, block_identifier=5)
        assert web3.dev_utils.log == [("call", 5)]

    def test_balance_read_failure(self):
        web3 = DummyWeb3()
        web3.dev_utils._results["getBalanceAndAssetProxyAllowance"] = ConnectionError("down")
        order = _signed(taker_address=TAKER)
        with pytest.raises(NetworkError) as excinfo:
            _helper(web3, validator=_accepting(order)).validate_fill(order, 1)
        assert isinstance(excinfo.value.__cause__, ConnectionError)


class TestCallData:
    def test_fill_order_call_data(self):
        order = _signed()
        call_data = _helper().get_fill_order_call_data(order.order, 123, order.signature)

        assert call_data[:4] == bytes.fromhex("9b44d556")
        decoded_order, amount, signature = abi_decode(
            [ORDER_ABI_TYPE, "uint256", "bytes"], call_data[4:]
        )
        assert amount == 123
        assert signature == order.signature
        assert decoded_order[0] == order.maker_address.lower()
        assert decoded_order[9] == order.salt
        assert decoded_order[10] == order.maker_asset_data
        assert decoded_order[12] == b""

    def test_execute_transaction_call_data(self):
        tx = Transaction(1, 2, 3, TAKER, b"\x01\x02")
        call_data = _helper().get_execute_transaction_call_data(tx, b"\x05" * 66)

        selector = function_signature_to_4byte_selector(
            f"executeTransaction({TRANSACTION_ABI_TYPE},bytes)"
        )
        assert call_data[:4] == selector
        decoded_tx, signature = abi_decode([TRANSACTION_ABI_TYPE, "bytes"], call_data[4:])
        assert decoded_tx == (1, 2, 3, TAKER.lower(), b"\x01\x02")
        assert signature == b"\x05" * 66


class TestTransactions:
    def _tx(self) -> Transaction:
        return Transaction(7, 1_700_000_000, 3 * 10**9, TAKER, b"\x09")

    def test_transaction_hash_uses_bound_chain(self):
        tx = self._tx()
        assert _helper().get_transaction_hash(tx) == self._tx().compute_hash_for_chain_id(
            ZERO_EX_TEST_CHAIN_ID
        )

    def test_sign_transaction(self):
        signed = _helper().sign_transaction(LocalSigner.from_keys(TAKER_KEY), self._tx())
        assert signed.transaction == self._tx()
        assert len(signed.signature) == 66

    def test_protocol_fee(self):
        assert protocol_fee(10**9) == 10**9 * PROTOCOL_FEE_MULTIPLIER

    def test_execute_transaction(self):
        web3 = DummyWeb3()
        helper = _helper(web3, receipt_timeout=30.0)
        signed = helper.sign_transaction(LocalSigner.from_keys(TAKER_KEY), self._tx())

        result = helper.execute_signed_transaction(signed)

        assert result["tx_hash"] == TX_HASH.to_0x_hex()
        assert result["block_number"] == 7
        assert result["receipt"]["transactionHash"] == TX_HASH.to_0x_hex()
        assert web3.receipts == [(TX_HASH, 30.0)]

        (name, args), = web3.exchange.calls
        assert name == "executeTransaction"
        assert args == (signed.as_tuple(), signed.signature)
        assert web3.exchange.log == [
            (
                "transact",
                {
                    "gas": EXECUTE_FILL_TX_GAS_LIMIT,
                    "gasPrice": 3 * 10**9,
                    "value": 3 * 10**9 * PROTOCOL_FEE_MULTIPLIER,
                },
            )
        ]

    def test_execute_transaction_overrides(self):
        web3 = DummyWeb3()
        helper = _helper(web3, wait_for_receipt=False)

        result = helper.execute_transaction(self._tx(), b"\x00", tx_params={"gas": 500000})

        assert result["receipt"] is None
        assert web3.receipts == []
        assert web3.exchange.log[0][1]["gas"] == 500000

    def test_execute_transaction_failure(self):
        web3 = DummyWeb3()
        web3.exchange._results["executeTransaction"] = ValueError("reverted")
        with pytest.raises(NetworkError) as excinfo:
            _helper(web3).execute_transaction(self._tx(), b"\x00")
        assert excinfo.value.endpoint == "executeTransaction"
