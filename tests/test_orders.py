"""Tests for 0x orders."""

from __future__ import annotations

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from factories import ADDRESSES, MAKER, MAKER_KEY, make_order
from zrx_helpers.constants import ZERO_EX_TEST_CHAIN_ID
from zrx_helpers.exceptions import ParseError
from zrx_helpers.orders import Order, SignedOrder, sign_order
from zrx_helpers.signer import LocalSigner
from zrx_helpers.utils import encode_erc20_asset_data


def test_order_hash_is_deterministic() -> None:
    assert make_order().compute_order_hash() == make_order().compute_order_hash()
    assert make_order().compute_order_hash() != make_order(salt=1).compute_order_hash()
    assert (
        make_order().compute_order_hash() != make_order(chain_id=1).compute_order_hash()
    )


def test_as_tuple_member_order() -> None:
    order = make_order()
    values = order.as_tuple()

    assert values[0] == order.maker_address
    assert values[4] == order.maker_asset_amount
    assert values[9] == order.salt
    assert values[10] == order.maker_asset_data
    assert values[13] == order.taker_fee_asset_data


def test_to_dict_uses_wire_names() -> None:
    data = make_order().to_dict()

    assert data["chainId"] == ZERO_EX_TEST_CHAIN_ID
    assert data["makerAddress"] == MAKER.lower()
    assert data["makerAssetAmount"] == str(10**18)
    assert data["makerFeeAssetData"] == "0x"
    assert data["takerAssetData"] == "0x" + encode_erc20_asset_data(ADDRESSES.zrx_token).hex()
    assert "signature" not in data


def test_from_dict_round_trip() -> None:
    order = make_order()
    assert Order.from_dict(order.to_dict()) == order


def test_from_dict_invalid_chain_id() -> None:
    data = make_order().to_dict()
    data["chainId"] = "1337"
    with pytest.raises(ParseError) as excinfo:
        Order.from_dict(data)
    assert excinfo.value.field == "chainId"


def test_from_dict_invalid_amount() -> None:
    data = make_order().to_dict()
    data["takerAssetAmount"] = "ten"
    with pytest.raises(ParseError) as excinfo:
        Order.from_dict(data)
    assert excinfo.value.field == "takerAssetAmount"


def test_sign_order_recovers_maker() -> None:
    order = make_order()
    signed = sign_order(LocalSigner.from_keys(MAKER_KEY), order)

    assert isinstance(signed, SignedOrder)
    assert signed.order == order
    assert signed.compute_order_hash() == order.compute_order_hash()

    v = signed.signature[0]
    r = int.from_bytes(signed.signature[1:33], "big")
    s = int.from_bytes(signed.signature[33:65], "big")
    message = encode_defunct(primitive=bytes(order.compute_order_hash()))
    assert Account.recover_message(message, vrs=(v, r, s)) == MAKER


def test_signed_order_dict_round_trip() -> None:
    signed = sign_order(LocalSigner.from_keys(MAKER_KEY), make_order())
    data = signed.to_dict()

    assert data["signature"] == "0x" + signed.signature.hex()
    assert SignedOrder.from_dict(data) == signed


def test_signed_order_requires_signature() -> None:
    with pytest.raises(ParseError) as excinfo:
        SignedOrder.from_dict(make_order().to_dict())
    assert excinfo.value.field == "signature"
