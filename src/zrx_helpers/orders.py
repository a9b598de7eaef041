"""0x v3 order records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from eth_typing import ChecksumAddress

from .eip712 import ORDER, hash_domain, hash_typed_data, typed_data_message
from .exceptions import ParseError
from .signer import Signer
from .types import Hash32
from .utils import ec_signature_to_bytes, parse_address, parse_hex_bytes, parse_uint256, to_hex

# ABI tuple type of LibOrder.Order
ORDER_ABI_TYPE = (
    "(address,address,address,address,uint256,uint256,uint256,uint256,uint256,uint256,"
    "bytes,bytes,bytes,bytes)"
)

_ADDRESS_FIELDS = {
    "exchangeAddress": "exchange_address",
    "makerAddress": "maker_address",
    "takerAddress": "taker_address",
    "senderAddress": "sender_address",
    "feeRecipientAddress": "fee_recipient_address",
}
_UINT_FIELDS = {
    "makerAssetAmount": "maker_asset_amount",
    "takerAssetAmount": "taker_asset_amount",
    "makerFee": "maker_fee",
    "takerFee": "taker_fee",
    "expirationTimeSeconds": "expiration_time_seconds",
    "salt": "salt",
}
_BYTES_FIELDS = {
    "makerAssetData": "maker_asset_data",
    "takerAssetData": "taker_asset_data",
    "makerFeeAssetData": "maker_fee_asset_data",
    "takerFeeAssetData": "taker_fee_asset_data",
}


@dataclass(frozen=True)
class Order:
    """Unsigned 0x v3 order.

    Fee asset data is empty when the order carries no fee asset.
    """

    chain_id: int
    exchange_address: ChecksumAddress
    maker_address: ChecksumAddress
    maker_asset_data: bytes
    maker_fee_asset_data: bytes
    maker_asset_amount: int
    maker_fee: int
    taker_address: ChecksumAddress
    taker_asset_data: bytes
    taker_fee_asset_data: bytes
    taker_asset_amount: int
    taker_fee: int
    sender_address: ChecksumAddress
    fee_recipient_address: ChecksumAddress
    expiration_time_seconds: int
    salt: int

    def as_tuple(self) -> tuple[Any, ...]:
        """Return the order in LibOrder.Order (and EIP-712 ``Order``) member order."""

        return (
            self.maker_address,
            self.taker_address,
            self.fee_recipient_address,
            self.sender_address,
            self.maker_asset_amount,
            self.taker_asset_amount,
            self.maker_fee,
            self.taker_fee,
            self.expiration_time_seconds,
            self.salt,
            self.maker_asset_data,
            self.taker_asset_data,
            self.maker_fee_asset_data,
            self.taker_fee_asset_data,
        )

    def compute_order_hash(self) -> Hash32:
        """Return the EIP-712 order hash under the order's exchange domain."""

        return hash_typed_data(
            hash_domain(self.chain_id, self.exchange_address),
            ORDER.hash_struct(self.as_tuple()),
        )

    def typed_data(self) -> dict[str, Any]:
        return typed_data_message(ORDER, self.as_tuple(), self.chain_id, self.exchange_address)

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the 0x JSON order field names."""

        data: dict[str, Any] = {"chainId": self.chain_id}
        for key, attr in _ADDRESS_FIELDS.items():
            data[key] = getattr(self, attr).lower()
        for key, attr in _UINT_FIELDS.items():
            data[key] = str(getattr(self, attr))
        for key, attr in _BYTES_FIELDS.items():
            data[key] = to_hex(getattr(self, attr))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Order:
        return cls(**_order_kwargs(data))


@dataclass(frozen=True)
class SignedOrder(Order):
    """Order together with the maker's signature."""

    signature: bytes

    @property
    def order(self) -> Order:
        return Order(**{key: getattr(self, key) for key in Order.__dataclass_fields__})

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["signature"] = to_hex(self.signature)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SignedOrder:
        kwargs = _order_kwargs(data)
        kwargs["signature"] = parse_hex_bytes(data.get("signature"), "signature")
        return cls(**kwargs)


def sign_order(signer: Signer, order: Order) -> SignedOrder:
    """Sign ``order`` for its maker with an EthSign signature."""

    order_hash = order.compute_order_hash()
    ec_signature = signer.eth_sign(bytes(order_hash), order.maker_address)
    fields = {key: getattr(order, key) for key in Order.__dataclass_fields__}
    return SignedOrder(**fields, signature=ec_signature_to_bytes(ec_signature))


def _order_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ParseError("Order JSON must be an object", value=data)

    chain_id = data.get("chainId")
    if isinstance(chain_id, bool) or not isinstance(chain_id, int):
        raise ParseError('invalid value for "chainId"', field="chainId", value=chain_id)

    kwargs: dict[str, Any] = {"chain_id": chain_id}
    for key, attr in _ADDRESS_FIELDS.items():
        kwargs[attr] = parse_address(data.get(key), key)
    for key, attr in _UINT_FIELDS.items():
        kwargs[attr] = parse_uint256(data.get(key), key)
    for key, attr in _BYTES_FIELDS.items():
        kwargs[attr] = parse_hex_bytes(data.get(key), key)
    return kwargs
