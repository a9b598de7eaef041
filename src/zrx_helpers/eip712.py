"""Typed EIP-712 struct hashing for 0x v3 orders and transactions.

Struct layouts are declared once and drive both the type hash and the
encoding, so field order can only change in one place.
https://eips.ethereum.org/EIPS/eip-712
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from eth_abi import encode as abi_encode
from eth_utils import keccak, to_checksum_address
from hexbytes import HexBytes

from .constants import ZERO_EX_PROTOCOL_NAME, ZERO_EX_PROTOCOL_VERSION
from .types import Address, Hash32

EIP191_HEADER = b"\x19\x01"


@dataclass(frozen=True)
class EIP712Field:
    name: str
    type: str


@dataclass(frozen=True)
class EIP712Struct:
    """A flat EIP-712 struct type (no nested struct members)."""

    name: str
    fields: tuple[EIP712Field, ...]

    @cached_property
    def encoded_type(self) -> str:
        members = ",".join(f"{field.type} {field.name}" for field in self.fields)
        return f"{self.name}({members})"

    @cached_property
    def type_hash(self) -> bytes:
        return keccak(text=self.encoded_type)

    def type_list(self) -> list[dict[str, str]]:
        return [{"name": field.name, "type": field.type} for field in self.fields]

    def hash_struct(self, values: Sequence[Any]) -> Hash32:
        """Return hashStruct(s) for values given in declared field order."""
        if len(values) != len(self.fields):
            raise ValueError(
                f"{self.name} expects {len(self.fields)} values, got {len(values)}"
            )

        abi_types = ["bytes32"]
        abi_values: list[Any] = [self.type_hash]
        for field, value in zip(self.fields, values):
            abi_type, encoded = _encode_field(field, value)
            abi_types.append(abi_type)
            abi_values.append(encoded)

        return HexBytes(keccak(abi_encode(abi_types, abi_values)))


def _encode_field(field: EIP712Field, value: Any) -> tuple[str, Any]:
    if field.type == "string":
        return "bytes32", keccak(text=value)
    if field.type == "bytes":
        return "bytes32", keccak(bytes(value))
    if field.type == "address":
        return "address", to_checksum_address(value)
    if field.type == "uint256":
        return "uint256", int(value)
    raise ValueError(f"Unsupported EIP-712 member type {field.type!r} for {field.name!r}")


def _struct(name: str, *members: tuple[str, str]) -> EIP712Struct:
    return EIP712Struct(name, tuple(EIP712Field(n, t) for t, n in members))


EIP712_DOMAIN = _struct(
    "EIP712Domain",
    ("string", "name"),
    ("string", "version"),
    ("uint256", "chainId"),
    ("address", "verifyingContract"),
)

ZERO_EX_TRANSACTION = _struct(
    "ZeroExTransaction",
    ("uint256", "salt"),
    ("uint256", "expirationTimeSeconds"),
    ("uint256", "gasPrice"),
    ("address", "signerAddress"),
    ("bytes", "data"),
)

ORDER = _struct(
    "Order",
    ("address", "makerAddress"),
    ("address", "takerAddress"),
    ("address", "feeRecipientAddress"),
    ("address", "senderAddress"),
    ("uint256", "makerAssetAmount"),
    ("uint256", "takerAssetAmount"),
    ("uint256", "makerFee"),
    ("uint256", "takerFee"),
    ("uint256", "expirationTimeSeconds"),
    ("uint256", "salt"),
    ("bytes", "makerAssetData"),
    ("bytes", "takerAssetData"),
    ("bytes", "makerFeeAssetData"),
    ("bytes", "takerFeeAssetData"),
)


def domain_values(chain_id: int, verifying_contract: Address) -> tuple[str, str, int, Address]:
    return (ZERO_EX_PROTOCOL_NAME, ZERO_EX_PROTOCOL_VERSION, chain_id, verifying_contract)


def hash_domain(chain_id: int, verifying_contract: Address) -> Hash32:
    """Return the 0x exchange domain separator for a chain."""
    return EIP712_DOMAIN.hash_struct(domain_values(chain_id, verifying_contract))


def hash_typed_data(domain_separator: bytes, struct_hash: bytes) -> Hash32:
    """keccak256("\\x19\\x01" || domainSeparator || hashStruct(message))"""
    return HexBytes(keccak(EIP191_HEADER + bytes(domain_separator) + bytes(struct_hash)))


def typed_data_message(
    struct: EIP712Struct,
    values: Sequence[Any],
    chain_id: int,
    verifying_contract: Address,
) -> dict[str, Any]:
    """Render the generic EIP-712 JSON envelope (``eth_signTypedData`` input)."""

    def render(definition: EIP712Struct, items: Sequence[Any]) -> dict[str, Any]:
        message: dict[str, Any] = {}
        for field, value in zip(definition.fields, items):
            if field.type == "bytes":
                value = HexBytes(value).to_0x_hex()
            elif field.type == "address":
                value = to_checksum_address(value)
            message[field.name] = value
        return message

    return {
        "types": {
            EIP712_DOMAIN.name: EIP712_DOMAIN.type_list(),
            struct.name: struct.type_list(),
        },
        "primaryType": struct.name,
        "domain": render(EIP712_DOMAIN, domain_values(chain_id, verifying_contract)),
        "message": render(struct, values),
    }
