"""Encoding helpers for the 0x helper library."""

from __future__ import annotations

import re
import secrets
from collections.abc import Mapping, Sequence
from typing import Any

from eth_typing import ChecksumAddress
from eth_utils import is_hex_address, to_checksum_address
from hexbytes import HexBytes

from .constants import (
    ASSET_DATA_LENGTH,
    ASSET_DATA_PREFIX_LENGTH,
    EC_SIGNATURE_LENGTH,
    ERC20_ASSET_DATA_ID,
    NULL_ADDRESS,
    UINT256_MAX,
    SignatureType,
)
from .exceptions import ParseError, RandomSourceError
from .types import Address, ECSignature

_DECIMAL_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"0x([0-9a-fA-F]{2})*")

_ERC20_PREFIX = bytes.fromhex(ERC20_ASSET_DATA_ID)


def encode_erc20_asset_data(address: Address) -> bytes:
    """Return the ERC-20 asset data for a token address.

    The token address is left-padded into a 32-byte word following the
    4-byte ERC20Token selector.
    https://github.com/0xProject/0x-protocol-specification/blob/master/v3/v3-specification.md#assetdata
    """
    address_bytes = HexBytes(address)
    if len(address_bytes) != 20:
        raise ValueError(f"Token address must be 20 bytes, got {len(address_bytes)}")

    asset_data = bytearray(ASSET_DATA_LENGTH)
    asset_data[ASSET_DATA_LENGTH - 20 :] = address_bytes
    asset_data[:ASSET_DATA_PREFIX_LENGTH] = _ERC20_PREFIX
    return bytes(asset_data)


def decode_erc20_asset_data(asset_data: bytes) -> ChecksumAddress:
    """Return the token address encoded in ERC-20 asset data."""
    if len(asset_data) != ASSET_DATA_LENGTH:
        raise ParseError(
            f"ERC-20 asset data must be {ASSET_DATA_LENGTH} bytes",
            field="assetData",
            value=HexBytes(asset_data).to_0x_hex(),
        )
    if asset_data[:ASSET_DATA_PREFIX_LENGTH] != _ERC20_PREFIX:
        raise ParseError(
            "Asset data does not carry the ERC-20 proxy id",
            field="assetData",
            value=HexBytes(asset_data).to_0x_hex(),
        )
    if any(asset_data[ASSET_DATA_PREFIX_LENGTH : ASSET_DATA_LENGTH - 20]):
        raise ParseError(
            "ERC-20 asset data address word is not left-padded",
            field="assetData",
            value=HexBytes(asset_data).to_0x_hex(),
        )
    return to_checksum_address(asset_data[ASSET_DATA_LENGTH - 20 :])


def generate_pseudo_random_salt() -> int:
    """Generate a random salt in [0, 2^256 - 1) from the OS CSPRNG."""
    try:
        return secrets.randbelow(UINT256_MAX)
    except (OSError, NotImplementedError) as exc:  # pragma: no cover - platform failure
        raise RandomSourceError(
            "Secure random source failed to produce a salt", details={"error": str(exc)}
        ) from exc


def ec_signature_to_bytes(signature: ECSignature) -> bytes:
    """Pack an EC signature as v || r || s || EthSign type byte."""
    packed = bytearray(EC_SIGNATURE_LENGTH)
    packed[0] = signature.v
    packed[1:33] = signature.r
    packed[33:65] = signature.s
    packed[65] = SignatureType.ETH_SIGN
    return bytes(packed)


def is_null_address(address: Address) -> bool:
    return HexBytes(address) == HexBytes(NULL_ADDRESS)


def parse_uint256(value: object, field: str) -> int:
    """Parse a base-10 uint256 string."""
    if not isinstance(value, str) or not _DECIMAL_RE.fullmatch(value):
        raise ParseError(f'unable to unmarshal value for "{field}"', field=field, value=value)

    parsed = int(value, 10)
    if parsed > UINT256_MAX:
        raise ParseError(f'value for "{field}" exceeds uint256', field=field, value=value)
    return parsed


def parse_hex_bytes(value: object, field: str) -> bytes:
    """Decode a 0x-prefixed, even-length hex string."""
    if not isinstance(value, str) or not _HEX_RE.fullmatch(value):
        raise ParseError(f'invalid hex value for "{field}"', field=field, value=value)
    return bytes.fromhex(value[2:])


def parse_address(value: object, field: str) -> ChecksumAddress:
    if not isinstance(value, str) or not is_hex_address(value):
        raise ParseError(f'invalid address for "{field}"', field=field, value=value)
    return to_checksum_address(value)


def to_hex(data: bytes) -> str:
    """Lowercase 0x-prefixed hex; empty data renders as ``0x``."""
    return "0x" + bytes(data).hex()


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
