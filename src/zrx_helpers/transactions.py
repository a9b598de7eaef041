"""0x meta-transactions (ZEIP-18)."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from .addresses import ContractAddresses, get_contract_addresses_for_chain_id
from .eip712 import ZERO_EX_TRANSACTION, hash_domain, hash_typed_data, typed_data_message
from .exceptions import ParseError
from .signer import Signer
from .types import Address, Hash32
from .utils import ec_signature_to_bytes, parse_address, parse_hex_bytes, parse_uint256, to_hex

logger = logging.getLogger(__name__)

# ABI tuple type of LibZeroExTransaction.ZeroExTransaction
TRANSACTION_ABI_TYPE = "(uint256,uint256,uint256,address,bytes)"


@dataclass(frozen=True)
class Transaction:
    """A 0x transaction that can be relayed on behalf of its signer.

    Instances are immutable; use ``dataclasses.replace`` to derive a modified
    copy, which starts with an empty hash cache. Hashes are cached per
    ``(chain_id, exchange_address)`` pair.
    """

    salt: int
    expiration_time_seconds: int
    gas_price: int
    signer_address: ChecksumAddress
    data: bytes

    _hashes: dict[tuple[int, bytes], Hash32] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def as_tuple(self) -> tuple[int, int, int, ChecksumAddress, bytes]:
        return (
            self.salt,
            self.expiration_time_seconds,
            self.gas_price,
            self.signer_address,
            self.data,
        )

    def compute_hash(self, chain_id: int, exchange_address: Address) -> Hash32:
        """Return the EIP-712 transaction hash for an exchange deployment."""

        key = (int(chain_id), bytes(HexBytes(exchange_address)))
        cached = self._hashes.get(key)
        if cached is not None:
            logger.debug("Transaction hash cache hit for chain_id=%s", chain_id)
            return cached

        tx_hash = hash_typed_data(
            hash_domain(chain_id, exchange_address),
            ZERO_EX_TRANSACTION.hash_struct(self.as_tuple()),
        )
        self._hashes[key] = tx_hash
        return tx_hash

    def compute_hash_for_chain_id(
        self,
        chain_id: int,
        registry: Mapping[int, ContractAddresses] | None = None,
    ) -> Hash32:
        """Return the transaction hash against the exchange deployed on ``chain_id``.

        See https://github.com/0xProject/0x-protocol-specification/blob/master/v3/v3-specification.md#hashing-a-transaction

        Raises:
            ChainLookupError: If no exchange is registered for the chain
        """
        addresses = get_contract_addresses_for_chain_id(chain_id, registry)
        return self.compute_hash(chain_id, addresses.exchange)

    def reset_hash(self) -> None:
        """Drop every cached hash."""
        self._hashes.clear()

    def typed_data(self, chain_id: int, exchange_address: Address) -> dict[str, Any]:
        return typed_data_message(ZERO_EX_TRANSACTION, self.as_tuple(), chain_id, exchange_address)

    def to_dict(self) -> dict[str, str]:
        return {
            "salt": str(self.salt),
            "expirationTimeSeconds": str(self.expiration_time_seconds),
            "gasPrice": str(self.gas_price),
            "signerAddress": self.signer_address.lower(),
            "data": to_hex(self.data),
        }

    def to_json(self) -> str:
        return _dump(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transaction:
        return cls(**_transaction_kwargs(data))

    @classmethod
    def from_json(cls, raw: str | bytes) -> Transaction:
        return cls.from_dict(_load(raw))


@dataclass(frozen=True)
class SignedTransaction(Transaction):
    """A 0x transaction with the signer's signature."""

    signature: bytes

    @property
    def transaction(self) -> Transaction:
        return Transaction(*self.as_tuple())

    def to_dict(self) -> dict[str, str]:
        data = super().to_dict()
        data["signature"] = to_hex(self.signature)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SignedTransaction:
        kwargs = _transaction_kwargs(data)
        kwargs["signature"] = parse_hex_bytes(data.get("signature"), "signature")
        return cls(**kwargs)

    @classmethod
    def from_json(cls, raw: str | bytes) -> SignedTransaction:
        return cls.from_dict(_load(raw))


def sign_transaction(
    signer: Signer,
    tx: Transaction,
    chain_id: int,
    registry: Mapping[int, ContractAddresses] | None = None,
) -> SignedTransaction:
    """Sign the 0x transaction hash for ``chain_id`` with the supplied signer."""

    tx_hash = tx.compute_hash_for_chain_id(chain_id, registry)
    ec_signature = signer.eth_sign(bytes(tx_hash), tx.signer_address)
    return SignedTransaction(*tx.as_tuple(), signature=ec_signature_to_bytes(ec_signature))


def _transaction_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ParseError("Transaction JSON must be an object", value=data)

    return {
        "salt": parse_uint256(data.get("salt"), "salt"),
        "expiration_time_seconds": parse_uint256(
            data.get("expirationTimeSeconds"), "expirationTimeSeconds"
        ),
        "gas_price": parse_uint256(data.get("gasPrice"), "gasPrice"),
        "signer_address": parse_address(data.get("signerAddress"), "signerAddress"),
        "data": parse_hex_bytes(data.get("data"), "data"),
    }


def _dump(data: Mapping[str, str]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def _load(raw: str | bytes) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ParseError("Malformed transaction JSON", details={"error": str(exc)}) from exc
