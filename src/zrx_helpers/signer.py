"""Signers producing 0x EthSign signatures."""

from __future__ import annotations

import logging
from typing import Protocol, cast

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes

from .exceptions import SigningError
from .types import Address, ECSignature

logger = logging.getLogger(__name__)


class Signer(Protocol):
    """Anything able to personal-sign a 32-byte hash for an address."""

    def eth_sign(self, message: bytes, signer_address: Address) -> ECSignature: ...


class LocalSigner:
    """Sign with in-process private keys held by ``eth_account``."""

    def __init__(self, *accounts: LocalAccount) -> None:
        self._accounts = {HexBytes(account.address): account for account in accounts}

    @classmethod
    def from_keys(cls, *private_keys: str) -> LocalSigner:
        accounts = []
        for private_key in private_keys:
            try:
                accounts.append(cast(LocalAccount, Account.from_key(private_key)))
            except Exception as exc:
                raise SigningError(
                    "Failed to derive signer account from provided private key",
                    details={"error": str(exc)},
                ) from exc
        return cls(*accounts)

    @property
    def addresses(self) -> list[str]:
        return [account.address for account in self._accounts.values()]

    def eth_sign(self, message: bytes, signer_address: Address) -> ECSignature:
        """Sign ``message`` with the EIP-191 personal message prefix."""
        account = self._accounts.get(HexBytes(signer_address))
        if account is None:
            raise SigningError("No key available for signer address", address=signer_address)

        signed = account.sign_message(encode_defunct(primitive=bytes(message)))
        logger.debug("Signed %s for %s", HexBytes(message).to_0x_hex(), account.address)
        return ECSignature(
            v=signed.v,
            r=signed.r.to_bytes(32, "big"),
            s=signed.s.to_bytes(32, "big"),
        )
