"""Type definitions shared across the 0x helper library."""

from dataclasses import dataclass

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

Address = str  # Ethereum address, any hex casing
Hash32 = HexBytes  # 32-byte Keccak-256 digest
Wei = int


@dataclass(frozen=True)
class ECSignature:
    """Elliptic curve signature components as returned by a signer."""

    v: int
    r: bytes
    s: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.v <= 0xFF:
            raise ValueError(f"Recovery id must fit in one byte, got {self.v}")
        if len(self.r) != 32 or len(self.s) != 32:
            raise ValueError("Signature r and s must be exactly 32 bytes")


@dataclass(frozen=True)
class BalanceAndAllowance:
    """Taker balance and asset proxy allowance read from DevUtils."""

    address: ChecksumAddress
    balance: int
    allowance: int
