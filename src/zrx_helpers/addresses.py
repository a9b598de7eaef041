"""Deployed 0x v3 contract addresses, indexed by chain ID."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from web3 import Web3
from web3.types import ChecksumAddress

from .constants import ZERO_EX_TEST_CHAIN_ID
from .exceptions import ChainLookupError


@dataclass(frozen=True)
class ContractAddresses:
    """Addresses of the 0x v3 contracts used by the helper."""

    exchange: ChecksumAddress
    erc20_proxy: ChecksumAddress
    dev_utils: ChecksumAddress
    weth9: ChecksumAddress
    zrx_token: ChecksumAddress
    coordinator: ChecksumAddress | None = None

    @classmethod
    def from_hex(cls, **addresses: str | None) -> ContractAddresses:
        """Build from (possibly lowercase) hex strings."""

        return cls(
            **{
                name: Web3.to_checksum_address(value) if value is not None else None
                for name, value in addresses.items()
            }
        )


CONTRACT_ADDRESSES: dict[int, ContractAddresses] = {
    1: ContractAddresses.from_hex(
        exchange="0x61935cbdd02287b511119ddb11aeb42f1593b7ef",
        erc20_proxy="0x95e6f48254609a6ee006f7d493c8e5fb97094cef",
        dev_utils="0x74134cf88b21383713e096a5ecf59e297dc7f547",
        weth9="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
        zrx_token="0xe41d2489571d322189246dafa5ebde1f4699f498",
        coordinator="0x38a795580d0f687e399913a00ddef6a17612c722",
    ),
    ZERO_EX_TEST_CHAIN_ID: ContractAddresses.from_hex(
        exchange="0x48bacb9266a570d521063ef5dd96e61686dbe788",
        erc20_proxy="0x1dc4c1cefef38a777b15aa20260a54e584b16c48",
        dev_utils="0xb23672f74749bf7916ba6827c64111a4d6de7f11",
        weth9="0x0b1ba0af832d7c05fd64161e0db78e85978e8082",
        zrx_token="0x871dd7c2b4b25e1aa18728e9d5f2af4c4e431f5c",
        coordinator="0x4d3d5c850dd5bd9d6f4adda3dd039a3c8054ca29",
    ),
}


def get_contract_addresses_for_chain_id(
    chain_id: int,
    registry: Mapping[int, ContractAddresses] | None = None,
) -> ContractAddresses:
    """Return the contract addresses deployed on ``chain_id``.

    Args:
        chain_id: EIP-155 chain ID
        registry: Optional override table, consulted instead of the built-in one

    Returns:
        Contract addresses for the chain

    Raises:
        ChainLookupError: If the chain ID is not registered
    """
    table = CONTRACT_ADDRESSES if registry is None else registry
    try:
        return table[int(chain_id)]
    except KeyError:
        raise ChainLookupError(int(chain_id), details={"known": sorted(table)}) from None
