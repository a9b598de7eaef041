"""Protocol constants for 0x v3."""

from enum import IntEnum

# Ethereum address with 20 null bytes
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# bytes4(keccak256("ERC20Token(address)"))
# https://github.com/0xProject/0x-protocol-specification/blob/master/v3/v3-specification.md#assetdata
ERC20_ASSET_DATA_ID = "f47261b0"
ASSET_DATA_LENGTH = 36
ASSET_DATA_PREFIX_LENGTH = 4

ZERO_EX_PROTOCOL_NAME = "0x Protocol"
ZERO_EX_PROTOCOL_VERSION = "3.0.0"

# Chain ID of the 0x ganache snapshot network
ZERO_EX_TEST_CHAIN_ID = 1337

# Multiplier applied to a fill's gas price; the product is paid in ETH.
# https://github.com/0xProject/0x-protocol-specification/blob/master/v3/v3-specification.md#protocol-fees
PROTOCOL_FEE_MULTIPLIER = 150000

# Max gas (with buffer) of a single fill, including settling an ended staking epoch
EXECUTE_FILL_TX_GAS_LIMIT = 330000

EC_SIGNATURE_LENGTH = 66

UINT256_MAX = 2**256 - 1


class SignatureType(IntEnum):
    """0x v3 signature type tags (trailing byte of a signature)."""

    ILLEGAL = 0
    INVALID = 1
    EIP712 = 2
    ETH_SIGN = 3
    WALLET = 4
    VALIDATOR = 5
    PRE_SIGNED = 6
    EIP1271_WALLET = 7


class OrderStatus(IntEnum):
    """Order status codes reported by the Exchange and DevUtils contracts."""

    INVALID = 0
    INVALID_MAKER_ASSET_AMOUNT = 1
    INVALID_TAKER_ASSET_AMOUNT = 2
    FILLABLE = 3
    EXPIRED = 4
    FULLY_FILLED = 5
    CANCELLED = 6
