"""0x v3 helpers - build, hash, sign, validate and submit orders and ZEIP-18 transactions.

Orders and meta-transactions are hashed with the protocol's fixed EIP-712
layouts; chain access goes through web3 and the DevUtils contract.
"""

from .addresses import ContractAddresses, get_contract_addresses_for_chain_id
from .constants import (
    EXECUTE_FILL_TX_GAS_LIMIT,
    NULL_ADDRESS,
    PROTOCOL_FEE_MULTIPLIER,
    ZERO_EX_PROTOCOL_NAME,
    ZERO_EX_PROTOCOL_VERSION,
    ZERO_EX_TEST_CHAIN_ID,
    OrderStatus,
    SignatureType,
)
from .evm import (
    DevUtilsOrderValidator,
    OrderValidator,
    ValidationResults,
    ZeroExHelper,
    ZeroExHelperConfig,
    protocol_fee,
)
from .exceptions import (
    ChainLookupError,
    InsufficientAllowance,
    InsufficientBalance,
    NetworkError,
    ParseError,
    RandomSourceError,
    SigningError,
    ValidationIncomplete,
    ValidationRejected,
    ZeroExHelperError,
)
from .orders import Order, SignedOrder, sign_order
from .signer import LocalSigner, Signer
from .transactions import SignedTransaction, Transaction, sign_transaction
from .types import ECSignature
from .utils import (
    decode_erc20_asset_data,
    ec_signature_to_bytes,
    encode_erc20_asset_data,
    generate_pseudo_random_salt,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "ZeroExHelper",
    "ZeroExHelperConfig",
    "protocol_fee",
    "OrderValidator",
    "DevUtilsOrderValidator",
    "ValidationResults",
    # Models
    "Order",
    "SignedOrder",
    "Transaction",
    "SignedTransaction",
    "ECSignature",
    "ContractAddresses",
    # Signing
    "Signer",
    "LocalSigner",
    "sign_order",
    "sign_transaction",
    # Constants
    "NULL_ADDRESS",
    "ZERO_EX_PROTOCOL_NAME",
    "ZERO_EX_PROTOCOL_VERSION",
    "ZERO_EX_TEST_CHAIN_ID",
    "PROTOCOL_FEE_MULTIPLIER",
    "EXECUTE_FILL_TX_GAS_LIMIT",
    "SignatureType",
    "OrderStatus",
    # Exceptions
    "ZeroExHelperError",
    "ChainLookupError",
    "RandomSourceError",
    "ParseError",
    "SigningError",
    "NetworkError",
    "ValidationRejected",
    "ValidationIncomplete",
    "InsufficientAllowance",
    "InsufficientBalance",
    # Utility functions
    "encode_erc20_asset_data",
    "decode_erc20_asset_data",
    "generate_pseudo_random_salt",
    "ec_signature_to_bytes",
    "get_contract_addresses_for_chain_id",
]
