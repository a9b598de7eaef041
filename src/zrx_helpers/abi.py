"""ABI fragments for the 0x v3 Exchange and DevUtils contracts."""

from typing import Any


def _param(name: str, type_: str, **extra: Any) -> dict[str, Any]:
    return {"name": name, "type": type_, "internalType": extra.pop("internal_type", type_), **extra}


_ORDER_COMPONENTS = [
    _param("makerAddress", "address"),
    _param("takerAddress", "address"),
    _param("feeRecipientAddress", "address"),
    _param("senderAddress", "address"),
    _param("makerAssetAmount", "uint256"),
    _param("takerAssetAmount", "uint256"),
    _param("makerFee", "uint256"),
    _param("takerFee", "uint256"),
    _param("expirationTimeSeconds", "uint256"),
    _param("salt", "uint256"),
    _param("makerAssetData", "bytes"),
    _param("takerAssetData", "bytes"),
    _param("makerFeeAssetData", "bytes"),
    _param("takerFeeAssetData", "bytes"),
]

_TRANSACTION_COMPONENTS = [
    _param("salt", "uint256"),
    _param("expirationTimeSeconds", "uint256"),
    _param("gasPrice", "uint256"),
    _param("signerAddress", "address"),
    _param("data", "bytes"),
]

_ORDER_INFO_COMPONENTS = [
    _param("orderStatus", "uint8", internal_type="enum LibOrder.OrderStatus"),
    _param("orderHash", "bytes32"),
    _param("orderTakerAssetFilledAmount", "uint256"),
]

Exchange_abi = [
    {
        "name": "executeTransaction",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            _param(
                "transaction",
                "tuple",
                internal_type="struct LibZeroExTransaction.ZeroExTransaction",
                components=_TRANSACTION_COMPONENTS,
            ),
            _param("signature", "bytes"),
        ],
        "outputs": [_param("", "bytes")],
    },
]

DevUtils_abi = [
    {
        "name": "getBalanceAndAssetProxyAllowance",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            _param("ownerAddress", "address"),
            _param("assetData", "bytes"),
        ],
        "outputs": [
            _param("balance", "uint256"),
            _param("allowance", "uint256"),
        ],
    },
    {
        "name": "getOrderRelevantStates",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            _param(
                "orders",
                "tuple[]",
                internal_type="struct LibOrder.Order[]",
                components=_ORDER_COMPONENTS,
            ),
            _param("signatures", "bytes[]"),
        ],
        "outputs": [
            _param(
                "ordersInfo",
                "tuple[]",
                internal_type="struct LibOrder.OrderInfo[]",
                components=_ORDER_INFO_COMPONENTS,
            ),
            _param("fillableTakerAssetAmounts", "uint256[]"),
            _param("isValidSignature", "bool[]"),
        ],
    },
]
