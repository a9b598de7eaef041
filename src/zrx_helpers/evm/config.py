"""Configuration containers for the 0x helper client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from ..addresses import ContractAddresses

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
# Upper bound on a single JSON-RPC request body sent by the order validator
DEFAULT_MAX_CONTENT_LENGTH = 524288


@dataclass(frozen=True)
class ZeroExHelperConfig:
    """Aggregated configuration used to construct the 0x helper."""

    rpc_url: str
    private_key: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH
    wait_for_receipt: bool = True
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    contract_addresses: Mapping[int, ContractAddresses] | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ZeroExHelperConfig:
        """Build a config from ``ZRX_*`` environment variables."""

        env = os.environ if environ is None else environ
        rpc_url = env.get("ZRX_RPC_URL")
        if not rpc_url:
            raise ValueError("ZRX_RPC_URL not found in environment variables")

        return cls(
            rpc_url=rpc_url,
            private_key=env.get("ZRX_PRIVATE_KEY") or None,
            request_timeout=float(env.get("ZRX_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            max_content_length=int(env.get("ZRX_MAX_CONTENT_LENGTH", DEFAULT_MAX_CONTENT_LENGTH)),
            wait_for_receipt=env.get("ZRX_WAIT_FOR_RECEIPT", "true").lower()
            not in ("0", "false", "no"),
            receipt_timeout=float(env.get("ZRX_RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT)),
        )
