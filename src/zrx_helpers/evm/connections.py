"""Connection helpers for the 0x helper client."""

from __future__ import annotations

import logging
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import HTTPProvider, Web3
from web3.contract import Contract
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..abi import DevUtils_abi, Exchange_abi
from ..addresses import ContractAddresses, get_contract_addresses_for_chain_id
from ..exceptions import NetworkError, SigningError
from .config import ZeroExHelperConfig

logger = logging.getLogger(__name__)

SIGNER_MIDDLEWARE_NAME = "zrx_helpers_signer"


class Web3Connections:
    """Manage the Web3 provider, signing middleware and 0x contract handles."""

    def __init__(self, config: ZeroExHelperConfig, web3: Web3 | None = None):
        self.config = config
        self._external_web3 = web3
        self._web3: Web3 | None = None
        self._account: LocalAccount | None = None
        self._chain_id: int | None = None
        self._addresses: ContractAddresses | None = None
        self._exchange: Contract | None = None
        self._dev_utils: Contract | None = None
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Resolve the chain ID, contract addresses and contract handles."""

        web3 = self._external_web3 or self._build_web3_provider(self.config.rpc_url)

        if self.config.private_key:
            try:
                signer = cast(LocalAccount, Account.from_key(self.config.private_key))
            except Exception as exc:
                raise SigningError(
                    "Failed to derive signer account from provided private key",
                    details={"error": str(exc)},
                ) from exc
            self._apply_account_middleware(web3, signer)
            self._account = signer

        try:
            chain_id = int(web3.eth.chain_id)
        except Exception as exc:
            raise NetworkError(
                "Failed to fetch chain ID", endpoint=self.config.rpc_url, details={"error": str(exc)}
            ) from exc

        addresses = get_contract_addresses_for_chain_id(chain_id, self.config.contract_addresses)

        self._web3 = web3
        self._chain_id = chain_id
        self._addresses = addresses
        self._exchange = web3.eth.contract(address=addresses.exchange, abi=Exchange_abi)
        self._dev_utils = web3.eth.contract(address=addresses.dev_utils, abi=DevUtils_abi)
        self._connected = True
        logger.info(
            "Connected to chain_id=%s exchange=%s at %s",
            chain_id,
            addresses.exchange,
            self.config.rpc_url,
        )

    def disconnect(self) -> None:
        self._web3 = None
        self._account = None
        self._chain_id = None
        self._addresses = None
        self._exchange = None
        self._dev_utils = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise NetworkError("0x helper is not connected", endpoint=self.config.rpc_url)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise NetworkError("RPC provider not connected", endpoint=self.config.rpc_url)
        return self._web3

    @property
    def account(self) -> LocalAccount | None:
        return self._account

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            raise NetworkError("Chain ID not available; call connect() first")
        return self._chain_id

    @property
    def contract_addresses(self) -> ContractAddresses:
        if self._addresses is None:
            raise NetworkError("Contract addresses not available; call connect() first")
        return self._addresses

    @property
    def exchange(self) -> Contract:
        if self._exchange is None:
            raise NetworkError(
                "Exchange contract not available; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._exchange

    @property
    def dev_utils(self) -> Contract:
        if self._dev_utils is None:
            raise NetworkError(
                "DevUtils contract not available; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._dev_utils

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3_provider(self, rpc_url: str) -> Web3:
        provider = HTTPProvider(rpc_url, request_kwargs={"timeout": self.config.request_timeout})
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to RPC", endpoint=rpc_url)
        return web3

    def _apply_account_middleware(self, web3: Web3, account: LocalAccount) -> None:
        # one signing layer per provider, even across reconnects
        if SIGNER_MIDDLEWARE_NAME in web3.middleware_onion:
            web3.middleware_onion.remove(SIGNER_MIDDLEWARE_NAME)
        web3.middleware_onion.add(
            SignAndSendRawMiddlewareBuilder.build(account),  # type: ignore[arg-type]
            name=SIGNER_MIDDLEWARE_NAME,
        )
        web3.eth.default_account = account.address
