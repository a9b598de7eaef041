"""Exception hierarchy for the 0x helper library."""

from typing import Any


class ZeroExHelperError(Exception):
    """Base exception for all 0x helper errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ChainLookupError(ZeroExHelperError):
    """Raised when no contract addresses are registered for a chain ID."""

    def __init__(self, chain_id: int, details: dict | None = None):
        super().__init__(f"No 0x contract addresses registered for chain ID {chain_id}", details)
        self.chain_id = chain_id


class RandomSourceError(ZeroExHelperError):
    """Raised when the secure random source cannot produce a salt."""

    pass


class ParseError(ZeroExHelperError):
    """Raised when a JSON field cannot be decoded."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class SigningError(ZeroExHelperError):
    """Raised when a signer cannot produce a signature."""

    def __init__(self, message: str, address: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.address = address


class NetworkError(ZeroExHelperError):
    """Raised when RPC calls or transaction submission fail."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint


class FillValidationError(ZeroExHelperError):
    """Base class for errors returned by fill validation."""

    pass


class ValidationRejected(FillValidationError):
    """Raised when the order validator rejects an order."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.code = code


class ValidationIncomplete(FillValidationError):
    """Raised when the validator neither accepts nor rejects a single order."""

    def __init__(self, accepted: int, rejected: int):
        super().__init__(
            "unable to validate order",
            details={"accepted": accepted, "rejected": rejected},
        )
        self.accepted = accepted
        self.rejected = rejected


class InsufficientFundsError(FillValidationError):
    """Raised when the taker cannot cover the fill amount."""

    kind = "funds"

    def __init__(self, have: int, want: int, details: dict | None = None):
        super().__init__(
            f"taker has insufficient {self.kind} for trade: (has: {have}), (want: {want})",
            details,
        )
        self.have = have
        self.want = want


class InsufficientAllowance(InsufficientFundsError):
    """Raised when the taker's asset proxy allowance is below the fill amount."""

    kind = "allowance"


class InsufficientBalance(InsufficientFundsError):
    """Raised when the taker's balance is below the fill amount."""

    kind = "balance"
