"""Service error hierarchy for chain RPC and NFT API operations.

This module defines the exception hierarchy for service-level errors:
- ServiceError: Base for all service errors
- TransientError: Retryable errors (network, rate limits, timeouts)
- PermanentError: Non-retryable errors (configuration, validation)

Only whole-call failures are raised. Per-item problems (a malformed log, a token
whose metadata cannot be fetched) degrade to a dropped entry or a ``None`` value
and never reach these classes.
"""


class ServiceError(Exception):
    """Base exception for all service errors."""

    pass


class TransientError(ServiceError):
    """Transient error that may succeed on retry.

    Examples:
    - Network timeouts
    - Rate limit exceeded (429)
    - Service unavailable (5xx)
    """

    pass


class PermanentError(ServiceError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Missing API key
    - Unsupported network
    - Invalid wallet address
    """

    pass


class ConfigurationError(PermanentError):
    """Required configuration is missing or invalid."""

    pass


# RPC-specific errors
class RPCError(ServiceError):
    """Base exception for JSON-RPC errors."""

    pass


class RPCTransportError(RPCError, TransientError):
    """Network failure or non-OK HTTP status from the RPC endpoint."""

    pass


class RPCResponseError(RPCError):
    """RPC-level ``error`` field or malformed response body."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


# NFT API errors
class NFTAPIError(TransientError):
    """Owned-token listing failed (network or non-OK status)."""

    pass


class InvalidAddressError(PermanentError):
    """Wallet address is not a valid 20-byte hex address."""

    pass
