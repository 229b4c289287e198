"""Alchemy JSON-RPC client for head-block and event-log queries."""

from typing import Any

import httpx
import structlog
from web3 import Web3

from mintview.core.config import Settings
from mintview.services.exceptions import RPCResponseError, RPCTransportError

logger = structlog.get_logger()


class AlchemyRPCClient:
    """Minimal async JSON-RPC client (eth_blockNumber, eth_getLogs)."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        """Initialize RPC client.

        Args:
            http: Shared async HTTP client (owned by the caller)
            settings: Application settings (API key, network)
        """
        self.http = http
        self.settings = settings

    async def call(self, method: str, params: list[Any]) -> Any:
        """Send a single JSON-RPC request and return its ``result``.

        Raises:
            ConfigurationError: ALCHEMY_API_KEY missing (raised on first use)
            RPCTransportError: Timeout, connection failure or non-OK HTTP status
            RPCResponseError: Response carries an ``error`` field or is not JSON
        """
        # Resolved per call so that a missing key surfaces at first use
        url = self.settings.rpc_url()
        payload = {"id": 1, "jsonrpc": "2.0", "method": method, "params": params}

        try:
            response = await self.http.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise RPCTransportError(f"{method} request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise RPCTransportError(f"{method} request failed: {e}") from e

        if response.status_code == 429:
            raise RPCTransportError(f"{method} rate limit exceeded (429)")
        if not response.is_success:
            raise RPCTransportError(f"{method} failed with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise RPCResponseError(f"{method} returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise RPCResponseError(f"{method} returned an unexpected body")

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCResponseError(
                    error.get("message") or f"{method} failed", code=error.get("code")
                )
            raise RPCResponseError(str(error))

        return body.get("result")

    async def get_block_number(self) -> int:
        """Return the current head block number."""
        result = await self.call("eth_blockNumber", [])
        if not isinstance(result, str):
            raise RPCResponseError("eth_blockNumber returned no result")
        try:
            return int(result, 16)
        except ValueError as e:
            raise RPCResponseError(f"eth_blockNumber returned invalid hex: {result}") from e

    async def get_logs(
        self,
        address: str,
        topics: list[str],
        from_block: int,
        to_block: int,
    ) -> list[dict[str, Any]]:
        """Return raw log objects for ``address``/``topics`` in [from_block, to_block].

        Logs are returned undecoded (hex strings), as the node sent them.
        """
        logger.debug(
            "rpc.eth_getLogs",
            from_block=hex(from_block),
            to_block=hex(to_block),
        )
        result = await self.call(
            "eth_getLogs",
            [
                {
                    "address": Web3.to_checksum_address(address),
                    "topics": topics,
                    "fromBlock": hex(from_block),
                    "toBlock": hex(to_block),
                }
            ],
        )
        if result is None:
            return []
        if not isinstance(result, list):
            raise RPCResponseError("eth_getLogs returned an unexpected result")
        return result
