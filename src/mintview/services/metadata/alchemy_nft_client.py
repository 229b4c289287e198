"""Alchemy NFT API client: token metadata resolution and owner token listing."""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from mintview.core.config import TOKEN_TYPE, Settings
from mintview.models.token import TokenMetadata
from mintview.services.exceptions import NFTAPIError

logger = structlog.get_logger()


def normalize_token_id(raw: str) -> str:
    """Render a token ID reported as hex ("0x2a") or decimal ("42") as decimal."""
    raw = raw.strip()
    if raw.lower().startswith("0x"):
        return str(int(raw, 16))
    return str(int(raw))


class AlchemyNFTClient:
    """Read-only client for the Alchemy NFT API of a single contract.

    Stateless apart from its configuration: no response caching, so it is safe to
    share between fetchers and to call concurrently.
    """

    def __init__(self, http: httpx.AsyncClient, settings: Settings, contract_address: str):
        """Initialize NFT API client.

        Args:
            http: Shared async HTTP client (owned by the caller)
            settings: Application settings (API key, network)
            contract_address: Collection contract address
        """
        self.http = http
        self.settings = settings
        self.contract_address = contract_address

    async def fetch_token_metadata(self, token_id: str) -> Optional[TokenMetadata]:
        """Resolve metadata for one token.

        Never raises: configuration, transport, HTTP status and parse failures are
        logged and turned into None so that callers can keep going with the next
        token.

        Args:
            token_id: Decimal token ID

        Returns:
            Parsed metadata, or None if unavailable
        """
        try:
            response = await self.http.get(
                f"{self.settings.rpc_url()}/getNFTMetadata",
                params={
                    "contractAddress": self.contract_address,
                    "tokenId": token_id,
                    "tokenType": TOKEN_TYPE,
                },
                headers={"accept": "application/json"},
            )

            if not response.is_success:
                logger.warning(
                    "metadata.fetch_failed",
                    token_id=token_id,
                    status_code=response.status_code,
                )
                return None

            body = response.json()
            raw_metadata = body.get("metadata") if isinstance(body, dict) else None
            if not raw_metadata:
                logger.debug("metadata.missing", token_id=token_id)
                return None

            return TokenMetadata.model_validate(raw_metadata)

        except ValidationError as e:
            logger.warning(
                "metadata.invalid",
                token_id=token_id,
                error_count=e.error_count(),
            )
            return None
        except Exception as e:
            logger.warning(
                "metadata.fetch_error",
                token_id=token_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def get_owned_token_ids(self, owner: str) -> list[str]:
        """List decimal token IDs of this contract held by ``owner``.

        Follows ``pageKey`` until the listing is exhausted.

        Raises:
            ConfigurationError: ALCHEMY_API_KEY missing
            NFTAPIError: Network failure, non-OK status or malformed body
        """
        url = f"{self.settings.rpc_url()}/getNFTs"
        token_ids: list[str] = []
        page_key: Optional[str] = None
        seen_page_keys: set[str] = set()

        while True:
            params: dict[str, Any] = {
                "owner": owner,
                "contractAddresses[]": self.contract_address,
                "withMetadata": "false",
            }
            if page_key:
                params["pageKey"] = page_key

            try:
                response = await self.http.get(
                    url, params=params, headers={"accept": "application/json"}
                )
            except httpx.HTTPError as e:
                raise NFTAPIError(f"Failed to fetch NFTs for owner: {e}") from e

            if not response.is_success:
                raise NFTAPIError(
                    f"Failed to fetch NFTs for owner (HTTP {response.status_code})"
                )

            try:
                body = response.json()
                owned = body.get("ownedNfts") or []
                for nft in owned:
                    token_ids.append(normalize_token_id(nft["id"]["tokenId"]))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise NFTAPIError(f"Malformed getNFTs response: {e}") from e

            page_key = body.get("pageKey")
            if not page_key or page_key in seen_page_keys:
                break
            seen_page_keys.add(page_key)

        logger.debug("nft_api.owned_tokens", owner=owner, count=len(token_ids))
        return token_ids
