"""Owned-token fetcher: tokens of the collection held by one wallet."""

from typing import Optional

import structlog
from web3 import Web3

from mintview.core.config import CONTRACT_ADDRESS, Settings
from mintview.models.fetch_state import FetchState, FetchStore
from mintview.models.token import OwnedToken
from mintview.services.exceptions import InvalidAddressError, ServiceError
from mintview.services.metadata.alchemy_nft_client import AlchemyNFTClient

logger = structlog.get_logger()


class OwnedTokenFetcher:
    """Lists a wallet's tokens and resolves metadata for each of them."""

    def __init__(
        self,
        nft_client: AlchemyNFTClient,
        settings: Settings,
        contract_address: str = CONTRACT_ADDRESS,
    ):
        self.nft_client = nft_client
        self.settings = settings
        self.contract_address = contract_address

        self.store: FetchStore[OwnedToken] = FetchStore("owned_tokens")
        self.owner: Optional[str] = None

    @property
    def state(self) -> FetchState[OwnedToken]:
        return self.store.state

    async def fetch(self, owner: str) -> list[OwnedToken]:
        """List and enrich tokens held by ``owner``.

        Raises:
            InvalidAddressError: ``owner`` is not a valid address
            ServiceError: Configuration or NFT API failure
        """
        if not Web3.is_address(owner):
            raise InvalidAddressError(f"Invalid wallet address: {owner}")

        token_ids = await self.nft_client.get_owned_token_ids(owner)

        tokens: list[OwnedToken] = []
        for token_id in token_ids:
            metadata = await self.nft_client.fetch_token_metadata(token_id)
            tokens.append(
                OwnedToken(
                    token_id=token_id,
                    metadata=metadata,
                    contract_address=self.contract_address,
                    chain=self.settings.chain,
                )
            )

        logger.info(
            "owned_tokens.fetched",
            owner=owner,
            count=len(tokens),
            missing_metadata=sum(1 for token in tokens if token.metadata is None),
        )
        return tokens

    async def refetch(self, owner: str) -> FetchState[OwnedToken]:
        """Fetch tokens for ``owner`` and publish the outcome.

        The store tracks one wallet at a time (the connected one). Callers serving
        several wallets concurrently should use ``fetch`` directly.

        Switching to another wallet clears the list first so one wallet's tokens
        are never shown under another.
        """
        switched = owner.lower() != (self.owner or "").lower()
        self.owner = owner
        generation = self.store.begin(clear=switched)

        try:
            tokens = await self.fetch(owner)
        except ServiceError as e:
            logger.error(
                "owned_tokens.refetch.failed",
                owner=owner,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.store.fail(generation, str(e))
        except Exception as e:
            logger.error(
                "owned_tokens.refetch.unexpected_error",
                owner=owner,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            self.store.fail(generation, str(e) or "Failed to fetch owned tokens")
        else:
            self.store.succeed(generation, tokens)

        return self.store.state
