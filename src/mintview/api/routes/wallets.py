"""Wallet endpoints.

- GET /api/wallets/{wallet_address}/tokens - Tokens of the collection held by a wallet
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from web3 import Web3

from mintview.api.dependencies import get_owned_token_fetcher
from mintview.api.schemas import OwnedTokensResponse
from mintview.models.fetch_state import FetchState, FetchStatus
from mintview.services.exceptions import ServiceError
from mintview.services.owned_tokens import OwnedTokenFetcher

logger = structlog.get_logger()
router = APIRouter(prefix="/api/wallets", tags=["wallets"])


@router.get("/{wallet_address}/tokens", response_model=OwnedTokensResponse)
async def get_wallet_tokens(
    wallet_address: str,
    fetcher: OwnedTokenFetcher = Depends(get_owned_token_fetcher),
) -> OwnedTokensResponse:
    """Fetch the wallet's tokens with metadata.

    The fetcher is shared by all requests, so the response is built from this
    request's own result and never from the fetcher's store.

    Raises:
        HTTPException: 400 if wallet_address is not a valid address
    """
    if not Web3.is_address(wallet_address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Wallet address must be 0x followed by 40 hex characters",
        )

    try:
        tokens = await fetcher.fetch(wallet_address)
    except ServiceError as e:
        logger.error(
            "wallets.tokens.failed",
            owner=wallet_address,
            error=str(e),
            error_type=type(e).__name__,
        )
        state = FetchState(status=FetchStatus.FAILURE, error=str(e))
    else:
        state = FetchState(status=FetchStatus.SUCCESS, data=tokens)

    return OwnedTokensResponse.from_state(wallet_address, state)
