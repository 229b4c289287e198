"""FastAPI dependencies for accessing application-scoped services.

The fetchers are created once in the application lifespan and stored on
``app.state``; routes receive them through these dependencies.
"""

from fastapi import Request

from mintview.core.config import Settings
from mintview.services.blockchain.recent_mints import RecentMintScanner
from mintview.services.owned_tokens import OwnedTokenFetcher


def get_settings(request: Request) -> Settings:
    """Get the settings instance the application was created with."""
    return request.app.state.settings


def get_recent_mint_scanner(request: Request) -> RecentMintScanner:
    """Get the shared RecentMintScanner from app state.

    Example:
        >>> @router.get("/endpoint")
        >>> async def endpoint(scanner=Depends(get_recent_mint_scanner)):
        ...     return scanner.state
    """
    return request.app.state.recent_mint_scanner


def get_owned_token_fetcher(request: Request) -> OwnedTokenFetcher:
    """Get the shared OwnedTokenFetcher from app state."""
    return request.app.state.owned_token_fetcher
