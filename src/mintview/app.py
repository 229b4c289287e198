"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mintview.api.routes import manifest, mints, wallets
from mintview.core.config import CONTRACT_ADDRESS, Settings, configure_logging
from mintview.services.blockchain.recent_mints import RecentMintScanner
from mintview.services.blockchain.rpc_client import AlchemyRPCClient
from mintview.services.metadata.alchemy_nft_client import AlchemyNFTClient
from mintview.services.owned_tokens import OwnedTokenFetcher

logger = structlog.get_logger()


def build_services(app: FastAPI, http: httpx.AsyncClient, settings: Settings) -> None:
    """Create the fetchers on top of one shared HTTP client and store them on app.state."""
    rpc = AlchemyRPCClient(http, settings)
    nft_client = AlchemyNFTClient(http, settings, CONTRACT_ADDRESS)

    app.state.recent_mint_scanner = RecentMintScanner(rpc, nft_client, settings)
    app.state.owned_token_fetcher = OwnedTokenFetcher(nft_client, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Handles startup and shutdown tasks:
    - Startup: Configure logging, open HTTP client, build fetchers, start initial scan
    - Shutdown: Cancel a still-running initial scan, close HTTP client
    """
    settings: Settings = app.state.settings

    # Configure logging
    configure_logging(settings)

    http = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    build_services(app, http, settings)

    # Recent mints are loaded as soon as the app is up; requests don't wait for it
    initial_scan = asyncio.create_task(app.state.recent_mint_scanner.refetch())

    logger.info("application.startup", network=settings.network, contract=CONTRACT_ADDRESS)

    yield

    logger.info("application.shutdown")
    initial_scan.cancel()
    await asyncio.gather(initial_scan, return_exceptions=True)
    await http.aclose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Settings to use (loaded from environment when omitted)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings()  # type: ignore[call-arg]

    app = FastAPI(
        title="mintview",
        description="Owned tokens and recent mints for a Base NFT collection",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    app.include_router(mints.router)  # prefix="/api/mints" in definition
    app.include_router(wallets.router)  # prefix="/api/wallets" in definition
    app.include_router(manifest.router)

    @app.get("/health")
    async def health_check():
        """Liveness probe (no upstream calls)."""
        return {"status": "healthy"}

    return app


# Create app instance for uvicorn
app = create_app()
