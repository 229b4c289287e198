"""Application configuration using Pydantic BaseSettings.

Collection constants (contract, mint event topic, scan window) are fixed for the
deployed contract and live here as module-level values. Everything that varies per
deployment is read from the environment by ``Settings``.
"""

import logging
from typing import Final

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mintview.services.exceptions import ConfigurationError

# Deployed collection on Base mainnet
CONTRACT_ADDRESS: Final = "0xc011Ec7Ca575D4f0a2eDA595107aB104c7Af7A09"

# topics[0] of the contract's mint event:
#   topics[1] = recipient (address), topics[2] = tokenId, topics[3] = caster FID
#   data[0:32] = cast hash
MINT_EVENT_TOPIC: Final = "0xcf6fbb9dcea7d07263ab4f5c3a92f53af33dffc421d9d121e1c74b307e68189d"

SCAN_WINDOW_BLOCKS: Final = 500
RECENT_MINT_LIMIT: Final = 10
TOKEN_TYPE: Final = "ERC721"

NETWORK_HOSTS: Final = {
    "BASE_MAINNET": "base-mainnet.g.alchemy.com",
    "BASE_SEPOLIA": "base-sepolia.g.alchemy.com",
}

NETWORK_CHAINS: Final = {
    "BASE_MAINNET": "base",
    "BASE_SEPOLIA": "base-sepolia",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS Configuration
    cors_origins: str = Field(default="http://localhost:3000", alias="CORS_ORIGINS")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Alchemy (RPC + NFT API share one key)
    # Empty by default: a missing key only fails the first request that needs it
    alchemy_api_key: str = Field(default="", alias="ALCHEMY_API_KEY")
    network: str = Field(default="BASE_MAINNET", alias="NETWORK")
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")

    # Mini-app manifest (/.well-known/farcaster.json)
    app_url: str = Field(default="http://localhost:8000", alias="APP_URL")
    project_title: str = Field(default="Cast Collectibles", alias="PROJECT_TITLE")
    farcaster_association_header: str = Field(default="", alias="FARCASTER_ASSOCIATION_HEADER")
    farcaster_association_payload: str = Field(
        default="", alias="FARCASTER_ASSOCIATION_PAYLOAD"
    )
    farcaster_association_signature: str = Field(
        default="", alias="FARCASTER_ASSOCIATION_SIGNATURE"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def chain(self) -> str:
        """Chain label attached to every record (e.g. "base")."""
        return NETWORK_CHAINS.get(self.network, self.network.lower())

    def rpc_url(self) -> str:
        """Build the Alchemy JSON-RPC URL for the configured network.

        The NFT API endpoints (getNFTMetadata, getNFTs) hang off the same URL.

        Raises:
            ConfigurationError: If ALCHEMY_API_KEY is missing or NETWORK is unsupported
        """
        if not self.alchemy_api_key:
            raise ConfigurationError("ALCHEMY_API_KEY is not configured")

        host = NETWORK_HOSTS.get(self.network)
        if host is None:
            raise ConfigurationError(f"Unsupported network: {self.network}")

        return f"https://{host}/v2/{self.alchemy_api_key}"


def configure_logging(settings: Settings) -> None:
    """Configure structlog based on application environment.

    - Production: JSON output for log aggregation
    - Development: Console output for human readability
    """
    level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)

    if settings.app_env == "production":
        # JSON output for production (log aggregation)
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        # Console output for development (human-readable)
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.dev.ConsoleRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
