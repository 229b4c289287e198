"""Command-line viewer for the collection.

Usage:
    python -m mintview.cli recent [--network NETWORK] [-v]
    python -m mintview.cli owned <wallet_address> [--network NETWORK] [-v]

Examples:
    # Ten most recent mints, one JSON object per line
    python -m mintview.cli recent

    # Tokens held by a wallet, with DEBUG logging
    python -m mintview.cli owned 0x1234567890123456789012345678901234567890 -v
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace

import httpx
import structlog

from mintview.core.config import CONTRACT_ADDRESS, Settings, configure_logging
from mintview.models.fetch_state import FetchStatus
from mintview.services.blockchain.recent_mints import RecentMintScanner
from mintview.services.blockchain.rpc_client import AlchemyRPCClient
from mintview.services.metadata.alchemy_nft_client import AlchemyNFTClient
from mintview.services.owned_tokens import OwnedTokenFetcher

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    # Options shared by every subcommand, accepted after the subcommand name
    common = ArgumentParser(add_help=False)

    common.add_argument(
        "--network",
        type=str,
        help="Override network setting (BASE_SEPOLIA or BASE_MAINNET)",
    )

    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    parser = ArgumentParser(description="Browse recent mints and owned tokens of the collection")
    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("recent", parents=[common], help="Show the most recent mints")
    owned = subcommands.add_parser("owned", parents=[common], help="Show tokens held by a wallet")
    owned.add_argument("wallet_address", help="Wallet address (0x + 40 hex characters)")

    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (success), 1 (error)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]

    if args.network:
        settings.network = args.network

    if args.verbose:
        settings.log_level = "DEBUG"

    configure_logging(settings)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http:
        nft_client = AlchemyNFTClient(http, settings, CONTRACT_ADDRESS)

        if args.command == "recent":
            scanner = RecentMintScanner(AlchemyRPCClient(http, settings), nft_client, settings)
            state = await scanner.refetch()
        else:
            fetcher = OwnedTokenFetcher(nft_client, settings)
            state = await fetcher.refetch(args.wallet_address)

    if state.status == FetchStatus.FAILURE:
        logger.error("cli.fetch_failed", command=args.command, error=state.error)
        return 1

    for item in state.data:
        print(item.model_dump_json())

    logger.info("cli.complete", command=args.command, count=len(state.data))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Synchronous wrapper for async main."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
