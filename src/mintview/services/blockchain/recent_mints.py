"""Recent mint discovery by backward windowed log scanning.

There is no index behind this viewer, so the latest mints are found live:

1. Ask the node for the head block
2. Query eth_getLogs for [head - window, head], then slide the window backward
   one block range at a time until enough logs are collected or genesis is reached
3. Decode, drop malformed logs, sort by block number descending, keep the top N
4. Resolve metadata for each kept mint, one token at a time

Window queries run strictly one after another so the scan stops as soon as it has
enough logs. A failure anywhere in steps 1-2 aborts the whole call; metadata
failures in step 4 only blank out that token's metadata.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from mintview.core.config import (
    CONTRACT_ADDRESS,
    MINT_EVENT_TOPIC,
    RECENT_MINT_LIMIT,
    SCAN_WINDOW_BLOCKS,
    Settings,
)
from mintview.models.fetch_state import FetchState, FetchStore
from mintview.models.mint_event import EnrichedMintRecord, MintEvent
from mintview.services.blockchain.mint_log_decoder import decode_mint_log
from mintview.services.blockchain.rpc_client import AlchemyRPCClient
from mintview.services.exceptions import ServiceError
from mintview.services.metadata.alchemy_nft_client import AlchemyNFTClient

logger = structlog.get_logger()


@dataclass
class LogScanResult:
    """Raw outcome of a backward scan."""

    head_block: int
    logs: list[dict[str, Any]]
    window_count: int


async def scan_recent_logs(
    rpc: AlchemyRPCClient,
    contract_address: str,
    event_topic: str,
    limit: int,
    window_size: int = SCAN_WINDOW_BLOCKS,
) -> LogScanResult:
    """Collect at least ``limit`` matching logs, newest block ranges first.

    Windows are inclusive on both ends and consecutive windows share their
    boundary block. The last window is clamped at block 0, so the scan issues at
    most ceil(head / window_size) queries (one when head is 0).

    Raises:
        ServiceError: Head block or any window query failed
    """
    head_block = await rpc.get_block_number()

    to_block = head_block
    from_block = head_block - window_size
    collected: list[dict[str, Any]] = []
    window_count = 0

    while True:
        window_count += 1
        logs = await rpc.get_logs(contract_address, [event_topic], max(from_block, 0), to_block)
        collected.extend(logs)

        logger.debug(
            "recent_mints.scan.window",
            from_block=max(from_block, 0),
            to_block=to_block,
            logs=len(logs),
            collected=len(collected),
        )

        if len(collected) >= limit or from_block <= 0:
            break

        to_block = from_block
        from_block -= window_size

    return LogScanResult(head_block=head_block, logs=collected, window_count=window_count)


def dedupe_logs(logs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop repeated logs (a log in a shared boundary block is returned twice)."""
    seen: set[tuple] = set()
    unique: list[dict[str, Any]] = []

    for log in logs:
        if log.get("logIndex") is not None:
            key: tuple = (log.get("transactionHash"), log.get("logIndex"))
        else:
            key = (log.get("transactionHash"), tuple(log.get("topics") or ()), log.get("data"))
        if key in seen:
            continue
        seen.add(key)
        unique.append(log)

    return unique


def select_most_recent(events: list[MintEvent], limit: int) -> list[MintEvent]:
    """Sort by block number, newest first, and keep the first ``limit``.

    The sort is stable: mints from the same block keep the order they were
    decoded in.
    """
    return sorted(events, key=lambda event: event.block_number, reverse=True)[:limit]


class RecentMintScanner:
    """Fetcher exposing the most recent mints as observable FetchState."""

    def __init__(
        self,
        rpc: AlchemyRPCClient,
        nft_client: AlchemyNFTClient,
        settings: Settings,
        contract_address: str = CONTRACT_ADDRESS,
        event_topic: str = MINT_EVENT_TOPIC,
        limit: int = RECENT_MINT_LIMIT,
        window_size: int = SCAN_WINDOW_BLOCKS,
        on_log_dropped: Optional[Callable[[dict[str, Any]], None]] = None,
    ):
        """Initialize scanner.

        Args:
            rpc: JSON-RPC client for head block and log queries
            nft_client: NFT API client used to resolve metadata
            settings: Application settings (chain label)
            contract_address: Collection contract address
            event_topic: topics[0] of the mint event
            limit: Number of mints to return
            window_size: Blocks per eth_getLogs query
            on_log_dropped: Called with every raw log that fails decoding
        """
        self.rpc = rpc
        self.nft_client = nft_client
        self.settings = settings
        self.contract_address = contract_address
        self.event_topic = event_topic
        self.limit = limit
        self.window_size = window_size
        self.on_log_dropped = on_log_dropped

        self.store: FetchStore[EnrichedMintRecord] = FetchStore("recent_mints")
        self.dropped_log_count = 0

    @property
    def state(self) -> FetchState[EnrichedMintRecord]:
        return self.store.state

    @property
    def recent_mints(self) -> list[EnrichedMintRecord]:
        return self.store.state.data

    @property
    def is_loading(self) -> bool:
        return self.store.state.is_loading

    @property
    def error(self) -> Optional[str]:
        return self.store.state.error

    def decode_logs(self, logs: list[dict[str, Any]]) -> list[MintEvent]:
        """Decode raw logs, counting and reporting the ones that are dropped."""
        events: list[MintEvent] = []
        for log in logs:
            event = decode_mint_log(log)
            if event is None:
                self.dropped_log_count += 1
                if self.on_log_dropped is not None:
                    self.on_log_dropped(log)
                continue
            events.append(event)
        return events

    async def enrich(self, events: list[MintEvent]) -> list[EnrichedMintRecord]:
        """Attach metadata to each event, sequentially and in list order."""
        records: list[EnrichedMintRecord] = []

        for event in events:
            try:
                metadata = await self.nft_client.fetch_token_metadata(event.token_id)
            except Exception as e:
                # Resolver contract is "never raises"; keep the mint either way
                logger.warning(
                    "recent_mints.metadata_error",
                    token_id=event.token_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                metadata = None

            records.append(
                EnrichedMintRecord.from_event(
                    event,
                    metadata=metadata,
                    contract_address=self.contract_address,
                    chain=self.settings.chain,
                )
            )

        return records

    async def discover(self) -> list[EnrichedMintRecord]:
        """Run one full discovery (scan, decode, order, enrich).

        Returns:
            Up to ``limit`` enriched records, newest block first

        Raises:
            ServiceError: Configuration, transport or RPC failure
        """
        start_time = time.time()

        scan = await scan_recent_logs(
            self.rpc,
            contract_address=self.contract_address,
            event_topic=self.event_topic,
            limit=self.limit,
            window_size=self.window_size,
        )
        unique_logs = dedupe_logs(scan.logs)
        events = select_most_recent(self.decode_logs(unique_logs), self.limit)
        records = await self.enrich(events)

        logger.info(
            "recent_mints.discovered",
            head_block=scan.head_block,
            windows=scan.window_count,
            raw_logs=len(scan.logs),
            duplicate_logs=len(scan.logs) - len(unique_logs),
            records=len(records),
            missing_metadata=sum(1 for record in records if record.metadata is None),
            duration_seconds=time.time() - start_time,
        )
        return records

    async def refetch(self) -> FetchState[EnrichedMintRecord]:
        """Re-run discovery and publish the outcome.

        On success the previous list is replaced wholesale. On failure the previous
        list stays and ``error`` is set. If a newer refetch started meanwhile, this
        call's outcome is discarded.
        """
        generation = self.store.begin()
        logger.info("recent_mints.refetch.started", generation=generation)

        try:
            records = await self.discover()
        except ServiceError as e:
            logger.error(
                "recent_mints.refetch.failed",
                generation=generation,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.store.fail(generation, str(e))
        except Exception as e:
            logger.error(
                "recent_mints.refetch.unexpected_error",
                generation=generation,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            self.store.fail(generation, str(e) or "Failed to fetch recent mint events")
        else:
            self.store.succeed(generation, records)

        return self.store.state
