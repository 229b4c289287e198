"""pytest fixtures for mintview tests.

Provides:
- settings: Settings with a test API key (no .env, no real network)
- fake_alchemy: In-memory Alchemy node + NFT API served through httpx.MockTransport
- http_client: AsyncClient wired to fake_alchemy
- rpc / nft_client: Clients under test bound to http_client
- make_log: Factory for raw eth_getLogs entries
"""

import json
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio
import structlog

from mintview.core.config import CONTRACT_ADDRESS, MINT_EVENT_TOPIC, Settings
from mintview.services.blockchain.rpc_client import AlchemyRPCClient
from mintview.services.metadata.alchemy_nft_client import AlchemyNFTClient

RECIPIENT = "0x1234567890123456789012345678901234567890"


def build_log(
    block_number: int,
    token_id: int,
    fid: int = 869999,
    to: str = RECIPIENT,
    log_index: int = 0,
    tx_hash: Optional[str] = None,
    data: Optional[str] = None,
) -> dict[str, Any]:
    """Raw log as returned by eth_getLogs (all fields hex strings)."""
    return {
        "address": CONTRACT_ADDRESS.lower(),
        "topics": [
            MINT_EVENT_TOPIC,
            "0x" + "0" * 24 + to[2:].lower(),
            "0x" + format(token_id, "064x"),
            "0x" + format(fid, "064x"),
        ],
        "data": data if data is not None else "0x" + "ab" * 32,
        "blockNumber": hex(block_number),
        "transactionHash": tx_hash or "0x" + format(token_id, "064x"),
        "logIndex": hex(log_index),
    }


class FakeAlchemy:
    """Serves eth_blockNumber, eth_getLogs, getNFTMetadata and getNFTs from memory.

    Every request is recorded in ``requests``; ``get_logs_calls`` keeps the
    (fromBlock, toBlock) pairs of each eth_getLogs call in call order.
    """

    def __init__(self, head_block: int = 1000):
        self.head_block = head_block
        self.logs: list[dict[str, Any]] = []
        self.metadata: dict[str, Any] = {}
        self.metadata_status: dict[str, int] = {}
        self.owned_pages: list[dict[str, Any]] = []
        self.rpc_status = 200
        self.rpc_error: Optional[dict[str, Any]] = None
        self.fail_get_logs_after: Optional[int] = None
        self.requests: list[httpx.Request] = []
        self.get_logs_calls: list[tuple[int, int]] = []

    def add_mint(self, block_number: int, token_id: int, **kwargs: Any) -> dict[str, Any]:
        log = build_log(block_number, token_id, **kwargs)
        self.logs.append(log)
        self.metadata.setdefault(
            str(token_id),
            {
                "name": f"cast by @alice, Token {token_id}",
                "description": "A collected cast",
                "image": f"ipfs://image-{token_id}",
                "attributes": [{"trait_type": "Author", "value": "alice"}],
            },
        )
        return log

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST":
            return self._rpc(request)
        if path.endswith("/getNFTMetadata"):
            return self._metadata(request)
        if path.endswith("/getNFTs"):
            return self._owned(request)
        return httpx.Response(404)

    def _rpc(self, request: httpx.Request) -> httpx.Response:
        if self.rpc_status != 200:
            return httpx.Response(self.rpc_status, text="upstream unavailable")

        body = json.loads(request.content)
        if self.rpc_error is not None:
            return httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "error": self.rpc_error})

        if body["method"] == "eth_blockNumber":
            result: Any = hex(self.head_block)
        elif body["method"] == "eth_getLogs":
            params = body["params"][0]
            from_block = int(params["fromBlock"], 16)
            to_block = int(params["toBlock"], 16)
            self.get_logs_calls.append((from_block, to_block))
            if (
                self.fail_get_logs_after is not None
                and len(self.get_logs_calls) > self.fail_get_logs_after
            ):
                return httpx.Response(500, text="internal error")
            result = [
                log
                for log in self.logs
                if from_block <= int(log["blockNumber"], 16) <= to_block
                and log["topics"][:1] == params["topics"]
            ]
        else:
            error = {"code": -32601, "message": "Method not found"}
            return httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "error": error})

        return httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "result": result})

    def _metadata(self, request: httpx.Request) -> httpx.Response:
        token_id = request.url.params["tokenId"]
        status = self.metadata_status.get(token_id, 200)
        if status != 200:
            return httpx.Response(status, text="error")
        return httpx.Response(200, json={"metadata": self.metadata.get(token_id)})

    def _owned(self, request: httpx.Request) -> httpx.Response:
        page_key = request.url.params.get("pageKey")
        index = int(page_key) if page_key else 0
        return httpx.Response(200, json=self.owned_pages[index])

    @property
    def metadata_requests(self) -> list[str]:
        return [
            r.url.params["tokenId"] for r in self.requests if r.url.path.endswith("/getNFTMetadata")
        ]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() calls made by the app or CLI under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Create settings for tests."""
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    settings.alchemy_api_key = "test_api_key"
    settings.network = "BASE_MAINNET"
    settings.app_env = "test"
    return settings


@pytest.fixture
def fake_alchemy() -> FakeAlchemy:
    return FakeAlchemy()


@pytest_asyncio.fixture
async def http_client(fake_alchemy: FakeAlchemy):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_alchemy.handler)) as client:
        yield client


@pytest.fixture
def rpc(http_client: httpx.AsyncClient, settings: Settings) -> AlchemyRPCClient:
    return AlchemyRPCClient(http_client, settings)


@pytest.fixture
def nft_client(http_client: httpx.AsyncClient, settings: Settings) -> AlchemyNFTClient:
    return AlchemyNFTClient(http_client, settings, CONTRACT_ADDRESS)


@pytest.fixture
def make_log():
    return build_log
