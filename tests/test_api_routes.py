"""Integration tests for the HTTP API.

The application lifespan is not run by ASGITransport, so services are wired onto
app.state with the fake Alchemy HTTP client, as the lifespan would do.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mintview.app import build_services, create_app

OWNER = "0x1234567890123456789012345678901234567890"
OTHER_OWNER = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"


@pytest_asyncio.fixture
async def test_client(settings, http_client):
    """Provide AsyncClient for testing API endpoints against the fake upstream."""
    settings.app_url = "https://viewer.example/"
    settings.project_title = "Cast Collectibles"
    app = create_app(settings)
    build_services(app, http_client, settings)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
class TestRecentMintRoutes:
    """GET /api/mints/recent and POST /api/mints/recent/refetch."""

    async def test_recent_is_idle_before_first_scan(self, test_client):
        response = await test_client.get("/api/mints/recent")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "idle"
        assert data["is_loading"] is False
        assert data["records"] == []
        assert data["cards"] == []

    async def test_refetch_returns_records_and_cards(self, test_client, fake_alchemy):
        fake_alchemy.head_block = 1000
        fake_alchemy.add_mint(900, 1)
        fake_alchemy.add_mint(950, 2)
        fake_alchemy.metadata_status["1"] = 500

        response = await test_client.post("/api/mints/recent/refetch")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["error"] is None
        assert [r["token_id"] for r in data["records"]] == ["2", "1"]
        assert data["records"][1]["metadata"] is None

        cards = data["cards"]
        assert cards[0]["name"] == "Token 2"
        assert cards[0]["author"]["display"] == "@alice"
        assert cards[1]["name"] == "NFT #1"
        assert cards[1]["image_url"].startswith("data:image/svg+xml;base64,")

        # Snapshot endpoint now serves the same result without rescanning
        scans_before = len(fake_alchemy.get_logs_calls)
        snapshot = (await test_client.get("/api/mints/recent")).json()
        assert snapshot["records"] == data["records"]
        assert len(fake_alchemy.get_logs_calls) == scans_before

    async def test_failed_refetch_reports_error_and_keeps_cards(self, test_client, fake_alchemy):
        fake_alchemy.add_mint(900, 1)
        await test_client.post("/api/mints/recent/refetch")

        fake_alchemy.rpc_status = 500
        response = await test_client.post("/api/mints/recent/refetch")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failure"
        assert "HTTP 500" in data["error"]
        assert [r["token_id"] for r in data["records"]] == ["1"]


@pytest.mark.asyncio
class TestWalletRoutes:
    """GET /api/wallets/{wallet_address}/tokens."""

    async def test_wallet_tokens(self, test_client, fake_alchemy):
        fake_alchemy.owned_pages = [{"ownedNfts": [{"id": {"tokenId": "0x0b"}}]}]
        fake_alchemy.metadata["11"] = {"name": "Eleven"}

        response = await test_client.get(f"/api/wallets/{OWNER}/tokens")

        assert response.status_code == 200
        data = response.json()
        assert data["owner"] == OWNER
        assert data["status"] == "success"
        assert data["tokens"][0]["token_id"] == "11"
        assert data["cards"][0]["name"] == "Eleven"

    async def test_concurrent_wallets_each_get_their_own_tokens(self, settings, fake_alchemy):
        """A slow request for one wallet is not answered with another wallet's tokens."""
        first_entered = asyncio.Event()
        release_first = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/getNFTs"):
                if request.url.params["owner"] == OWNER:
                    first_entered.set()
                    await release_first.wait()
                    return httpx.Response(200, json={"ownedNfts": [{"id": {"tokenId": "1"}}]})
                return httpx.Response(200, json={"ownedNfts": [{"id": {"tokenId": "2"}}]})
            return fake_alchemy.handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as upstream:
            app = create_app(settings)
            build_services(app, upstream, settings)
            transport = ASGITransport(app=app)

            async with AsyncClient(transport=transport, base_url="http://test") as client:
                first = asyncio.create_task(client.get(f"/api/wallets/{OWNER}/tokens"))
                await first_entered.wait()

                second = await client.get(f"/api/wallets/{OTHER_OWNER}/tokens")

                release_first.set()
                first_response = await first

        first_data = first_response.json()
        assert first_data["owner"] == OWNER
        assert first_data["status"] == "success"
        assert [t["token_id"] for t in first_data["tokens"]] == ["1"]

        second_data = second.json()
        assert second_data["owner"] == OTHER_OWNER
        assert [t["token_id"] for t in second_data["tokens"]] == ["2"]

    async def test_invalid_wallet_address_returns_400(self, test_client, fake_alchemy):
        response = await test_client.get("/api/wallets/not-an-address/tokens")

        assert response.status_code == 400
        assert fake_alchemy.requests == []

    async def test_upstream_failure_is_reported_in_body(self, test_client, settings):
        settings.alchemy_api_key = ""

        response = await test_client.get(f"/api/wallets/{OWNER}/tokens")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failure"
        assert data["error"] == "ALCHEMY_API_KEY is not configured"


@pytest.mark.asyncio
class TestAppRoutes:
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_farcaster_manifest(self, test_client):
        response = await test_client.get("/.well-known/farcaster.json")

        assert response.status_code == 200
        frame = response.json()["frame"]
        assert frame["version"] == "1"
        assert frame["name"] == "Cast Collectibles"
        assert frame["homeUrl"] == "https://viewer.example"
        assert frame["iconUrl"] == "https://viewer.example/icon.png"
        assert "accountAssociation" in response.json()
