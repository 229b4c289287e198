"""Recent mint endpoints.

- GET /api/mints/recent - Current state of the recent-mint scanner
- POST /api/mints/recent/refetch - Re-run discovery and return the new state

A failed refetch still answers 200: the body carries ``error`` alongside the
previous list so the client can show both the old cards and a retry affordance.
"""

import structlog
from fastapi import APIRouter, Depends

from mintview.api.dependencies import get_recent_mint_scanner
from mintview.api.schemas import RecentMintsResponse
from mintview.services.blockchain.recent_mints import RecentMintScanner

logger = structlog.get_logger()
router = APIRouter(prefix="/api/mints", tags=["mints"])


@router.get("/recent", response_model=RecentMintsResponse)
async def get_recent_mints(
    scanner: RecentMintScanner = Depends(get_recent_mint_scanner),
) -> RecentMintsResponse:
    """Return the scanner's latest published state without triggering a scan."""
    return RecentMintsResponse.from_state(scanner.state)


@router.post("/recent/refetch", response_model=RecentMintsResponse)
async def refetch_recent_mints(
    scanner: RecentMintScanner = Depends(get_recent_mint_scanner),
) -> RecentMintsResponse:
    """Re-scan the chain for the latest mints."""
    state = await scanner.refetch()
    logger.info(
        "api.recent_mints.refetched",
        status=state.status.value,
        records=len(state.data),
    )
    return RecentMintsResponse.from_state(state)
