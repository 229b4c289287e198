"""Response models shared by the API routes."""

from typing import Optional

from pydantic import BaseModel, Field

from mintview.models.fetch_state import FetchState, FetchStatus
from mintview.models.mint_event import EnrichedMintRecord
from mintview.models.token import OwnedToken
from mintview.presentation.cards import NFTCard, build_card


class FetchStateResponse(BaseModel):
    """Snapshot of a fetcher's state."""

    status: FetchStatus = Field(..., description="idle, loading, success or failure")
    is_loading: bool
    error: Optional[str] = Field(
        default=None,
        description="Human-readable error of the last call (previous data is kept)",
    )
    generation: int = Field(..., description="Sequence number of the call this state belongs to")
    cards: list[NFTCard] = Field(default_factory=list)


class RecentMintsResponse(FetchStateResponse):
    """Recent mints with raw records and card view-models."""

    records: list[EnrichedMintRecord] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: FetchState[EnrichedMintRecord]) -> "RecentMintsResponse":
        return cls(
            status=state.status,
            is_loading=state.is_loading,
            error=state.error,
            generation=state.generation,
            cards=[build_card(record) for record in state.data],
            records=state.data,
        )


class OwnedTokensResponse(FetchStateResponse):
    """Tokens held by one wallet."""

    owner: str
    tokens: list[OwnedToken] = Field(default_factory=list)

    @classmethod
    def from_state(cls, owner: str, state: FetchState[OwnedToken]) -> "OwnedTokensResponse":
        return cls(
            owner=owner,
            status=state.status,
            is_loading=state.is_loading,
            error=state.error,
            generation=state.generation,
            cards=[build_card(token) for token in state.data],
            tokens=state.data,
        )
