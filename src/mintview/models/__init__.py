"""Domain records exchanged between fetchers and the API layer."""

from mintview.models.fetch_state import FetchState, FetchStatus, FetchStore
from mintview.models.mint_event import EnrichedMintRecord, MintEvent
from mintview.models.token import OwnedToken, TokenAttribute, TokenMetadata

__all__ = [
    "MintEvent",
    "EnrichedMintRecord",
    "TokenMetadata",
    "TokenAttribute",
    "OwnedToken",
    "FetchState",
    "FetchStatus",
    "FetchStore",
]
