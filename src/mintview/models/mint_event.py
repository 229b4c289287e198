"""MintEvent entity - on-chain mint observed by the recent-mint scanner."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from mintview.models.token import TokenMetadata

HEX_ADDRESS = re.compile(r"0x[0-9a-fA-F]{40}")


class MintEvent(BaseModel):
    """One decoded mint log. Built per scan and discarded with it."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    to_address: str
    originator_id: str  # Farcaster FID of the caster
    content_hash: str  # Cast hash (0x + 64 hex) or "" when the log carries no data
    block_number: int
    transaction_hash: str
    log_index: Optional[int] = None
    timestamp: Optional[int] = None

    @field_validator("to_address")
    @classmethod
    def validate_to_address(cls, v: str) -> str:
        """Validate address format (0x + 40 hex characters)."""
        if not HEX_ADDRESS.fullmatch(v):
            raise ValueError("Address must be 0x followed by 40 hex characters")
        return v

    @field_validator("token_id", "originator_id")
    @classmethod
    def validate_decimal(cls, v: str) -> str:
        """Validate decimal string rendering of a uint256."""
        if not v.isdigit():
            raise ValueError("Identifier must be a decimal string")
        return v

    @field_validator("block_number")
    @classmethod
    def validate_block_number(cls, v: int) -> int:
        """Validate block number is non-negative."""
        if v < 0:
            raise ValueError("Block number must be non-negative")
        return v


class EnrichedMintRecord(MintEvent):
    """MintEvent joined with its metadata.

    ``metadata`` is None whenever the metadata service failed for this token; the
    record is still returned and rendered with placeholders.
    """

    metadata: Optional[TokenMetadata] = None
    contract_address: str
    chain: str

    @classmethod
    def from_event(
        cls,
        event: MintEvent,
        metadata: Optional[TokenMetadata],
        contract_address: str,
        chain: str,
    ) -> "EnrichedMintRecord":
        return cls(
            **event.model_dump(),
            metadata=metadata,
            contract_address=contract_address,
            chain=chain,
        )
