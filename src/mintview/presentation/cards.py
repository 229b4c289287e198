"""Card view-models for rendering tokens in the mini-app grid.

Everything here is derived from a record's metadata. A record without metadata
still produces a card (placeholder image, "NFT #<id>" name, no author).
"""

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel

from mintview.models.mint_event import EnrichedMintRecord
from mintview.models.token import OwnedToken, TokenMetadata

PLACEHOLDER_IMAGE = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iMzAwIiBoZWlnaHQ9IjMwMCIgeG1sbnM9Imh0dHA6Ly93d3cu"
    "dzMub3JnLzIwMDAvc3ZnIj48cmVjdCB3aWR0aD0iMzAwIiBoZWlnaHQ9IjMwMCIgZmlsbD0iI2YxZjFmMSIvPjx0ZXh0"
    "IHg9IjUwJSIgeT0iNTAlIiBmb250LWZhbWlseT0iQXJpYWwsIHNhbnMtc2VyaWYiIGZvbnQtc2l6ZT0iMjQiIHRleHQt"
    "YW5jaG9yPSJtaWRkbGUiIGRvbWluYW50LWJhc2VsaW5lPSJtaWRkbGUiIGZpbGw9IiM5OTkiPk5GVCBJbWFnZTwvdGV4"
    "dD48L3N2Zz4="
)

PROFILE_BASE_URL = "https://farcaster.xyz"

# "cast by @someone, " prefix the collection puts in front of names
CAST_BY_PREFIX = re.compile(r"^cast by @[^,\s]+,?\s*", re.IGNORECASE)

LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class AuthorInfo(BaseModel):
    """Author of the cast, either a Farcaster FID or a username."""

    kind: Literal["fid", "username"]
    value: str
    display: str
    profile_url: str


class NFTCard(BaseModel):
    """Everything a client needs to draw one token card."""

    token_id: str
    display_token_id: str
    name: str
    description: Optional[str] = None
    image_url: str
    external_url: Optional[str] = None
    author: Optional[AuthorInfo] = None
    contract_address: str
    chain: str
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None


def strip_cast_prefix(text: str) -> str:
    return CAST_BY_PREFIX.sub("", text).strip()


def parse_leading_int(value: str) -> Optional[int]:
    """Parse the leading integer of a string ("123abc" -> 123), like parseInt."""
    match = LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def derive_author(metadata: Optional[TokenMetadata]) -> Optional[AuthorInfo]:
    """Build AuthorInfo from the "author" attribute.

    A value that parses to a positive integer is an FID; anything else is a
    username.
    """
    if metadata is None:
        return None

    attribute = metadata.find_attribute("author")
    if attribute is None or attribute.value is None:
        return None

    raw = str(attribute.value)
    fid = parse_leading_int(raw)
    if fid is not None and fid > 0:
        return AuthorInfo(
            kind="fid",
            value=str(fid),
            display=f"FID {fid}",
            profile_url=f"{PROFILE_BASE_URL}/{fid}",
        )

    return AuthorInfo(
        kind="username",
        value=raw,
        display=f"@{raw}",
        profile_url=f"{PROFILE_BASE_URL}/{raw}",
    )


def build_card(record: Union[EnrichedMintRecord, OwnedToken]) -> NFTCard:
    metadata = record.metadata
    display_token_id = strip_cast_prefix(record.token_id)

    name = (metadata.name if metadata else None) or f"NFT #{display_token_id}"
    image = (metadata.image or metadata.image_url) if metadata else None

    return NFTCard(
        token_id=record.token_id,
        display_token_id=display_token_id,
        name=strip_cast_prefix(name),
        description=metadata.description if metadata else None,
        image_url=image or PLACEHOLDER_IMAGE,
        external_url=metadata.external_url if metadata else None,
        author=derive_author(metadata),
        contract_address=record.contract_address,
        chain=record.chain,
        block_number=getattr(record, "block_number", None),
        transaction_hash=getattr(record, "transaction_hash", None),
    )
