"""Token metadata and owned-token records.

Metadata documents are free-form JSON written by whoever minted the token. The
models below accept any object: scalar text fields are coerced to strings, and
values that cannot be read as text become None. Attribute entries that are not
objects are dropped, so one bad entry never discards the rest of the document.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_text(value: Any) -> Optional[str]:
    """Render a JSON scalar as text; None for null, objects and arrays."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None


class TokenAttribute(BaseModel):
    """Single ``{trait_type, value}`` entry of ERC721 metadata attributes."""

    model_config = ConfigDict(extra="allow")

    trait_type: Optional[str] = None
    value: Any = None
    display_type: Optional[str] = None

    @field_validator("trait_type", "display_type", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)


class TokenMetadata(BaseModel):
    """Off-chain ERC721 metadata document.

    Fetched fresh for every request and never cached. Unknown keys are kept so that
    clients receive the document as the metadata service returned it.
    """

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    image_url: Optional[str] = None
    external_url: Optional[str] = None
    attributes: list[TokenAttribute] = Field(default_factory=list)

    @field_validator("name", "description", "image", "image_url", "external_url", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("attributes", mode="before")
    @classmethod
    def validate_attributes(cls, v: Any) -> list[Any]:
        """Keep object entries only; a missing or non-list value means no attributes."""
        if not isinstance(v, list):
            return []
        return [entry for entry in v if isinstance(entry, dict)]

    def find_attribute(self, trait_type: str) -> Optional[TokenAttribute]:
        """Return the first attribute whose trait_type matches case-insensitively."""
        wanted = trait_type.lower()
        for attribute in self.attributes:
            if attribute.trait_type and attribute.trait_type.lower() == wanted:
                return attribute
        return None


class OwnedToken(BaseModel):
    """Token held by a wallet, joined with its metadata (None when unavailable)."""

    token_id: str
    metadata: Optional[TokenMetadata] = None
    contract_address: str
    chain: str
