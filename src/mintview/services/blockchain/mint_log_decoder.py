"""Decoding of raw mint event logs returned by eth_getLogs.

Mint event log structure:
- topics[0]: Event signature (MINT_EVENT_TOPIC)
- topics[1]: Indexed recipient address (32 bytes, address in last 20 bytes)
- topics[2]: Indexed tokenId (uint256)
- topics[3]: Indexed caster FID (uint256)
- data[0:32]: Cast hash (bytes32, not indexed)
"""

from typing import Any, Optional

import structlog
from eth_utils import to_int

from mintview.models.mint_event import MintEvent

logger = structlog.get_logger()

MIN_TOPICS = 4

# "0x" + 24 hex chars of left padding in front of a 20-byte address
ADDRESS_TOPIC_PREFIX_LEN = 26

# "0x" + 64 hex chars = first 32 bytes of the data payload
CONTENT_HASH_LEN = 66


def _optional_hex_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return to_int(hexstr=value)


def decode_mint_log(log: dict[str, Any]) -> Optional[MintEvent]:
    """Decode a raw log into a MintEvent.

    Args:
        log: Log object from eth_getLogs (hex string fields)

    Returns:
        MintEvent, or None when the log is structurally invalid (fewer than four
        topics, unparsable hex, short address topic). Invalid logs are never
        partially decoded.
    """
    topics = log.get("topics") or []
    if len(topics) < MIN_TOPICS:
        logger.warning(
            "mint_log.invalid_structure",
            topic_count=len(topics),
            transaction_hash=log.get("transactionHash"),
        )
        return None

    try:
        to_address = "0x" + topics[1][ADDRESS_TOPIC_PREFIX_LEN:]
        token_id = str(to_int(hexstr=topics[2]))
        originator_id = str(to_int(hexstr=topics[3]))

        data = log.get("data") or ""
        content_hash = data[:CONTENT_HASH_LEN] if len(data) > 2 else ""

        return MintEvent(
            token_id=token_id,
            to_address=to_address,
            originator_id=originator_id,
            content_hash=content_hash,
            block_number=to_int(hexstr=log["blockNumber"]),
            transaction_hash=log.get("transactionHash") or "",
            log_index=_optional_hex_int(log.get("logIndex")),
            timestamp=_optional_hex_int(log.get("blockTimestamp")),
        )
    except (KeyError, TypeError, ValueError) as e:
        # pydantic.ValidationError is a ValueError
        logger.warning(
            "mint_log.decode_failed",
            error=str(e),
            error_type=type(e).__name__,
            transaction_hash=log.get("transactionHash"),
        )
        return None
