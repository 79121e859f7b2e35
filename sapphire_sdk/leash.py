"""
Leash: the freshness token that binds a signed call to a recent block.

A leash carries the caller's account nonce, a reference block (height and
hash) and the number of blocks after it for which the signed call stays
valid. Construction performs no freshness checks; use :func:`check_leash`
against the current chain height before signing.
"""
import logging
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ._rate_limited_log import rate_limited_log
from .config import get_default_block_range, get_max_block_range
from .exceptions import LeashError

logger = logging.getLogger(__name__)


class Leash(BaseModel):
    """Immutable freshness token embedded in the signed document and the pack."""

    model_config = ConfigDict(frozen=True)

    nonce: int
    block_number: int
    block_hash: bytes
    block_range: int

    @field_validator("block_hash", mode="before")
    @classmethod
    def _hex_block_hash(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return bytes.fromhex(v[2:] if v.startswith("0x") else v)
            except ValueError as e:
                raise ValueError(f"block_hash must be bytes or a hex string: {e}")
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        return v

    @property
    def expires_at(self) -> int:
        """Last block height at which the leash is still honoured."""
        return self.block_number + self.block_range

    def to_message(self) -> Dict[str, Any]:
        """Typed-data sub-message, keys in declared schema order."""
        return {
            "nonce": self.nonce,
            "blockNumber": self.block_number,
            "blockHash": self.block_hash,
            "blockRange": self.block_range,
        }

    def to_cbor_map(self) -> Dict[str, Any]:
        """Wire form used inside a full signed-call pack."""
        return {
            "nonce": self.nonce,
            "block_number": self.block_number,
            "block_hash": self.block_hash,
            "block_range": self.block_range,
        }


def new_leash(
    nonce: int,
    block_number: int,
    block_hash: Union[bytes, str],
    block_range: Optional[int] = None
) -> Leash:
    """
    Create a leash.

    Args:
        nonce: Account nonce of the caller
        block_number: Height of the reference block (should be <= chain head)
        block_hash: Hash of the reference block
        block_range: Blocks after ``block_number`` the call stays valid
            (defaults to the configured block range)
    """
    if block_range is None:
        block_range = get_default_block_range()
    return Leash(
        nonce=nonce,
        block_number=block_number,
        block_hash=block_hash,
        block_range=block_range,
    )


def check_leash(
    leash: Leash,
    current_height: int,
    max_block_range: Optional[int] = None
) -> None:
    """
    Validate a leash against the current chain height.

    Raises:
        LeashError: If the reference block is in the future, the window has
            already elapsed, or the block range exceeds ``max_block_range``
    """
    if max_block_range is None:
        max_block_range = get_max_block_range()

    if leash.block_number > current_height:
        raise LeashError(
            f"Leash block {leash.block_number} is ahead of the chain head {current_height}"
        )
    if current_height > leash.expires_at:
        raise LeashError(
            f"Leash expired at block {leash.expires_at} (current height {current_height})"
        )
    if leash.block_range > max_block_range:
        raise LeashError(
            f"Leash block range {leash.block_range} exceeds the maximum of {max_block_range}"
        )

    default_range = get_default_block_range()
    if leash.block_range > default_range:
        rate_limited_log(
            f"Leash block range {leash.block_range} is wider than the recommended "
            f"{default_range} blocks; signed calls can be replayed for longer",
            logger_instance=logger,
        )
