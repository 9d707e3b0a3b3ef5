"""Entropy source reading the most recent block identifier from a chain."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .api import ChainClient

logger = logging.getLogger(__name__)


class ChainBlockEntropy:
    """Use the hash of the latest sealed block as the draw's public entropy.

    The hash is public and known to everyone as soon as the block is sealed,
    so it only hides the outcome from parties that do not know the seed.
    """

    def __init__(self, client: Optional["ChainClient"] = None) -> None:
        if client is None:
            from .api import ChainClient

            client = ChainClient()
        self._client = client
        self.last_block_number: Optional[int] = None

    def previous_block_id(self) -> bytes:
        number, block_hash = self._client.latest_block_hash()
        text = block_hash[2:] if block_hash.startswith("0x") else block_hash
        try:
            block_id = bytes.fromhex(text)
        except ValueError as exc:
            raise RuntimeError(f"Block {number} returned a malformed hash") from exc
        self.last_block_number = number
        logger.info("Using block %d (%s) as draw entropy", number, block_hash)
        return block_id
