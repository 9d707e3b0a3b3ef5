import os
import itertools
import logging
from typing import Any, Optional

from dotenv import load_dotenv

from .utils import open_session, parse_hex_quantity

logger = logging.getLogger(__name__)


class ChainClient:
    """Minimal Ethereum JSON-RPC client used to read recent block identifiers."""

    def __init__(self, rpc_url: Optional[str] = None, timeout: int = 30):
        load_dotenv()
        url = rpc_url or os.getenv("CHAIN_RPC_URL")
        if not url:
            raise ValueError("Environment variable 'CHAIN_RPC_URL' is not set")

        self.rpc_url = url.rstrip("/")
        self.session = open_session()
        self.timeout = timeout
        self._ids = itertools.count(1)

    # -------- core request --------
    def _rpc(self, method: str, params: Optional[list] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            r = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except Exception as e:
            logger.critical(f"RPC call {method} failed: {e}")
            raise RuntimeError(f"RPC call {method} failed: {e}") from e

        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise RuntimeError(f"RPC call {method} returned an error: {message}")
        return body.get("result")

    # -------- API callers --------
    def block_number(self) -> int:
        return parse_hex_quantity(self._rpc("eth_blockNumber"))

    def get_block(self, number: int) -> dict:
        if number < 0:
            raise ValueError("block number must not be negative")
        block = self._rpc("eth_getBlockByNumber", [hex(number), False])
        if not block:
            raise RuntimeError(f"Block {number} not found")
        return block

    def get_block_hash(self, number: int) -> str:
        block_hash = self.get_block(number).get("hash")
        if not block_hash:
            raise RuntimeError(f"Block {number} has no hash (pending block?)")
        return block_hash

    def latest_block_hash(self) -> tuple[int, str]:
        """Return ``(number, hash)`` of the most recent sealed block."""
        number = self.block_number()
        return number, self.get_block_hash(number)
