"""Column types shared by the escrow models."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.types import TypeDecorator

# Use BigInteger by default, with a SQLite-safe Integer variant for autoincrement PKs.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class UInt256(TypeDecorator):
    """Unsigned 256-bit integer stored as its decimal string.

    Neither SQLite nor most databases hold 256-bit integers natively, and
    ``Numeric`` round-trips through floats on SQLite.
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value: Optional[int], dialect) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("UInt256 columns only accept int values")
        if value < 0:
            raise ValueError("UInt256 columns only accept non-negative values")
        return str(value)

    def process_result_value(self, value: Optional[str], dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)
