"""Commit-reveal helpers and winner selection for the draw engine.

The owner publishes ``sealed = H(len(owner) || owner || seed)`` when the
engine is created and reveals ``seed`` when closing a draw. The winning slot
is derived from the revealed seed mixed with the identifier of the block that
preceded the close:

    random = int(H(previous_block_id || seed))
    index  = random mod len(slots)

``H`` is SHA-256. This is a weak source: whoever knows ``seed`` can compute
the outcome as soon as the previous block is known, and may choose when to
close. Only parties without the seed are unable to predict it.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from ..errors import StateError, ValidationError


@runtime_checkable
class EntropySource(Protocol):
    """Supplies the late-bound public value mixed into winner selection."""

    def previous_block_id(self) -> bytes:
        """Return the identifier of the most recent past block."""
        ...


class FixedEntropy:
    """Entropy source returning a constant block identifier.

    Useful for tests and for re-running the selection of an archived draw.
    """

    def __init__(self, block_id: bytes | str) -> None:
        if isinstance(block_id, str):
            block_id = _bytes_from_hex(block_id)
        if not block_id:
            raise ValidationError("block_id must not be empty")
        self._block_id = bytes(block_id)

    def previous_block_id(self) -> bytes:
        return self._block_id

    def __repr__(self) -> str:
        return f"<FixedEntropy(block_id=0x{self._block_id.hex()})>"


@dataclass(frozen=True)
class WinnerSelection:
    """Outcome of mapping a seed and entropy onto a slot list.

    Attributes
    ----------
    random_number : int
        256-bit integer derived from the seed and the block identifier.
    index : int
        ``random_number`` reduced modulo the slot count.
    winner : str
        Participant identity stored at ``index``.
    block_id : bytes
        Block identifier that was mixed into ``random_number``.
    """

    random_number: int
    index: int
    winner: str
    block_id: bytes


def _bytes_from_hex(value: str) -> bytes:
    text = value.lower()
    if text.startswith("0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValidationError("invalid hex string") from exc


def _seed_bytes(seed: str) -> bytes:
    if not isinstance(seed, str):
        raise TypeError("seed must be a string")
    return seed.encode("utf-8")


def seal_seed(owner: str, seed: str) -> str:
    """Return the hex commitment binding ``owner`` to the secret ``seed``.

    The owner identity is length-prefixed so that distinct ``(owner, seed)``
    pairs never concatenate to the same preimage.
    """
    owner_bytes = owner.encode("utf-8")
    h = hashlib.sha256()
    h.update(len(owner_bytes).to_bytes(4, "big"))
    h.update(owner_bytes)
    h.update(_seed_bytes(seed))
    return h.hexdigest()


def verify_seed(sealed_seed: str, owner: str, seed: str) -> bool:
    """Check ``seed`` against ``sealed_seed`` with a constant-time comparison."""
    expected = seal_seed(owner, seed)
    return hmac.compare_digest(expected, sealed_seed.lower())


def derive_random_number(seed: str, block_id: bytes) -> int:
    """Mix the revealed seed with ``block_id`` into a 256-bit integer."""
    digest = hashlib.sha256(bytes(block_id) + _seed_bytes(seed)).digest()
    return int.from_bytes(digest, "big")


def select_winner(
    seed: str, slots: Sequence[str], entropy: EntropySource
) -> WinnerSelection:
    """Pick the winning slot for ``seed``.

    The function has no side effects and can be called at any time to audit
    what a given seed would select against the current slot list.

    Raises
    ------
    StateError
        If ``slots`` is empty.
    """
    if not slots:
        raise StateError("cannot select a winner from an empty slot list")
    block_id = entropy.previous_block_id()
    random_number = derive_random_number(seed, block_id)
    index = random_number % len(slots)
    return WinnerSelection(
        random_number=random_number,
        index=index,
        winner=slots[index],
        block_id=bytes(block_id),
    )


__all__ = [
    "EntropySource",
    "FixedEntropy",
    "WinnerSelection",
    "derive_random_number",
    "seal_seed",
    "select_winner",
    "verify_seed",
]
