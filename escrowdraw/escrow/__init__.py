"""Draw engine, commit-reveal helpers and winner selection."""

from .engine import DEFAULT_ENGINE_ACCOUNT, DrawOutcome, EscrowDrawEngine
from .randomness import (
    EntropySource,
    FixedEntropy,
    WinnerSelection,
    derive_random_number,
    seal_seed,
    select_winner,
    verify_seed,
)

__all__ = [
    "DEFAULT_ENGINE_ACCOUNT",
    "DrawOutcome",
    "EntropySource",
    "EscrowDrawEngine",
    "FixedEntropy",
    "WinnerSelection",
    "derive_random_number",
    "seal_seed",
    "select_winner",
    "verify_seed",
]
