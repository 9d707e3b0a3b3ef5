"""Draw configuration and its environment loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .amounts import require_uint
from .errors import ValidationError


@dataclass(frozen=True)
class DrawConfig:
    """Immutable economics of a draw engine.

    Attributes
    ----------
    purchase_ratio : int
        Base currency units paid per credit. Must be positive.
    bet_price : int
        Credits moved into the prize pool for every slot.
    bet_fee : int
        Credits moved into the owner pool for every slot.
    """

    purchase_ratio: int
    bet_price: int
    bet_fee: int

    def __post_init__(self) -> None:
        require_uint(self.purchase_ratio, "purchase_ratio")
        require_uint(self.bet_price, "bet_price")
        require_uint(self.bet_fee, "bet_fee")
        if self.purchase_ratio == 0:
            raise ValidationError("purchase_ratio must be positive")

    @property
    def slot_cost(self) -> int:
        """Credits charged to a bettor for a single slot."""
        return self.bet_price + self.bet_fee


ENV_PURCHASE_RATIO = "ESCROW_PURCHASE_RATIO"
ENV_BET_PRICE = "ESCROW_BET_PRICE"
ENV_BET_FEE = "ESCROW_BET_FEE"


def _read_int(environ: Mapping[str, str], name: str) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        raise ValueError(f"Environment variable '{name}' is not set")
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer") from exc


def load_draw_config(environ: Optional[Mapping[str, str]] = None) -> DrawConfig:
    """Build a :class:`DrawConfig` from environment variables.

    ``.env`` files are honoured through :func:`dotenv.load_dotenv` when no
    explicit mapping is supplied.

    Parameters
    ----------
    environ : Optional[Mapping[str, str]], default: None
        Mapping to read from instead of :data:`os.environ`.

    Returns
    -------
    DrawConfig
        Validated configuration.

    Raises
    ------
    ValueError
        If a variable is missing, is not an integer, or fails validation.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    return DrawConfig(
        purchase_ratio=_read_int(environ, ENV_PURCHASE_RATIO),
        bet_price=_read_int(environ, ENV_BET_PRICE),
        bet_fee=_read_int(environ, ENV_BET_FEE),
    )


__all__ = [
    "DrawConfig",
    "ENV_BET_FEE",
    "ENV_BET_PRICE",
    "ENV_PURCHASE_RATIO",
    "load_draw_config",
]
