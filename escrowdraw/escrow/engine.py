"""State machine that collects bets, accounts pools and pays out draws."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..amounts import checked_add, checked_mul, require_uint
from ..config import DrawConfig
from ..errors import (
    AuthorizationError,
    InsufficientFundsError,
    ReentrancyError,
    StateError,
    ValidationError,
)
from ..ledger.base import CreditLedger, CurrencyGateway
from ..ownership import OwnershipCapability
from .randomness import EntropySource, WinnerSelection, select_winner, verify_seed

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ACCOUNT = "escrow-draw"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _non_reentrant(method):
    """Reject calls made while another engine operation is still running."""

    @functools.wraps(method)
    def wrapper(self: "EscrowDrawEngine", *args, **kwargs):
        if self._locked:
            raise ReentrancyError(
                f"{method.__name__} called while another operation is in progress"
            )
        self._locked = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._locked = False

    return wrapper


@dataclass(frozen=True)
class DrawOutcome:
    """Value object describing a completed ``close_draw``.

    Attributes
    ----------
    draw_number : int
        Sequence number of the draw that was closed (1 for the first draw).
    closing_time : datetime
        Closing time the draw was opened with.
    closed_at : datetime
        Clock reading when the close was accepted.
    slot_count : int
        Number of slots that took part.
    prize : int
        Credits moved to the winner's withdrawable balance; ``0`` when empty.
    selection : Optional[WinnerSelection]
        Winner selection details, ``None`` when the draw had no slots.
    """

    draw_number: int
    closing_time: datetime
    closed_at: datetime
    slot_count: int
    prize: int
    selection: Optional[WinnerSelection]

    @property
    def winner(self) -> Optional[str]:
        return self.selection.winner if self.selection is not None else None


class EscrowDrawEngine:
    """Pooled-wagering escrow with a commit-reveal draw.

    The engine is the single aggregate holding the draw state. Credits move
    through an injected :class:`~escrowdraw.ledger.base.CreditLedger`, base
    currency refunds through a
    :class:`~escrowdraw.ledger.base.CurrencyGateway`, and privileged calls are
    checked against an :class:`~escrowdraw.ownership.OwnershipCapability`.

    Every public mutating operation holds a reentrancy lock for its whole
    duration and validates all preconditions before writing state. When a
    collaborator call fails after state was written, the written state is put
    back before the error propagates.
    """

    def __init__(
        self,
        config: DrawConfig,
        ownership: OwnershipCapability,
        sealed_seed: str,
        ledger: CreditLedger,
        currency: CurrencyGateway,
        *,
        entropy: EntropySource,
        clock: Optional[Callable[[], datetime]] = None,
        account: str = DEFAULT_ENGINE_ACCOUNT,
        draws_opened: int = 0,
    ) -> None:
        """Create a closed engine.

        Parameters
        ----------
        config : DrawConfig
            Purchase ratio, bet price and bet fee. Never changes afterwards.
        ownership : OwnershipCapability
            Identifies the privileged account.
        sealed_seed : str
            Hex commitment produced by
            :func:`~escrowdraw.escrow.randomness.seal_seed` for the owner.
        ledger : CreditLedger
            Credit ledger used for every credit movement.
        currency : CurrencyGateway
            Pays base currency back on :meth:`return_credits`.
        entropy : EntropySource
            Supplies the previous block identifier at close time.
        clock : Optional[Callable[[], datetime]], default: None
            Returns the current timezone-aware time. Defaults to UTC now.
        account : str, default: ``"escrow-draw"``
            Ledger identity under which the engine holds pooled credits.
        draws_opened : int, default: 0
            Draws already opened under ``account`` by an earlier engine, so
            numbering continues where it stopped.
        """
        if not isinstance(sealed_seed, str) or not sealed_seed:
            raise ValidationError("sealed_seed must be a non-empty hex string")

        self._config = config
        self._ownership = ownership
        self._sealed_seed = sealed_seed.lower()
        self._ledger = ledger
        self._currency = currency
        self._entropy = entropy
        self._clock = clock or _utcnow
        self._account = account

        self._open = False
        self._closing_time: Optional[datetime] = None
        self._draw_number = require_uint(draws_opened, "draws_opened")
        self._prize_pool = 0
        self._owner_pool = 0
        self._slots: list[str] = []
        self._withdrawable: dict[str, int] = {}
        self._currency_reserve = 0
        self._locked = False

    # -------- read-only views --------
    @property
    def config(self) -> DrawConfig:
        return self._config

    @property
    def account(self) -> str:
        return self._account

    @property
    def sealed_seed(self) -> str:
        return self._sealed_seed

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def closing_time(self) -> Optional[datetime]:
        return self._closing_time

    @property
    def draw_number(self) -> int:
        """Number of draws opened so far."""
        return self._draw_number

    @property
    def prize_pool(self) -> int:
        return self._prize_pool

    @property
    def owner_pool(self) -> int:
        return self._owner_pool

    @property
    def slots(self) -> tuple[str, ...]:
        return tuple(self._slots)

    @property
    def slot_count(self) -> int:
        return len(self._slots)

    @property
    def currency_reserve(self) -> int:
        """Base currency collected by purchases and not yet refunded."""
        return self._currency_reserve

    def withdrawable_prize(self, account: str) -> int:
        return self._withdrawable.get(account, 0)

    def preview_winner(self, seed: str) -> WinnerSelection:
        """Return what ``seed`` would select against the current slots.

        This is a pure query: it neither checks the seed against the sealed
        commitment nor changes any state.
        """
        return select_winner(seed, self._slots, self._entropy)

    # -------- internal helpers --------
    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            raise ValidationError("clock must return timezone-aware datetimes")
        return now

    def _require_betting(self) -> None:
        if not self._open or self._closing_time is None:
            raise StateError("draw closed")
        if self._now() >= self._closing_time:
            raise StateError("draw closed")

    # -------- lifecycle --------
    @_non_reentrant
    def open_draw(self, caller: str, closing_time: datetime) -> None:
        """Open a new draw that accepts bets until ``closing_time``.

        Raises
        ------
        AuthorizationError
            If ``caller`` is not the owner.
        StateError
            If a draw is already open.
        ValidationError
            If ``closing_time`` is naive or not strictly in the future.
        """
        self._ownership.require_owner(caller)
        if self._open:
            raise StateError("draw is already open")
        if not isinstance(closing_time, datetime):
            raise ValidationError("closing_time must be a datetime")
        if closing_time.tzinfo is None:
            raise ValidationError("closing_time must be timezone-aware")
        if closing_time <= self._now():
            raise ValidationError("closing_time must be in the future")

        self._open = True
        self._closing_time = closing_time
        self._draw_number += 1
        logger.info(
            "Draw %d opened, closing at %s",
            self._draw_number,
            closing_time.isoformat(),
        )

    @_non_reentrant
    def close_draw(self, caller: str, reveal_seed: str) -> DrawOutcome:
        """Close the open draw by revealing the sealed seed.

        Anyone who knows the seed may close; the seed is checked against the
        commitment for the *current* owner. The draw is marked closed before
        the winner is computed. With at least one slot the whole prize pool
        moves to the winner's withdrawable balance and the slots are cleared.

        Parameters
        ----------
        caller : str
            Identity performing the close (only used for logging).
        reveal_seed : str
            Secret seed whose commitment was supplied at construction.

        Returns
        -------
        DrawOutcome
            Summary of the closed draw.

        Raises
        ------
        StateError
            If no draw is open or ``closing_time`` has not been reached.
        AuthorizationError
            If the seed does not match the sealed commitment ("wrong seed").
        """
        if not self._open or self._closing_time is None:
            raise StateError("draw is not open")
        now = self._now()
        if now < self._closing_time:
            raise StateError("draw cannot be closed before its closing time")
        if not isinstance(reveal_seed, str):
            raise ValidationError("reveal_seed must be a string")
        if not verify_seed(
            self._sealed_seed, self._ownership.current_owner(), reveal_seed
        ):
            raise AuthorizationError("wrong seed")

        self._open = False

        slot_count = len(self._slots)
        selection: Optional[WinnerSelection] = None
        if slot_count:
            try:
                selection = select_winner(reveal_seed, self._slots, self._entropy)
            except Exception:
                # The entropy source failed; the draw stays open for a retry.
                self._open = True
                raise

        prize = 0
        if selection is not None:
            prize = self._prize_pool
            self._withdrawable[selection.winner] = checked_add(
                self.withdrawable_prize(selection.winner), prize
            )
            self._prize_pool = 0
            self._slots.clear()
            logger.info(
                "Draw %d closed by %s: %s won %d credits (slot %d of %d)",
                self._draw_number,
                caller,
                selection.winner,
                prize,
                selection.index,
                slot_count,
            )
        else:
            logger.info(
                "Draw %d closed by %s without participants", self._draw_number, caller
            )

        return DrawOutcome(
            draw_number=self._draw_number,
            closing_time=self._closing_time,
            closed_at=now,
            slot_count=slot_count,
            prize=prize,
            selection=selection,
        )

    # -------- credits --------
    @_non_reentrant
    def purchase_credits(self, caller: str, payment: int) -> int:
        """Mint ``payment // purchase_ratio`` credits to ``caller``.

        The remainder of the division is kept by the engine and not refunded.

        Returns
        -------
        int
            Number of credits minted.
        """
        require_uint(payment, "payment")
        credits = payment // self._config.purchase_ratio
        new_reserve = checked_add(self._currency_reserve, payment)

        self._currency_reserve = new_reserve
        try:
            self._ledger.mint(caller, credits)
        except Exception:
            self._currency_reserve -= payment
            raise
        logger.debug(
            "%s purchased %d credits for %d currency units", caller, credits, payment
        )
        return credits

    @_non_reentrant
    def return_credits(self, caller: str, amount: int) -> int:
        """Burn ``amount`` of ``caller``'s credits and refund base currency.

        ``caller`` must have authorized the engine account to burn ``amount``.
        The refund is ``amount * purchase_ratio`` and does not depend on the
        draw state.

        Returns
        -------
        int
            Base currency units paid back.

        Raises
        ------
        InsufficientFundsError
            If the reserve cannot cover the refund, or the ledger rejects the
            burn for missing balance or allowance.
        """
        require_uint(amount, "amount")
        refund = checked_mul(amount, self._config.purchase_ratio)
        if refund > self._currency_reserve:
            raise InsufficientFundsError(
                "currency reserve cannot cover the requested refund"
            )

        self._ledger.burn_from(self._account, caller, amount)
        self._currency_reserve -= refund
        try:
            self._currency.send(caller, refund)
        except Exception as send_error:
            self._currency_reserve += refund
            try:
                self._ledger.mint(caller, amount)
            except Exception as mint_error:
                logger.critical(
                    "Refund of %d to %s failed and %d burned credits could not "
                    "be re-minted: %s",
                    refund,
                    caller,
                    amount,
                    mint_error,
                )
                raise mint_error from send_error
            raise
        logger.debug(
            "%s returned %d credits for %d currency units", caller, amount, refund
        )
        return refund

    # -------- bets --------
    def _place(self, caller: str, times: int) -> None:
        self._require_betting()
        cost = checked_mul(self._config.slot_cost, times)
        new_prize_pool = checked_add(
            self._prize_pool, checked_mul(self._config.bet_price, times)
        )
        new_owner_pool = checked_add(
            self._owner_pool, checked_mul(self._config.bet_fee, times)
        )

        self._ledger.pull_transfer(self._account, caller, self._account, cost)

        self._prize_pool = new_prize_pool
        self._owner_pool = new_owner_pool
        self._slots.extend([caller] * times)
        logger.debug(
            "%s placed %d bet(s) in draw %d (%d slots)",
            caller,
            times,
            self._draw_number,
            len(self._slots),
        )

    @_non_reentrant
    def place_bet(self, caller: str) -> None:
        """Buy one slot in the open draw for ``bet_price + bet_fee`` credits."""
        self._place(caller, 1)

    @_non_reentrant
    def place_bets(self, caller: str, times: int) -> None:
        """Buy ``times`` slots with a single pull-transfer.

        Raises
        ------
        ValidationError
            If ``times`` is not a positive integer or the total cost overflows.
        StateError
            If the draw is closed or its closing time has passed.
        """
        require_uint(times, "times")
        if times == 0:
            raise ValidationError("times must be greater than zero")
        self._place(caller, times)

    # -------- withdrawals --------
    @_non_reentrant
    def withdraw_prize(self, caller: str, amount: int) -> None:
        """Transfer ``amount`` of ``caller``'s winnings out of the escrow."""
        require_uint(amount, "amount")
        balance = self.withdrawable_prize(caller)
        if amount > balance:
            raise InsufficientFundsError("insufficient prize")
        if amount == 0:
            return

        if amount == balance:
            del self._withdrawable[caller]
        else:
            self._withdrawable[caller] = balance - amount
        try:
            self._ledger.transfer(self._account, caller, amount)
        except Exception:
            self._withdrawable[caller] = balance
            raise
        logger.debug("%s withdrew %d prize credits", caller, amount)

    @_non_reentrant
    def withdraw_owner_pool(self, caller: str, amount: int) -> None:
        """Transfer ``amount`` of accumulated fees to the owner."""
        self._ownership.require_owner(caller)
        require_uint(amount, "amount")
        if amount > self._owner_pool:
            raise InsufficientFundsError("insufficient owner pool")

        owner = self._ownership.current_owner()
        self._owner_pool -= amount
        try:
            self._ledger.transfer(self._account, owner, amount)
        except Exception:
            self._owner_pool += amount
            raise
        logger.debug("Owner %s withdrew %d fee credits", owner, amount)

    def __repr__(self) -> str:
        return (
            f"<EscrowDrawEngine(draw_number={self._draw_number}, open={self._open}, "
            f"slots={len(self._slots)}, prize_pool={self._prize_pool}, "
            f"owner_pool={self._owner_pool})>"
        )


__all__ = ["DEFAULT_ENGINE_ACCOUNT", "DrawOutcome", "EscrowDrawEngine"]
