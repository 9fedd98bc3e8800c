"""Rental lifecycle state machine.

Semantics (intentionally centralized):
- Created -> Paid -> {Confirmed, Disputed, Refunded}
- Disputed -> {Confirmed, Refunded}, through the arbiter only
- Confirmed and Refunded are terminal. An item id is never re-listed.

The ``plan_*`` functions validate a request against a rental's flags and
return a ``Transition``. They never touch the rental or any collaborator.
Services apply a transition with ``Transition.commit(rental)``, which writes
the field changes first and only then hands back the external effects
(escrow deposit, payouts, asset transfer) for the caller to run. This keeps
state committed before any value or token leaves the registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from escrow_rental.errors import (
    InvalidStateError,
    NoDisputeError,
    PaymentMismatchError,
    UnauthorizedError,
)


class RentalStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    DISPUTED = "disputed"
    CONFIRMED = "confirmed"
    REFUNDED = "refunded"


class RentalEventKind(str, Enum):
    RENTAL_CREATED = "RentalCreated"
    RENTAL_PAID = "RentalPaid"
    RECEIPT_CONFIRMED = "ReceiptConfirmed"
    REFUND_ISSUED = "RefundIssued"
    DISPUTE_RAISED = "DisputeRaised"
    RENTAL_RESOLVED = "RentalResolved"


TERMINAL_STATUSES = frozenset({RentalStatus.CONFIRMED, RentalStatus.REFUNDED})


def status_of(rental) -> RentalStatus:
    """Derive the lifecycle status from a rental's flags."""
    if rental.confirmed:
        return RentalStatus.CONFIRMED
    if rental.refunded:
        return RentalStatus.REFUNDED
    if rental.disputed:
        return RentalStatus.DISPUTED
    if rental.paid:
        return RentalStatus.PAID
    return RentalStatus.CREATED


def sqlalchemy_status_predicate(status: RentalStatus, *, model):
    """Build a SQLAlchemy predicate matching ``status_of(rental) == status``.

    Kept here so repositories can filter by status without redefining the
    precedence between flags.
    """
    from sqlalchemy import and_

    if status is RentalStatus.CONFIRMED:
        return model.confirmed.is_(True)
    if status is RentalStatus.REFUNDED:
        return and_(model.confirmed.is_(False), model.refunded.is_(True))
    if status is RentalStatus.DISPUTED:
        return and_(
            model.confirmed.is_(False),
            model.refunded.is_(False),
            model.disputed.is_(True),
        )
    if status is RentalStatus.PAID:
        return and_(
            model.confirmed.is_(False),
            model.refunded.is_(False),
            model.disputed.is_(False),
            model.paid.is_(True),
        )
    return and_(
        model.confirmed.is_(False),
        model.refunded.is_(False),
        model.disputed.is_(False),
        model.paid.is_(False),
    )


@dataclass(frozen=True, slots=True)
class Deposit:
    """Accept exactly ``amount`` from ``payer`` into escrow for the item."""

    item_id: int
    payer: str
    amount: int


@dataclass(frozen=True, slots=True)
class Payout:
    """Release ``amount`` held for the item to ``recipient``."""

    item_id: int
    recipient: str
    amount: int


@dataclass(frozen=True, slots=True)
class AssetTransfer:
    token_id: int
    from_owner: str
    to_owner: str


Effect = Union[Deposit, Payout, AssetTransfer]


@dataclass(frozen=True, slots=True)
class Transition:
    event: RentalEventKind
    payload: Mapping[str, Any]
    changes: Mapping[str, Any]
    _effects: tuple[Effect, ...] = field(default=(), repr=False)

    def commit(self, rental) -> tuple[Effect, ...]:
        """Apply the field changes to ``rental`` and return the effects to run."""
        for name, value in self.changes.items():
            setattr(rental, name, value)
        return self._effects


def _require_buyer(rental, caller: str) -> None:
    # Checked before any flag so a non-buyer is always told Unauthorized.
    if rental.buyer is None or rental.buyer != caller:
        raise UnauthorizedError(f"Only the buyer of item {rental.item_id} may do this")


def plan_payment(rental, buyer: str, amount_sent: int, now: datetime) -> Transition:
    if rental.paid:
        raise InvalidStateError(f"Item {rental.item_id} is already paid")
    if status_of(rental) in TERMINAL_STATUSES:
        raise InvalidStateError(
            f"Item {rental.item_id} is {status_of(rental).value} and cannot be rented again"
        )
    if amount_sent != rental.price:
        raise PaymentMismatchError(
            f"Item {rental.item_id} costs {rental.price}, got {amount_sent}"
        )
    return Transition(
        RentalEventKind.RENTAL_PAID,
        {"buyer": buyer},
        {"buyer": buyer, "paid": True, "created_at": now},
        (Deposit(rental.item_id, buyer, amount_sent),),
    )


def plan_confirmation(rental, caller: str) -> Transition:
    _require_buyer(rental, caller)
    if not rental.paid or rental.confirmed:
        raise InvalidStateError(f"Item {rental.item_id} is not awaiting confirmation")
    if rental.disputed:
        raise InvalidStateError(f"Item {rental.item_id} has an open dispute")
    return Transition(
        RentalEventKind.RECEIPT_CONFIRMED,
        {},
        {"received": True, "confirmed": True},
        (
            AssetTransfer(rental.asset_token_id, rental.seller, rental.buyer),
            Payout(rental.item_id, rental.seller, rental.price),
        ),
    )


def plan_refund(rental, caller: str) -> Transition:
    _require_buyer(rental, caller)
    if not rental.paid or rental.confirmed:
        raise InvalidStateError(f"Item {rental.item_id} cannot be refunded")
    if rental.disputed:
        raise InvalidStateError(f"Item {rental.item_id} has an open dispute")
    return Transition(
        RentalEventKind.REFUND_ISSUED,
        {"buyer": rental.buyer},
        {"paid": False, "refunded": True},
        (Payout(rental.item_id, rental.buyer, rental.price),),
    )


def plan_dispute(rental, caller: str) -> Transition:
    _require_buyer(rental, caller)
    if not rental.paid or rental.disputed or rental.confirmed:
        raise InvalidStateError(f"Item {rental.item_id} cannot be disputed")
    return Transition(
        RentalEventKind.DISPUTE_RAISED,
        {},
        {"disputed": True},
    )


def plan_resolution(rental, decision: bool) -> Transition:
    """Settle an open dispute: ``True`` pays the seller, ``False`` refunds the buyer."""
    if not rental.disputed:
        raise NoDisputeError(f"Item {rental.item_id} has no open dispute")
    if decision:
        changes = {"disputed": False, "confirmed": True}
        payout = Payout(rental.item_id, rental.seller, rental.price)
    else:
        changes = {"disputed": False, "paid": False, "refunded": True}
        payout = Payout(rental.item_id, rental.buyer, rental.price)
    return Transition(
        RentalEventKind.RENTAL_RESOLVED,
        {"decision": decision},
        changes,
        (payout,),
    )
