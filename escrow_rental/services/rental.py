from sqlalchemy.orm import Session

import escrow_rental.repositories.event as event_repo
import escrow_rental.repositories.identity as identity_repo
import escrow_rental.repositories.rental as rental_repo
from escrow_rental.core.clock import utcnow
from escrow_rental.db.models.rental import Rental as RentalModel
from escrow_rental.domain.rental_lifecycle import (
    AssetTransfer,
    Deposit,
    Effect,
    Payout,
    RentalEventKind,
    Transition,
    plan_confirmation,
    plan_dispute,
    plan_payment,
    plan_refund,
)
from escrow_rental.errors import (
    DomainValidationError,
    DuplicateItemError,
    NotFoundError,
    UnauthorizedError,
)
from escrow_rental.services.asset_issuer import AssetIssuer, DatabaseAssetIssuer, TokenNamespace
from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger, EscrowLedger
from escrow_rental.services.unit_of_work import operation


def get_rental(db: Session, item_id: int) -> RentalModel:
    rental = rental_repo.get_rental_by_item_id(db, item_id)
    if not rental:
        raise NotFoundError(f"Rental for item {item_id} not found")
    return rental


def _require_verified(db: Session, principal: str) -> None:
    if not identity_repo.is_verified(db, principal):
        raise UnauthorizedError(f"Identity {principal} is not verified")


def _run_effects(
    effects: tuple[Effect, ...], issuer: AssetIssuer, ledger: EscrowLedger
) -> None:
    for effect in effects:
        if isinstance(effect, Deposit):
            ledger.deposit(effect.item_id, effect.payer, effect.amount)
        elif isinstance(effect, Payout):
            ledger.release(effect.item_id, effect.recipient, effect.amount)
        elif isinstance(effect, AssetTransfer):
            issuer.transfer(
                TokenNamespace.ASSET, effect.token_id, effect.from_owner, effect.to_owner
            )
        else:
            raise TypeError(f"Unknown effect {effect!r}")


def apply_transition(
    db: Session,
    rental: RentalModel,
    transition: Transition,
    issuer: AssetIssuer | None = None,
    ledger: EscrowLedger | None = None,
) -> RentalModel:
    """
    Commit a planned transition, then run its external effects.

    The rental's new flags are flushed and the event is appended before any
    token or value moves, so a recipient re-entering the registry during a
    payout sees the updated rental.
    """
    effects = transition.commit(rental)
    rental_repo.save_rental(db, rental)
    event_repo.append_event(
        db,
        kind=transition.event.value,
        item_id=rental.item_id,
        payload=dict(transition.payload),
        created_at=utcnow(),
    )
    if effects:
        _run_effects(
            effects,
            issuer or DatabaseAssetIssuer(db),
            ledger or DatabaseEscrowLedger(db),
        )
    return rental


def create_rental(
    db: Session,
    seller: str,
    item_id: int,
    price: int,
    issuer: AssetIssuer | None = None,
) -> RentalModel:
    """
    List an item for rent.

    - Validates the seller is verified
    - Validates no rental exists for item_id (rentals are permanent history)
    - Validates price is positive
    - Mints a unique asset token owned by the seller
    """
    issuer = issuer or DatabaseAssetIssuer(db)

    with operation(db, "create_rental", seller=seller, item_id=item_id, price=price):
        _require_verified(db, seller)

        if rental_repo.get_rental_by_item_id(db, item_id):
            raise DuplicateItemError(f"Rental already exists for item {item_id}")

        if item_id < 0:
            raise DomainValidationError("item_id must not be negative")
        if price <= 0:
            raise DomainValidationError("price must be greater than 0")

        token_id = issuer.mint(TokenNamespace.ASSET, seller)
        now = utcnow()
        rental = rental_repo.create_rental(
            db,
            item_id=item_id,
            price=price,
            seller=seller,
            asset_token_id=token_id,
            created_at=now,
        )
        event_repo.append_event(
            db,
            kind=RentalEventKind.RENTAL_CREATED.value,
            item_id=item_id,
            payload={"price": price, "token_id": token_id},
            created_at=now,
        )
    return rental


def rent_item(
    db: Session,
    buyer: str,
    item_id: int,
    amount_sent: int,
    issuer: AssetIssuer | None = None,
    ledger: EscrowLedger | None = None,
) -> RentalModel:
    """Pay for a rental. The exact price moves from the buyer into escrow."""
    issuer = issuer or DatabaseAssetIssuer(db)
    ledger = ledger or DatabaseEscrowLedger(db)

    with operation(db, "rent_item", buyer=buyer, item_id=item_id, amount=amount_sent):
        _require_verified(db, buyer)
        rental = get_rental(db, item_id)
        transition = plan_payment(rental, buyer, amount_sent, now=utcnow())
        apply_transition(db, rental, transition, issuer, ledger)
    return rental


def confirm_receipt(
    db: Session,
    buyer: str,
    item_id: int,
    issuer: AssetIssuer | None = None,
    ledger: EscrowLedger | None = None,
) -> RentalModel:
    """Buyer confirms receipt: asset token goes to the buyer, escrow goes to the seller."""
    issuer = issuer or DatabaseAssetIssuer(db)
    ledger = ledger or DatabaseEscrowLedger(db)

    with operation(db, "confirm_receipt", buyer=buyer, item_id=item_id):
        rental = get_rental(db, item_id)
        transition = plan_confirmation(rental, buyer)
        apply_transition(db, rental, transition, issuer, ledger)
    return rental


def refund_buyer(
    db: Session,
    buyer: str,
    item_id: int,
    issuer: AssetIssuer | None = None,
    ledger: EscrowLedger | None = None,
) -> RentalModel:
    """Buyer withdraws before confirming; escrow goes back to the buyer."""
    issuer = issuer or DatabaseAssetIssuer(db)
    ledger = ledger or DatabaseEscrowLedger(db)

    with operation(db, "refund_buyer", buyer=buyer, item_id=item_id):
        rental = get_rental(db, item_id)
        transition = plan_refund(rental, buyer)
        apply_transition(db, rental, transition, issuer, ledger)
    return rental


def raise_dispute(db: Session, buyer: str, item_id: int) -> RentalModel:
    """Buyer flags a paid rental for arbitration. Funds stay in escrow."""
    with operation(db, "raise_dispute", buyer=buyer, item_id=item_id):
        rental = get_rental(db, item_id)
        transition = plan_dispute(rental, buyer)
        apply_transition(db, rental, transition)
    return rental
