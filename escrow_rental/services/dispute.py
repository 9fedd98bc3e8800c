from sqlalchemy.orm import Session

from escrow_rental.db.models.rental import Rental as RentalModel
from escrow_rental.domain.rental_lifecycle import plan_resolution
from escrow_rental.services.asset_issuer import AssetIssuer, DatabaseAssetIssuer
from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger, EscrowLedger
from escrow_rental.services.identity import require_admin
from escrow_rental.services.rental import apply_transition, get_rental
from escrow_rental.services.unit_of_work import operation


def resolve_dispute(
    db: Session,
    admin: str,
    item_id: int,
    decision: bool,
    issuer: AssetIssuer | None = None,
    ledger: EscrowLedger | None = None,
) -> RentalModel:
    """
    Settle an open dispute. Only the administrator may resolve.

    - decision=True: rental is confirmed and the escrowed price goes to the seller
    - decision=False: rental ends refunded and the escrowed price goes to the buyer

    Either way the dispute flag is cleared.
    """
    issuer = issuer or DatabaseAssetIssuer(db)
    ledger = ledger or DatabaseEscrowLedger(db)

    with operation(db, "resolve_dispute", admin=admin, item_id=item_id, decision=decision):
        require_admin(db, admin)
        rental = get_rental(db, item_id)
        transition = plan_resolution(rental, decision)
        apply_transition(db, rental, transition, issuer, ledger)
    return rental
