from sqlalchemy.orm import Session

from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger
from escrow_rental.services.identity import require_admin
from escrow_rental.services.unit_of_work import operation


def credit_account(
    db: Session,
    admin: str,
    holder: str,
    amount: int,
    ledger: DatabaseEscrowLedger | None = None,
) -> int:
    """
    Fund a holder's account from outside the marketplace. Administrator only.

    Returns the holder's new balance.
    """
    ledger = ledger or DatabaseEscrowLedger(db)

    with operation(db, "credit_account", admin=admin, holder=holder, amount=amount):
        require_admin(db, admin)
        balance = ledger.credit(holder, amount)
    return balance
