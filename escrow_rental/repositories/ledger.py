from sqlalchemy.orm import Session

from escrow_rental.db.models.ledger import Account as AccountModel, EscrowHolding as EscrowHoldingModel


def get_account(db: Session, holder: str) -> AccountModel | None:
    """Get an account by holder address."""
    return db.get(AccountModel, holder)


def get_or_create_account(db: Session, holder: str) -> AccountModel:
    account = get_account(db, holder)
    if account is None:
        account = AccountModel(holder=holder, balance=0)
        db.add(account)
        db.flush()
    return account


def set_balance(db: Session, account: AccountModel, balance: int) -> AccountModel:
    account.balance = balance
    db.flush()
    return account


def get_holding(db: Session, item_id: int) -> EscrowHoldingModel | None:
    """Get the funds currently held in escrow for an item."""
    return db.get(EscrowHoldingModel, item_id)


def create_holding(db: Session, item_id: int, depositor: str, amount: int) -> EscrowHoldingModel:
    """Create an escrow holding. Pure data access - no business logic."""
    holding = EscrowHoldingModel(item_id=item_id, depositor=depositor, amount=amount)
    db.add(holding)
    db.flush()
    return holding


def delete_holding(db: Session, holding: EscrowHoldingModel) -> None:
    db.delete(holding)
    db.flush()
