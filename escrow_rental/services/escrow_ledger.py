"""Value held in escrow per item, on top of per-holder account balances."""

from typing import Protocol

from sqlalchemy.orm import Session

import escrow_rental.repositories.ledger as ledger_repo
from escrow_rental.errors import DomainValidationError, TransferFailedError


class EscrowLedger(Protocol):
    """
    What the marketplace needs from a value-transfer primitive.

    ``deposit`` accepts exactly ``amount`` from ``payer`` into escrow for an
    item; ``release`` pays the held ``amount`` out to ``recipient``. Both are
    atomic and raise ``TransferFailedError`` on failure. ``release`` may run
    code on the recipient's behalf, so callers commit their own state first.
    """

    def deposit(self, item_id: int, payer: str, amount: int) -> None:
        ...

    def release(self, item_id: int, recipient: str, amount: int) -> None:
        ...

    def held(self, item_id: int) -> int:
        ...

    def balance_of(self, holder: str) -> int:
        ...


class DatabaseEscrowLedger:
    """EscrowLedger backed by the accounts and escrow_holdings tables."""

    def __init__(self, db: Session):
        self.db = db

    def credit(self, holder: str, amount: int) -> int:
        """Add funds to a holder's account from outside the marketplace."""
        if amount <= 0:
            raise DomainValidationError("Credit amount must be greater than 0")
        account = ledger_repo.get_or_create_account(self.db, holder)
        ledger_repo.set_balance(self.db, account, account.balance + amount)
        return account.balance

    def deposit(self, item_id: int, payer: str, amount: int) -> None:
        if amount <= 0:
            raise TransferFailedError("Deposit amount must be greater than 0")
        if ledger_repo.get_holding(self.db, item_id) is not None:
            raise TransferFailedError(f"Funds are already held for item {item_id}")

        account = ledger_repo.get_account(self.db, payer)
        balance = account.balance if account else 0
        if balance < amount:
            raise TransferFailedError(
                f"Insufficient balance for {payer}: has {balance}, needs {amount}"
            )

        ledger_repo.set_balance(self.db, account, balance - amount)
        ledger_repo.create_holding(self.db, item_id, payer, amount)

    def release(self, item_id: int, recipient: str, amount: int) -> None:
        holding = ledger_repo.get_holding(self.db, item_id)
        if holding is None:
            raise TransferFailedError(f"No funds held for item {item_id}")
        if holding.amount != amount:
            raise TransferFailedError(
                f"Item {item_id} holds {holding.amount}, cannot release {amount}"
            )

        ledger_repo.delete_holding(self.db, holding)
        account = ledger_repo.get_or_create_account(self.db, recipient)
        ledger_repo.set_balance(self.db, account, account.balance + amount)

    def held(self, item_id: int) -> int:
        holding = ledger_repo.get_holding(self.db, item_id)
        return holding.amount if holding else 0

    def balance_of(self, holder: str) -> int:
        account = ledger_repo.get_account(self.db, holder)
        return account.balance if account else 0
