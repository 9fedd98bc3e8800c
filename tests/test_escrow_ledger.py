import logging

import pytest
from sqlalchemy.orm import Session

import escrow_rental.repositories.event as event_repo
from escrow_rental.db.transaction import atomic
from escrow_rental.errors import (
    DomainError,
    DomainValidationError,
    InvalidStateError,
    NoDisputeError,
    NotFoundError,
    TransferFailedError,
    UnauthorizedError,
)
from escrow_rental.services.account import credit_account
from escrow_rental.services.asset_issuer import DatabaseAssetIssuer, TokenNamespace
from escrow_rental.services.dispute import resolve_dispute
from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger
from escrow_rental.services.rental import (
    confirm_receipt,
    create_rental,
    get_rental,
    raise_dispute,
    refund_buyer,
    rent_item,
)


class ReentrantLedger(DatabaseEscrowLedger):
    """A ledger whose payouts hand control to the recipient, who calls back in."""

    def __init__(self, db: Session, callback):
        super().__init__(db)
        self.callback = callback
        self.reentry_errors = []

    def release(self, item_id: int, recipient: str, amount: int) -> None:
        super().release(item_id, recipient, amount)
        try:
            self.callback(recipient, item_id)
        except DomainError as e:
            self.reentry_errors.append(e)


class FailingIssuer(DatabaseAssetIssuer):
    def transfer(self, namespace, token_id, from_owner, to_owner) -> None:
        raise TransferFailedError("issuer rejected the transfer")


class FailingLedger(DatabaseEscrowLedger):
    def release(self, item_id: int, recipient: str, amount: int) -> None:
        raise TransferFailedError("payout rejected")


@pytest.fixture(scope="function")
def paid(db: Session, seller: str, buyer: str):
    create_rental(db, seller, item_id=1, price=100)
    return rent_item(db, buyer, item_id=1, amount_sent=100)


# ============================================================================
# LEDGER PRIMITIVES
# ============================================================================


def test_credit_and_balance(db: Session, ledger):
    assert ledger.balance_of("0xalice") == 0
    with atomic(db):
        assert ledger.credit("0xalice", 250) == 250
        assert ledger.credit("0xalice", 50) == 300
    assert ledger.balance_of("0xalice") == 300


def test_credit_rejects_non_positive(db: Session, ledger):
    with pytest.raises(DomainValidationError):
        with atomic(db):
            ledger.credit("0xalice", 0)


def test_deposit_and_release(db: Session, ledger, fund):
    fund("0xalice", 100)

    with atomic(db):
        ledger.deposit(7, "0xalice", 100)
    assert ledger.held(7) == 100
    assert ledger.balance_of("0xalice") == 0

    with atomic(db):
        ledger.release(7, "0xbob", 100)
    assert ledger.held(7) == 0
    assert ledger.balance_of("0xbob") == 100


def test_deposit_twice_for_same_item(db: Session, ledger, fund):
    fund("0xalice", 500)
    with atomic(db):
        ledger.deposit(7, "0xalice", 100)

    with pytest.raises(TransferFailedError):
        with atomic(db):
            ledger.deposit(7, "0xalice", 100)
    assert ledger.balance_of("0xalice") == 400


def test_deposit_insufficient_balance(db: Session, ledger):
    with pytest.raises(TransferFailedError):
        with atomic(db):
            ledger.deposit(7, "0xalice", 1)


def test_release_requires_exact_holding(db: Session, ledger, fund):
    fund("0xalice", 100)
    with atomic(db):
        ledger.deposit(7, "0xalice", 100)

    with pytest.raises(TransferFailedError):
        with atomic(db):
            ledger.release(7, "0xbob", 50)
    with pytest.raises(TransferFailedError):
        with atomic(db):
            ledger.release(8, "0xbob", 100)

    assert ledger.held(7) == 100


def test_issuer_transfer_checks_owner(db: Session, issuer):
    with atomic(db):
        token_id = issuer.mint(TokenNamespace.ASSET, "0xalice")

    with pytest.raises(TransferFailedError):
        with atomic(db):
            issuer.transfer(TokenNamespace.ASSET, token_id, "0xbob", "0xcarol")
    with pytest.raises(NotFoundError):
        with atomic(db):
            issuer.transfer(TokenNamespace.ASSET, 99, "0xalice", "0xcarol")

    with atomic(db):
        issuer.transfer(TokenNamespace.ASSET, token_id, "0xalice", "0xbob")
    assert issuer.owner_of(TokenNamespace.ASSET, token_id) == "0xbob"


# ============================================================================
# REENTRANCY
# ============================================================================


def test_reentrant_refund_cannot_release_twice(db: Session, paid, buyer: str):
    def call_back(recipient, item_id):
        refund_buyer(db, recipient, item_id)

    ledger = ReentrantLedger(db, call_back)
    refund_buyer(db, buyer, item_id=1, ledger=ledger)

    assert len(ledger.reentry_errors) == 1
    assert isinstance(ledger.reentry_errors[0], InvalidStateError)
    assert ledger.balance_of(buyer) == 1000
    assert ledger.held(1) == 0


def test_reentrant_dispute_after_confirmation_is_rejected(db: Session, paid, buyer: str, seller: str):
    calls = []

    def call_back(recipient, item_id):
        calls.append(recipient)
        # The seller is paid; the buyer tries to reopen the rental from inside the payout
        raise_dispute(db, buyer, item_id)

    ledger = ReentrantLedger(db, call_back)
    rental = confirm_receipt(db, buyer, item_id=1, ledger=ledger)

    assert calls == [seller]
    assert len(ledger.reentry_errors) == 1
    assert rental.confirmed is True
    assert rental.disputed is False
    assert ledger.balance_of(seller) == 100


def test_reentrant_resolution_cannot_pay_twice(db: Session, paid, buyer: str, admin: str):
    raise_dispute(db, buyer, item_id=1)

    def call_back(recipient, item_id):
        resolve_dispute(db, admin, item_id, decision=False)

    ledger = ReentrantLedger(db, call_back)
    resolve_dispute(db, admin, item_id=1, decision=False, ledger=ledger)

    assert len(ledger.reentry_errors) == 1
    assert isinstance(ledger.reentry_errors[0], NoDisputeError)
    assert ledger.balance_of(buyer) == 1000


def test_failed_reentrant_operation_rolls_back_its_own_changes(
    db: Session, paid, buyer: str, seller: str
):
    create_rental(db, seller, item_id=2, price=5000)

    def call_back(recipient, item_id):
        # Passes every check, marks item 2 paid, then cannot fund the escrow
        rent_item(db, recipient, item_id=2, amount_sent=5000)

    ledger = ReentrantLedger(db, call_back)
    refund_buyer(db, buyer, item_id=1, ledger=ledger)

    assert len(ledger.reentry_errors) == 1
    assert isinstance(ledger.reentry_errors[0], TransferFailedError)

    second = get_rental(db, 2)
    assert second.paid is False
    assert second.buyer is None
    assert ledger.held(2) == 0
    kinds = [event.kind for event in event_repo.get_events_by_item_id(db, 2)]
    assert kinds == ["RentalCreated"]

    # The outer refund still went through
    assert get_rental(db, 1).refunded is True
    assert ledger.held(1) == 0
    assert ledger.balance_of(buyer) == 1000


def test_successful_reentrant_operation_commits_with_outer_unit(
    db: Session, paid, buyer: str, seller: str, caplog
):
    create_rental(db, seller, item_id=2, price=100)

    def call_back(recipient, item_id):
        rent_item(db, recipient, item_id=2, amount_sent=100)

    ledger = ReentrantLedger(db, call_back)
    with caplog.at_level(logging.INFO, logger="escrow_rental.services.unit_of_work"):
        refund_buyer(db, buyer, item_id=1, ledger=ledger)

    assert ledger.reentry_errors == []
    db.expire_all()
    assert get_rental(db, 2).paid is True
    assert ledger.held(2) == 100
    assert ledger.balance_of(buyer) == 900
    # Only the outermost operation reports itself as applied
    assert "refund_buyer applied" in caplog.text
    assert "rent_item applied" not in caplog.text


# ============================================================================
# ATOMIC ROLLBACK
# ============================================================================


def test_failed_token_transfer_rolls_back_confirmation(db: Session, paid, buyer: str, seller: str, ledger):
    with pytest.raises(TransferFailedError):
        confirm_receipt(db, buyer, item_id=1, issuer=FailingIssuer(db))

    rental = get_rental(db, 1)
    assert rental.confirmed is False
    assert rental.received is False
    assert ledger.held(1) == 100
    assert ledger.balance_of(seller) == 0
    kinds = [event.kind for event in event_repo.get_events_by_item_id(db, 1)]
    assert "ReceiptConfirmed" not in kinds

    # The buyer can still confirm once the collaborator recovers
    confirm_receipt(db, buyer, item_id=1)
    assert ledger.balance_of(seller) == 100


def test_failed_payout_rolls_back_resolution(db: Session, paid, buyer: str, admin: str, ledger):
    raise_dispute(db, buyer, item_id=1)

    with pytest.raises(TransferFailedError):
        resolve_dispute(db, admin, item_id=1, decision=True, ledger=FailingLedger(db))

    rental = get_rental(db, 1)
    assert rental.disputed is True
    assert rental.confirmed is False
    assert ledger.held(1) == 100


def test_rejected_operation_is_logged(db: Session, paid, caplog):
    with caplog.at_level(logging.WARNING, logger="escrow_rental.services.unit_of_work"):
        with pytest.raises(UnauthorizedError):
            refund_buyer(db, "0xstranger", item_id=1)

    assert "refund_buyer rejected [UNAUTHORIZED]" in caplog.text


# ============================================================================
# ACCOUNT FUNDING
# ============================================================================


def test_credit_account_as_admin(db: Session, admin: str, ledger):
    assert credit_account(db, admin, "0xalice", 250) == 250
    assert credit_account(db, admin, "0xalice", 50) == 300
    assert ledger.balance_of("0xalice") == 300


def test_credit_account_requires_admin(db: Session, buyer: str, ledger):
    with pytest.raises(UnauthorizedError):
        credit_account(db, buyer, buyer, 500)

    assert ledger.balance_of(buyer) == 1000


def test_credit_account_rejects_non_positive(db: Session, admin: str, ledger):
    with pytest.raises(DomainValidationError):
        credit_account(db, admin, "0xalice", 0)

    assert ledger.balance_of("0xalice") == 0


def test_credit_endpoint(client, admin_headers, headers_for):
    response = client.post(
        "/api/v1/accounts/0xalice/credit", json={"amount": 250}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json() == {"holder": "0xalice", "balance": 250}

    response = client.post(
        "/api/v1/accounts/0xalice/credit", json={"amount": 250}, headers=headers_for("0xalice")
    )
    assert response.status_code == 403
    assert response.json()["code"] == "UNAUTHORIZED"

    response = client.post(
        "/api/v1/accounts/0xalice/credit", json={"amount": 0}, headers=admin_headers
    )
    assert response.status_code == 422

    response = client.post("/api/v1/accounts/0xalice/credit", json={"amount": 10})
    assert response.status_code == 401

    assert client.get("/api/v1/accounts/0xalice").json()["balance"] == 250


def test_funded_rental_flow_over_http(client, admin_headers, headers_for):
    seller_headers = headers_for("0xsam")
    buyer_headers = headers_for("0xbea")
    client.post("/api/v1/identities", headers=seller_headers)
    client.post("/api/v1/identities", headers=buyer_headers)
    client.post("/api/v1/rentals", json={"item_id": 1, "price": 100}, headers=seller_headers)

    response = client.post(
        "/api/v1/rentals/1/payment", json={"amount": 100}, headers=buyer_headers
    )
    assert response.status_code == 402

    client.post("/api/v1/accounts/0xbea/credit", json={"amount": 100}, headers=admin_headers)
    response = client.post(
        "/api/v1/rentals/1/payment", json={"amount": 100}, headers=buyer_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert client.get("/api/v1/accounts/0xbea").json()["balance"] == 0
