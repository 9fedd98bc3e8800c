from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from escrow_rental.api.deps import (
    get_asset_issuer,
    get_current_principal,
    get_db,
    get_escrow_ledger,
)
from escrow_rental.errors import NotFoundError
from escrow_rental.services.account import credit_account
from escrow_rental.services.asset_issuer import AssetIssuer, TokenNamespace
from escrow_rental.services.escrow_ledger import EscrowLedger
import escrow_rental.repositories.token as token_repo
from escrow_rental.schemas.account import Account, AccountCredit, Token

router = APIRouter(tags=["accounts"])


@router.get("/accounts/{address}", response_model=Account)
def get_account_balance(
    address: str,
    ledger: EscrowLedger = Depends(get_escrow_ledger),
):
    return Account(holder=address, balance=ledger.balance_of(address))


@router.post("/accounts/{address}/credit", response_model=Account)
def credit_account_balance(
    address: str,
    credit: AccountCredit,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    """
    Fund an account from outside the marketplace. Administrator only.
    """
    balance = credit_account(db, principal, address, credit.amount)
    return Account(holder=address, balance=balance)


@router.get("/accounts/{address}/tokens", response_model=list[Token])
def get_account_tokens(address: str, db: Session = Depends(get_db)):
    """Tokens currently owned by an address, credentials first."""
    tokens = token_repo.get_tokens_by_owner(db, address)
    return [
        Token(namespace=token.namespace, token_id=token.token_id, owner=token.owner)
        for token in tokens
    ]


@router.get("/tokens/{namespace}/{token_id}", response_model=Token)
def get_token_owner(
    namespace: TokenNamespace,
    token_id: int = Path(..., ge=1),
    issuer: AssetIssuer = Depends(get_asset_issuer),
):
    owner = issuer.owner_of(namespace, token_id)
    if owner is None:
        raise NotFoundError(f"Token {namespace.value}/{token_id} not found")
    return Token(namespace=namespace.value, token_id=token_id, owner=owner)
